"""
Deterministic PV generation profile.

Replaces weather-driven irradiance with a bell curve centred on solar noon
scaled by a fixed monthly seasonality multiplier.
"""

from __future__ import annotations

from typing import List

import numpy as np

MONTH_NAMES: List[str] = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

SEASONALITY = np.array([0.8, 0.9, 1.1, 1.2, 1.25, 1.1, 1.0, 0.95, 0.95, 1.0, 0.9, 0.8])
"""Relative monthly yield (January = index 0)."""

BELL_SIGMA_HOURS = 2.5
DAYLIGHT_FIRST_HOUR = 6
DAYLIGHT_LAST_HOUR = 18


class SolarModel:
    """
    Hourly AC generation of a PV array on a representative day.

    Generation at hour ``h`` of month ``m``::

        kWp * exp(-(h - 12)^2 / (2 * 2.5^2)) * SEASONALITY[m] * shadow_derate * inverter_efficiency

    and zero outside ``[6, 18]``.

    Attributes:
        pv_kwp: DC nameplate capacity (kWp).
        shadow_derate: ``1 - shadow loss`` (0-1).
        inverter_efficiency: Capacity-weighted inverter efficiency (0-1).
        hourly_shape: Unscaled bell curve per hour (kW per kWp), shape (24,).
    """

    def __init__(
        self,
        pv_kwp: float,
        shadow_derate: float = 1.0,
        inverter_efficiency: float = 0.975,
    ) -> None:
        if not 0.0 <= shadow_derate <= 1.0:
            raise ValueError("shadow_derate must be between 0 and 1")
        self.pv_kwp = pv_kwp
        self.shadow_derate = shadow_derate
        self.inverter_efficiency = inverter_efficiency

        hours = np.arange(24)
        daylight = (hours >= DAYLIGHT_FIRST_HOUR) & (hours <= DAYLIGHT_LAST_HOUR)
        x = hours[daylight] - 12.0
        self.hourly_shape = np.zeros(24)
        self.hourly_shape[daylight] = np.exp(-(x ** 2) / (2 * BELL_SIGMA_HOURS ** 2))

    def unshaded_profile_kw(self, month: int) -> np.ndarray:
        """Hourly generation (kW) for ``month`` before the shadow derate."""
        return self.pv_kwp * self.hourly_shape * SEASONALITY[month] * self.inverter_efficiency

    def daily_profile_kw(self, month: int) -> np.ndarray:
        """Hourly generation (kW) for ``month`` including the shadow derate."""
        return self.unshaded_profile_kw(month) * self.shadow_derate

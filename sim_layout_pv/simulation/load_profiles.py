"""
Synthetic consumption profiles for the energy balance.

A layout's demand is a monthly energy figure (baseline units plus the units of
every load box) shaped into a representative 24-hour day.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .layout import Layout, ObjectType

PEAK_HOURS = (7, 8, 9, 18, 19, 20, 21, 22)
NIGHT_HOURS = (1, 2, 3, 4, 5)
PEAK_MULTIPLIER = 1.5
NIGHT_MULTIPLIER = 0.5
DAYS_PER_MONTH = 30
HOURS_PER_MONTH = 720.0


def build_hourly_multipliers(
    peak_hours: Iterable[int] = PEAK_HOURS,
    night_hours: Iterable[int] = NIGHT_HOURS,
) -> np.ndarray:
    """
    Build the 24-hour demand shape.

    Returns:
        Array of shape (24,) with 1.5 on the morning/evening peaks, 0.5
        overnight and 1.0 elsewhere.
    """
    multipliers = np.ones(24)
    multipliers[list(peak_hours)] = PEAK_MULTIPLIER
    multipliers[list(night_hours)] = NIGHT_MULTIPLIER
    return multipliers


HOURLY_MULTIPLIERS = build_hourly_multipliers()


def total_monthly_load(layout: Layout, base_load: float) -> float:
    """Monthly demand in kWh: ``base_load`` plus the units of every load box."""
    return base_load + sum(obj.units for obj in layout.of_type(ObjectType.LOAD))


class LoadProfile:
    """
    Interface of hourly consumption models.

    Subclasses implement :meth:`get_hourly_load_kw`; the simulator queries it
    once per simulated hour.
    """

    def get_hourly_load_kw(self, month_in_year: int, hour_in_day: int) -> float:
        raise NotImplementedError

    def daily_profile_kw(self, month_in_year: int) -> np.ndarray:
        return np.array([self.get_hourly_load_kw(month_in_year, h) for h in range(24)])


class DailyShapeLoadProfile(LoadProfile):
    """
    Same shaped day for every month.

    Hourly load is ``monthly_load_kwh / 30 / 24 * multiplier[hour]``. The
    multipliers are not normalised, so one shaped day sums to slightly more
    than a thirtieth of the monthly figure.

    Example:
        ```python
        profile = DailyShapeLoadProfile(monthly_load_kwh=720.0)
        profile.get_hourly_load_kw(0, 3)   # 0.5 kW (night)
        profile.get_hourly_load_kw(0, 19)  # 1.5 kW (evening peak)
        ```
    """

    def __init__(self, monthly_load_kwh: float, multipliers: np.ndarray | None = None) -> None:
        if monthly_load_kwh < 0:
            raise ValueError("monthly_load_kwh must be >= 0")
        shape = HOURLY_MULTIPLIERS if multipliers is None else np.asarray(multipliers, dtype=float)
        if shape.shape != (24,):
            raise ValueError("multipliers must have shape (24,)")
        self.monthly_load_kwh = monthly_load_kwh
        self.hourly_kw = monthly_load_kwh / DAYS_PER_MONTH / 24.0 * shape

    @classmethod
    def from_layout(cls, layout: Layout, base_load: float) -> "DailyShapeLoadProfile":
        return cls(total_monthly_load(layout, base_load))

    def get_hourly_load_kw(self, month_in_year: int, hour_in_day: int) -> float:
        return float(self.hourly_kw[hour_in_day])

    def daily_profile_kw(self, month_in_year: int) -> np.ndarray:
        return self.hourly_kw.copy()

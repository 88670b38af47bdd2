"""
25-year financial projection of a layout.

Combines panel degradation, optional accelerated depreciation (commercial
WDV method) and cumulative savings into yearly records with a break-even
point, plus summary ROI metrics.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .layout import Layout, ObjectType
from .load_profiles import HOURS_PER_MONTH

PROJECTION_YEARS = 25
TAX_RATE = 0.30
FIRST_YEAR_DEPRECIATION = 0.60
LATER_YEAR_DEPRECIATION = 0.40
BACKUP_DEPTH_OF_DISCHARGE = 0.8

BREAK_EVEN = "Break Even"
PROFITABLE = "Profitable"
RECOVERING = "Recovering"


@dataclass(frozen=True)
class DegradationModel:
    """
    Linear panel degradation.

    Attributes:
        first_year_pct: Loss applied from year 1 (percent).
        annual_pct: Additional loss per year after the first (percent).
    """

    first_year_pct: float = 2.0
    annual_pct: float = 0.4

    @classmethod
    def from_layout(cls, layout: Layout) -> "DegradationModel":
        """Read the rates from the first panel's specifications, if any."""
        panels = layout.of_type(ObjectType.PANEL)
        if not panels:
            return cls()
        first = panels[0]
        return cls(
            first_year_pct=first.spec_float("degradation_first_year", cls.first_year_pct),
            annual_pct=first.spec_float("degradation_annual", cls.annual_pct),
        )

    def factor(self, year: int) -> float:
        """Output multiplier of ``year`` (1-based), never negative."""
        loss = self.first_year_pct / 100.0
        if year > 1:
            loss += (year - 1) * self.annual_pct / 100.0
        return max(0.0, 1.0 - loss)


def accelerated_depreciation(system_cost: float, years: int = PROJECTION_YEARS) -> np.ndarray:
    """
    Yearly tax benefit of WDV accelerated depreciation.

    Year 1 writes off 60 % of the book value, every later year 40 % of the
    remaining book value; the benefit is the write-off times the 30 % tax
    rate.

    Returns:
        Array of shape (years,) with the benefit of each year.
    """
    benefits = np.zeros(years)
    book_value = system_cost
    for i in range(years):
        rate = FIRST_YEAR_DEPRECIATION if i == 0 else LATER_YEAR_DEPRECIATION
        depreciation = book_value * rate
        book_value -= depreciation
        benefits[i] = depreciation * TAX_RATE
    return benefits


@dataclass
class YearlyRecord:
    year: int
    generation: float
    savings: float
    energy_savings: float
    ad_benefit: float
    cumulative: float
    roi_status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "generation": self.generation,
            "savings": self.savings,
            "energySavings": self.energy_savings,
            "adBenefit": self.ad_benefit,
            "cumulative": self.cumulative,
            "roiStatus": self.roi_status,
        }


@dataclass
class FinancialProjection:
    """
    Attributes:
        system_cost: Installed cost the projection pays back.
        yearly: One record per projected year.
        break_even_year: First year whose cumulative savings reach the cost,
            ``None`` if never reached.
        break_even_month: Month (1-12) of the break-even year, 0 when there
            is no break-even.
    """

    system_cost: float
    yearly: List[YearlyRecord] = field(default_factory=list)
    break_even_year: Optional[int] = None
    break_even_month: int = 0

    @property
    def df_yearly(self) -> pd.DataFrame:
        return pd.DataFrame([record.__dict__ for record in self.yearly])

    @property
    def cumulative_savings(self) -> float:
        return self.yearly[-1].cumulative if self.yearly else 0.0


def project_financials(
    annual_generation: float,
    annual_savings: float,
    system_cost: float,
    degradation: DegradationModel | None = None,
    is_commercial: bool = False,
    years: int = PROJECTION_YEARS,
) -> FinancialProjection:
    """
    Project yearly generation, savings and payback.

    Args:
        annual_generation: First-year generation before degradation (kWh).
        annual_savings: First-year savings before degradation.
        system_cost: Installed cost.
        degradation: Panel degradation; defaults to 2 % then 0.4 %/year.
        is_commercial: Adds the accelerated depreciation benefit.
        years: Projection horizon.

    Returns:
        FinancialProjection with ``years`` records.

    Example:
        >>> p = project_financials(0.0, 20000.0, 100000.0, DegradationModel(0.0, 0.0))
        >>> (p.break_even_year, p.break_even_month)
        (5, 12)
    """
    degradation = degradation or DegradationModel()
    ad_benefits = accelerated_depreciation(system_cost, years) if is_commercial else np.zeros(years)

    projection = FinancialProjection(system_cost=system_cost)
    cumulative = 0.0
    for year in range(1, years + 1):
        factor = degradation.factor(year)
        energy_savings = annual_savings * factor
        ad_benefit = float(ad_benefits[year - 1])
        yearly_savings = energy_savings + ad_benefit

        previous = cumulative
        cumulative += yearly_savings

        if projection.break_even_year is None and cumulative >= system_cost:
            status = BREAK_EVEN
            projection.break_even_year = year
            if yearly_savings > 0:
                projection.break_even_month = math.ceil((system_cost - previous) / yearly_savings * 12)
        elif projection.break_even_year is not None:
            status = PROFITABLE
        else:
            status = RECOVERING

        projection.yearly.append(
            YearlyRecord(
                year=year,
                generation=annual_generation * factor,
                savings=yearly_savings,
                energy_savings=energy_savings,
                ad_benefit=ad_benefit,
                cumulative=cumulative,
                roi_status=status,
            )
        )
    return projection


def _npv(rate: float, cashflows: np.ndarray) -> float:
    periods = np.arange(cashflows.size, dtype=float)
    return float(np.sum(cashflows / np.power(1.0 + rate, periods)))


def compute_irr(cashflows: np.ndarray, tol: float = 1e-6, max_iter: int = 200) -> float:
    """
    Internal rate of return of a periodic cash-flow series by bisection.

    Returns:
        The rate, or NaN when the series has no sign change or no root is
        bracketed.
    """
    cashflows = np.asarray(cashflows, dtype=float)
    if cashflows.size < 2:
        return np.nan
    if not (np.any(cashflows > 0) and np.any(cashflows < 0)):
        return np.nan

    low = -0.9999
    high = 5.0
    npv_low = _npv(low, cashflows)
    npv_high = _npv(high, cashflows)

    expand = 0
    while npv_low * npv_high > 0 and expand < 12:
        high *= 2.0
        npv_high = _npv(high, cashflows)
        expand += 1
    if npv_low * npv_high > 0:
        return np.nan

    mid = low
    for _ in range(max_iter):
        mid = (low + high) / 2.0
        npv_mid = _npv(mid, cashflows)
        if abs(npv_mid) < tol:
            return mid
        if npv_low * npv_mid < 0:
            high = mid
        else:
            low = mid
            npv_low = npv_mid
    return mid


@dataclass(frozen=True)
class RoiMetrics:
    break_even_year: Optional[int]
    total_savings_25_year: float
    roi_25_year: float
    payback_period: Optional[int]
    irr: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "breakEvenYear": self.break_even_year,
            "totalSavings25Year": self.total_savings_25_year,
            "roi25Year": self.roi_25_year,
            "paybackPeriod": self.payback_period,
            "irr": self.irr,
        }


def calculate_roi_metrics(projection: FinancialProjection) -> RoiMetrics:
    """
    Summarise a projection.

    ROI is ``(total savings - cost) / cost`` in percent (0 for a zero
    cost); IRR is annual, over ``[-cost, savings_1, ..., savings_n]``, and
    ``None`` when undefined.
    """
    cost = projection.system_cost
    total = projection.cumulative_savings
    roi = (total - cost) / cost * 100.0 if cost > 0 else 0.0
    payback = next((r.year for r in projection.yearly if r.cumulative >= cost), None)

    cashflows = np.array([-cost] + [r.savings for r in projection.yearly])
    irr = compute_irr(cashflows)
    return RoiMetrics(
        break_even_year=projection.break_even_year,
        total_savings_25_year=total,
        roi_25_year=roi,
        payback_period=payback,
        irr=None if np.isnan(irr) else float(irr),
    )


def battery_backup_hours(battery_kwh: float, monthly_load_kwh: float) -> float:
    """Hours the bank covers the average load at 80 % depth of discharge."""
    average_load_kw = monthly_load_kwh / HOURS_PER_MONTH if monthly_load_kwh > 0 else 0.0
    if average_load_kw <= 0 or battery_kwh <= 0:
        return 0.0
    return battery_kwh * BACKUP_DEPTH_OF_DISCHARGE / average_load_kw

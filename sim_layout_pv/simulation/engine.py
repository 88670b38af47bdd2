"""
Single entry point of the analysis engine.

:func:`run_simulation` validates the topology, estimates shadow loss, runs
the energy balance, projects 25 years of savings and builds the bill of
quantities, then merges everything into one :class:`SimulationResult`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np

from .assessment import design_suggestions, performance_score, verdict_for
from .boq import Boq, build_boq, resolve_system_cost
from .energy_simulator import EnergyBalanceConfig, EnergyBalanceResult, EnergyBalanceSimulator
from .financial import (
    DegradationModel,
    FinancialProjection,
    RoiMetrics,
    battery_backup_hours,
    calculate_roi_metrics,
    project_financials,
)
from .layout import Layout
from .load_profiles import total_monthly_load
from .params import SimulationParams
from .shading import DEFAULT_REFERENCE_YEAR, ShadowLossEstimator
from .solar import MONTH_NAMES
from .validator import CRITICAL, ERROR, validate

logger = logging.getLogger(__name__)

NO_PANELS_ISSUE = f"{ERROR}: No solar panels in design"


@dataclass
class SimulationResult:
    """
    Everything one analysis run produces.

    ``energy`` and ``financials`` keep the full typed results (including
    their pandas frames); :meth:`to_dict` renders the flat camelCase record
    consumed by the editor and the reporting layer.
    """

    valid: bool
    verdict: str
    score: int
    shadow_loss: float
    system_cost: float
    battery_backup_hours: float
    energy: EnergyBalanceResult
    financials: FinancialProjection
    roi: RoiMetrics
    boq: Boq = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)
    validations: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def break_even_year(self) -> Optional[int]:
        return self.financials.break_even_year

    @property
    def break_even_month(self) -> int:
        return self.financials.break_even_month

    def to_dict(self) -> Dict[str, Any]:
        capacities = self.energy.capacities
        return {
            "valid": self.valid,
            "verdict": self.verdict,
            "score": self.score,
            "dcCapacity": capacities.dc_kwp,
            "acCapacity": capacities.ac_kw,
            "batteryCapacity": capacities.battery_kwh,
            "batteryBackupHours": self.battery_backup_hours,
            "annualGeneration": self.energy.annual_generation,
            "annualSavings": self.energy.annual_savings,
            "annualUnmetLoad": self.energy.annual_unmet_load,
            "systemCost": self.system_cost,
            "monthlyData": [record.to_dict() for record in self.energy.monthly],
            "yearlyData": [record.to_dict() for record in self.financials.yearly],
            "boq": {label: dict(entry) for label, entry in self.boq.items()},
            "shadowLoss": self.shadow_loss,
            "issues": list(self.issues),
            "validations": list(self.validations),
            "suggestions": list(self.suggestions),
            "breakEvenYear": self.break_even_year,
            "breakEvenMonth": self.break_even_month,
            "monthlyGenData": self.energy.monthly_generation,
            "monthlyLossData": self.energy.monthly_shadow_loss,
            "months": list(MONTH_NAMES),
            "roiMetrics": self.roi.to_dict(),
        }


def run_simulation(
    objects: Layout | Iterable[Any] | None,
    wires: Iterable[Any] | None = None,
    params: SimulationParams | Mapping[str, Any] | None = None,
    rng: np.random.Generator | None = None,
    reference_year: int = DEFAULT_REFERENCE_YEAR,
) -> SimulationResult:
    """
    Analyse a layout end to end.

    Args:
        objects: Layout or editor object list.
        wires: Editor wire list (ignored when ``objects`` is a layout).
        params: Site and economic parameters (typed or camelCase mapping).
        rng: Generator for the shadow sampling; entropy-seeded when omitted.
        reference_year: Year of the sun-position samples.

    Returns:
        SimulationResult. Empty layouts still produce 12 monthly and 25
        yearly records.
    """
    layout = Layout.coerce(objects, wires)
    if not isinstance(params, SimulationParams):
        params = SimulationParams.from_dict(params)

    report = validate(layout)
    issues = list(report.issues)

    estimator = ShadowLossEstimator(
        params.latitude,
        params.longitude,
        rng=rng,
        reference_year=reference_year,
    )
    shadow_loss = estimator.estimate(layout).ratio
    shadow_derate = 1.0 - shadow_loss

    energy_config = EnergyBalanceConfig(
        grid_rate=params.grid_rate,
        export_rate=params.export_rate,
        shadow_derate=shadow_derate,
    )
    energy = EnergyBalanceSimulator.from_layout(layout, energy_config, params.base_load).run()
    capacities = energy.capacities

    boq = build_boq(layout, params.extra_cost_items, params.boq_overrides)
    system_cost = resolve_system_cost(params.system_cost, boq, capacities.dc_kwp)

    financials = project_financials(
        annual_generation=energy.annual_generation,
        annual_savings=energy.annual_savings,
        system_cost=system_cost,
        degradation=DegradationModel.from_layout(layout),
        is_commercial=params.is_commercial,
    )

    if capacities.dc_kwp == 0:
        issues.insert(0, NO_PANELS_ISSUE)
        score = 0
    else:
        score = performance_score(report.count(ERROR), shadow_derate)

    valid = not any(issue.startswith((ERROR, CRITICAL)) for issue in issues)
    result = SimulationResult(
        valid=valid,
        verdict=verdict_for(score),
        score=score,
        shadow_loss=shadow_loss,
        system_cost=system_cost,
        battery_backup_hours=battery_backup_hours(
            capacities.battery_kwh,
            total_monthly_load(layout, params.base_load),
        ),
        energy=energy,
        financials=financials,
        roi=calculate_roi_metrics(financials),
        boq=boq,
        issues=issues,
        validations=list(report.validations),
        suggestions=design_suggestions(capacities, shadow_loss, score, params.is_commercial),
    )
    logger.debug(
        "Simulation finished: score=%d, %.1f kWh/year, cost %.0f",
        result.score,
        energy.annual_generation,
        system_cost,
    )
    return result

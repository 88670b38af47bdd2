from __future__ import annotations

from sim_layout_pv.simulation.assessment import (
    CRITICAL_ISSUES,
    NEEDS_IMPROVEMENT,
    SYSTEM_OPTIMIZED,
    design_suggestions,
    performance_score,
    verdict_for,
)
from sim_layout_pv.simulation.energy_simulator import SystemCapacities


def test_performance_score_penalises_errors_and_shading() -> None:
    assert performance_score(0, 1.0) == 100
    assert performance_score(2, 1.0) == 60
    assert performance_score(0, 0.91) == 91
    assert performance_score(6, 1.0) == 0


def test_verdict_thresholds() -> None:
    assert verdict_for(81) == SYSTEM_OPTIMIZED
    assert verdict_for(80) == NEEDS_IMPROVEMENT
    assert verdict_for(51) == NEEDS_IMPROVEMENT
    assert verdict_for(50) == CRITICAL_ISSUES


def test_suggestions_for_undersized_inverter_and_missing_battery() -> None:
    suggestions = design_suggestions(SystemCapacities(dc_kwp=8.0, ac_kw=5.0), 0.1, 90, is_commercial=False)

    assert suggestions == [
        "High shadow loss detected (>5%). Consider relocating panels to reduce shading.",
        "Inverter undersized (DC:AC > 1.5). Consider upgrading inverter to avoid clipping.",
        "Consider adding a battery for backup during power outages.",
    ]


def test_suggestions_for_missing_inverter_and_low_score() -> None:
    suggestions = design_suggestions(SystemCapacities(dc_kwp=3.0, battery_kwh=5.0), 0.0, 20, is_commercial=True)

    assert suggestions == [
        "System efficiency is low. Check connections and potential shading issues.",
        "No Inverter detected. System will not function.",
    ]


def test_oversized_inverter_suggestion() -> None:
    suggestions = design_suggestions(
        SystemCapacities(dc_kwp=3.0, ac_kw=5.0, battery_kwh=5.0), 0.0, 95, is_commercial=False
    )
    assert suggestions == [
        "Inverter oversized (DC:AC < 1.0). You can add more panels to maximize inverter utilization."
    ]

"""Performance score, verdict and design suggestions."""

from __future__ import annotations

from typing import List

from .energy_simulator import SystemCapacities

ERROR_PENALTY = 20

SYSTEM_OPTIMIZED = "System Optimized"
NEEDS_IMPROVEMENT = "Needs Improvement"
CRITICAL_ISSUES = "Critical Issues"


def performance_score(error_count: int, shadow_derate: float) -> int:
    """``max(0, 100 - 20 * errors) * shadow_derate``, rounded half up."""
    checklist = max(0, 100 - ERROR_PENALTY * error_count)
    return int(checklist * shadow_derate + 0.5)


def verdict_for(score: float) -> str:
    if score > 80:
        return SYSTEM_OPTIMIZED
    if score > 50:
        return NEEDS_IMPROVEMENT
    return CRITICAL_ISSUES


def design_suggestions(
    capacities: SystemCapacities,
    shadow_loss: float,
    score: float,
    is_commercial: bool,
) -> List[str]:
    suggestions: List[str] = []
    if shadow_loss > 0.05:
        suggestions.append("High shadow loss detected (>5%). Consider relocating panels to reduce shading.")
    ratio = capacities.dc_ac_ratio
    if ratio is not None and ratio > 1.5:
        suggestions.append("Inverter undersized (DC:AC > 1.5). Consider upgrading inverter to avoid clipping.")
    if ratio is not None and ratio < 1.0:
        suggestions.append(
            "Inverter oversized (DC:AC < 1.0). You can add more panels to maximize inverter utilization."
        )
    if capacities.battery_kwh == 0 and not is_commercial:
        suggestions.append("Consider adding a battery for backup during power outages.")
    if score < 50:
        suggestions.append("System efficiency is low. Check connections and potential shading issues.")
    if capacities.dc_kwp > 0 and capacities.ac_kw == 0:
        suggestions.append("No Inverter detected. System will not function.")
    return suggestions

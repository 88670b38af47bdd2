"""
Bill of quantities and system cost.

Line items are keyed by label. Each entry is ``{"count", "cost", "type"}``
where ``cost`` is the total of the line, not a unit price.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, Mapping, Optional

from .layout import Layout, ObjectType
from .params import ExtraCostItem

BoqEntry = Dict[str, Any]
Boq = Dict[str, BoqEntry]

STRUCTURE_RATES: Dict[str, float] = {"rcc": 1000.0, "tinshed": 1500.0, "ground": 2000.0}
STRUCTURE_LABELS: Dict[str, str] = {
    "rcc": "Structure (RCC)",
    "tinshed": "Structure (Tin Shed)",
    "ground": "Structure (Ground)",
}
WIRE_RATE = 500.0
WIRE_LABEL = "DC/AC Wires"
BENCHMARK_COST_PER_KWP = 45000.0
NEGLIGIBLE_COST = 1000.0


def _mounting_of(mounting_type: Optional[str]) -> Optional[str]:
    if not mounting_type:
        return "ground"
    return mounting_type if mounting_type in STRUCTURE_RATES else None


def build_boq(
    layout: Layout,
    extra_cost_items: Iterable[ExtraCostItem] = (),
    boq_overrides: Mapping[str, Optional[Mapping[str, Any]]] | None = None,
) -> Boq:
    """
    Aggregate the layout's cost lines.

    Order of construction: placed objects (grid excluded) grouped by
    ``label`` or type, panel structures by mounting type, extra items,
    wiring, then overrides.
    """
    boq: Boq = {}
    for obj in layout.objects:
        if obj.type is ObjectType.GRID:
            continue
        key = obj.label or obj.raw_type or obj.type.value
        entry = boq.setdefault(key, {"count": 0, "cost": 0.0, "type": obj.raw_type or obj.type.value})
        entry["count"] += 1
        entry["cost"] += obj.cost

    structure_counts: Dict[str, int] = {}
    for panel in layout.of_type(ObjectType.PANEL):
        mounting = _mounting_of(panel.mounting_type)
        if mounting is not None:
            structure_counts[mounting] = structure_counts.get(mounting, 0) + 1
    for mounting, count in structure_counts.items():
        boq[STRUCTURE_LABELS[mounting]] = {
            "count": count,
            "cost": count * STRUCTURE_RATES[mounting],
            "type": "structure",
        }

    for item in extra_cost_items:
        boq[item.label] = {"count": 1, "cost": item.cost, "type": "extra"}

    if layout.wires:
        boq[WIRE_LABEL] = {
            "count": len(layout.wires),
            "cost": len(layout.wires) * WIRE_RATE,
            "type": "wire",
        }

    return apply_boq_overrides(boq, boq_overrides or {})


def apply_boq_overrides(boq: Mapping[str, BoqEntry], overrides: Mapping[str, Optional[Mapping[str, Any]]]) -> Boq:
    """
    Shallow-merge caller overrides onto a BOQ.

    An override of ``None`` deletes the line; a mapping updates only the keys
    it names (``type`` is preserved unless given). Overrides for unknown
    lines create ``custom`` entries. The input is not mutated, and applying
    the same overrides twice gives the same result.
    """
    result: Boq = copy.deepcopy(dict(boq))
    for label, override in overrides.items():
        if override is None:
            result.pop(label, None)
            continue
        entry = result.get(label) or {"count": 1, "cost": 0.0, "type": "custom"}
        entry = {**entry, **dict(override)}
        result[label] = entry
    return result


def boq_total(boq: Mapping[str, BoqEntry]) -> float:
    return float(sum(float(entry.get("cost") or 0.0) for entry in boq.values()))


def resolve_system_cost(requested_cost: float, boq: Mapping[str, BoqEntry], dc_kwp: float) -> float:
    """
    Installed cost used by the financial projection.

    A positive ``requested_cost`` wins. Otherwise the BOQ total is used,
    unless it is below 1000 for a layout with panels, in which case the
    benchmark of 45000 per kWp applies.
    """
    if requested_cost > 0:
        return requested_cost
    total = boq_total(boq)
    if total < NEGLIGIBLE_COST and dc_kwp > 0:
        return dc_kwp * BENCHMARK_COST_PER_KWP
    return total

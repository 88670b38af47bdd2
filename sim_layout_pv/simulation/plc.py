"""
Programmable logic rules attached to ``master_plc`` devices and breakers.

Rules are plain mappings stored under ``specifications["custom_logic"]``:

* ``{"type": "Time", "val": 18, "val2": 6, "action": "Trip", "targetId": ...}``
  trips the target while the hour is inside ``[val, val2)``; the window
  wraps midnight when ``val >= val2``.
* ``{"type": "Interlock", "sourceId": ..., "targetId": ..., "val": "ON"|"OFF",
  "action": "Trip"|"Close"}`` acts on the target when the source's static
  switch state matches ``val``.
* ``{"param": "Voltage", "op": ">", "val": 400, "action": "Trip"}`` on a
  VCB/ACB is a threshold trip evaluated against measured voltage.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Set

from .electrical_rules import nominal_voltage
from .layout import Layout, ObjectType, PlacedObject

COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class PlcRule:
    kind: Optional[str]
    action: Optional[str]
    target_id: Optional[str] = None
    source_id: Optional[str] = None
    val: Any = None
    val2: Any = None
    param: Optional[str] = None
    op: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PlcRule":
        target = payload.get("targetId", payload.get("target_id"))
        source = payload.get("sourceId", payload.get("source_id"))
        return cls(
            kind=payload.get("type"),
            action=payload.get("action"),
            target_id=None if target is None else str(target),
            source_id=None if source is None else str(source),
            val=payload.get("val"),
            val2=payload.get("val2"),
            param=payload.get("param"),
            op=payload.get("op"),
        )


def rules_of(obj: PlacedObject) -> List[PlcRule]:
    raw = obj.specifications.get("custom_logic") or []
    return [PlcRule.from_dict(item) for item in raw if isinstance(item, Mapping)]


def time_window_active(start: float, end: float, hour: float) -> bool:
    if start < end:
        return start <= hour < end
    return hour >= start or hour < end


@dataclass
class PlcProgram:
    """
    All ``master_plc`` rules of a layout, split by kind.

    Attributes:
        time_rules: Hour-window rules.
        interlock_rules: Rules conditioned on another device's switch state.
    """

    time_rules: List[PlcRule] = field(default_factory=list)
    interlock_rules: List[PlcRule] = field(default_factory=list)

    @classmethod
    def from_layout(cls, layout: Layout) -> "PlcProgram":
        program = cls()
        for plc in layout.of_type(ObjectType.MASTER_PLC):
            for rule in rules_of(plc):
                if rule.target_id is None:
                    continue
                if rule.kind == "Time":
                    program.time_rules.append(rule)
                elif rule.kind == "Interlock" and rule.source_id is not None:
                    program.interlock_rules.append(rule)
        return program

    def interlock_trips(self, layout: Layout) -> Set[str]:
        """Targets tripped by interlocks given the static switch states."""
        tripped: Set[str] = set()
        for rule in self.interlock_rules:
            source = layout.get(rule.source_id)
            if source is None or layout.get(rule.target_id) is None:
                continue
            source_on = source.is_on is not False
            condition = (rule.val == "ON" and source_on) or (rule.val == "OFF" and not source_on)
            if condition and rule.action == "Trip":
                tripped.add(rule.target_id)
        return tripped

    def time_trips(self, hour: float) -> Set[str]:
        tripped: Set[str] = set()
        for rule in self.time_rules:
            start = _to_float(rule.val)
            end = _to_float(rule.val2)
            if start is None or end is None:
                continue
            if rule.action == "Trip" and time_window_active(start, end, hour):
                tripped.add(rule.target_id)
        return tripped


def immediate_trip_rules(breaker: PlacedObject) -> List[PlcRule]:
    """
    Voltage trip rules of a VCB/ACB already satisfied by its own rating.

    Such a rule would open the breaker as soon as it is energised.
    """
    if breaker.type not in (ObjectType.VCB, ObjectType.ACB):
        return []
    rated = nominal_voltage(breaker)
    if rated is None:
        return []
    firing = []
    for rule in rules_of(breaker):
        if rule.param != "Voltage" or rule.action != "Trip":
            continue
        compare = COMPARATORS.get(rule.op or "")
        threshold = _to_float(rule.val)
        if compare is None or threshold is None:
            continue
        if compare(rated, threshold):
            firing.append(rule)
    return firing

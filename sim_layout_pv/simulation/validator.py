"""
Electrical topology validation.

:func:`validate` runs the batch report over a whole layout (reachability,
safety presence, battery/inverter compatibility, voltage compatibility,
PSS source availability and static PLC checks). :func:`validate_connection`
is the cheap pre-commit check the editor calls on every wire gesture.

Both read their voltage and AC/DC rules from :mod:`.electrical_rules`.

Findings are plain strings prefixed by their severity:

* ``ERROR``: topology broken (panel/inverter unreachable from its target).
* ``CRITICAL``: electrically unsafe (voltage mismatch, PSS without source).
* ``WARNING``: best-practice gap (no earthing, disconnected load...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .electrical_rules import check_voltage_pair, wire_type_conflict
from .layout import Layout, ObjectType, PlacedObject, WireType
from .plc import immediate_trip_rules
from .topology import AdjacencyGraph, active_wires, build_graph

logger = logging.getLogger(__name__)

ERROR = "ERROR"
CRITICAL = "CRITICAL"
WARNING = "WARNING"
CHECK = "✓"


@dataclass
class ValidationReport:
    """
    Issues and passed checks of one validation run.

    Attributes:
        issues: Severity-prefixed findings.
        validations: Passed checks (prefixed with a check mark).
    """

    issues: List[str] = field(default_factory=list)
    validations: List[str] = field(default_factory=list)

    def add_issue(self, severity: str, message: str) -> None:
        self.issues.append(f"{severity}: {message}")

    def add_pass(self, message: str) -> None:
        self.validations.append(f"{CHECK} {message}")

    def count(self, severity: str) -> int:
        return sum(1 for issue in self.issues if issue.startswith(severity))

    def to_dict(self) -> Dict[str, List[str]]:
        return {"issues": list(self.issues), "validations": list(self.validations)}


def _check_panels(graph: AdjacencyGraph, report: ValidationReport) -> None:
    panels = graph.layout.indices_of_type(ObjectType.PANEL)
    if not panels:
        return
    is_inverter = lambda obj: obj.type is ObjectType.INVERTER  # noqa: E731
    if all(graph.reaches(idx, is_inverter) for idx in panels):
        report.add_pass("All panels connected to Inverter")
    else:
        report.add_issue(ERROR, "Some panels not connected to Inverter")


def _check_inverters(graph: AdjacencyGraph, report: ValidationReport) -> None:
    inverters = graph.layout.indices_of_type(ObjectType.INVERTER)
    if not inverters:
        return
    is_grid_or_meter = lambda obj: obj.type is ObjectType.GRID or obj.is_meter()  # noqa: E731
    if all(graph.reaches(idx, is_grid_or_meter) for idx in inverters):
        report.add_pass("Inverter connected to Grid")
    else:
        report.add_issue(ERROR, "Inverter not connected to Meter/Grid")


def _check_loads(graph: AdjacencyGraph, report: ValidationReport) -> None:
    loads = graph.layout.indices_of_type(ObjectType.LOAD)
    is_source = lambda obj: obj.type in (ObjectType.GRID, ObjectType.INVERTER)  # noqa: E731
    if any(not graph.reaches(idx, is_source) for idx in loads):
        report.add_issue(WARNING, "Some Load Boxes not connected to Power Source")


def _check_safety(layout: Layout, report: ValidationReport) -> None:
    if any(obj.subtype == "earth" for obj in layout.objects):
        report.add_pass("Earthing pit present")
    else:
        report.add_issue(WARNING, "No earthing pit present")

    if any(obj.subtype == "la" for obj in layout.objects):
        report.add_pass("Lightning arrestor present")
    else:
        report.add_issue(WARNING, "No lightning arrestor present")


def _check_batteries(graph: AdjacencyGraph, report: ValidationReport) -> None:
    objects = graph.layout.objects
    for idx in graph.layout.indices_of_type(ObjectType.BATTERY):
        battery = objects[idx]
        inverter = next(
            (objects[n] for n in graph.neighbors_of(idx) if objects[n].type is ObjectType.INVERTER),
            None,
        )
        if inverter is not None and inverter.spec("inverter_type") != "hybrid":
            report.add_issue(
                ERROR,
                f"Battery {battery.display_name} connected to non-hybrid inverter {inverter.display_name}",
            )
        else:
            report.add_pass(f"Battery {battery.display_name} compatible with its inverter")


def _check_wiring(layout: Layout, report: ValidationReport) -> None:
    seen_pairs: Set[Tuple[int, int]] = set()
    for wire, src, dst in active_wires(layout):
        source, target = layout.objects[src], layout.objects[dst]
        for endpoint in (source, target):
            conflict = wire_type_conflict(endpoint, wire.type)
            if conflict:
                report.add_issue(CRITICAL, f"{conflict} (wire {wire.id})")

        pair = (src, dst) if src < dst else (dst, src)
        if pair in seen_pairs:
            continue
        seen_pairs.add(pair)
        mismatch = check_voltage_pair(source, target)
        if mismatch is not None:
            report.add_issue(CRITICAL, mismatch.describe())


def _check_pss(graph: AdjacencyGraph, report: ValidationReport) -> None:
    objects = graph.layout.objects
    for idx in graph.layout.indices_of_type(ObjectType.PSS):
        pss = objects[idx]
        if graph.degree(idx) < 2:
            report.add_issue(WARNING, f"PSS {pss.display_name} needs at least 2 connections")

        has_live_grid = False
        has_battery = False
        for node in graph.traverse(idx):
            obj = objects[node]
            if obj.type is ObjectType.GRID and obj.is_on is not False:
                has_live_grid = True
            elif obj.type is ObjectType.BATTERY:
                has_battery = True

        if pss.spec("logic") == "manual_grid" and not has_live_grid:
            report.add_issue(CRITICAL, f"PSS {pss.display_name} set to manual grid but no live grid is reachable")
        if not has_live_grid and not has_battery:
            report.add_issue(CRITICAL, f"No power source available for PSS {pss.display_name}")
        else:
            report.add_pass(f"PSS {pss.display_name} has an available source")


def _check_static_plc(layout: Layout, report: ValidationReport) -> None:
    for breaker in layout.of_type(ObjectType.VCB, ObjectType.ACB):
        for rule in immediate_trip_rules(breaker):
            report.add_issue(
                WARNING,
                f"{breaker.display_name} rule 'Voltage {rule.op} {rule.val}' will trip immediately",
            )


def validate(
    objects: Layout | Iterable[PlacedObject | Mapping[str, Any]] | None,
    wires: Iterable[Any] | None = None,
) -> ValidationReport:
    """
    Run every topology and rule check over a layout.

    Args:
        objects: A :class:`Layout`, or the editor's object list.
        wires: The editor's wire list (ignored when ``objects`` is a layout).

    Returns:
        ValidationReport with severity-prefixed issues and passed checks.
        Never raises for dangling wire references or empty inputs.
    """
    layout = Layout.coerce(objects, wires)
    graph = build_graph(layout)
    report = ValidationReport()

    _check_panels(graph, report)
    _check_inverters(graph, report)
    _check_loads(graph, report)
    _check_safety(layout, report)
    _check_batteries(graph, report)
    _check_wiring(layout, report)
    _check_pss(graph, report)
    _check_static_plc(layout, report)

    logger.debug(
        "Validation finished: %d issues, %d checks passed",
        len(report.issues),
        len(report.validations),
    )
    return report


@dataclass(frozen=True)
class ConnectionFeedback:
    """Pre-commit feedback for a wire gesture (``type`` is ``error`` or ``warning``)."""

    type: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "message": self.message}


def validate_connection(
    from_obj: PlacedObject | Mapping[str, Any],
    to_obj: PlacedObject | Mapping[str, Any],
    wire_type: WireType | str,
) -> Optional[ConnectionFeedback]:
    """
    Check a single wire before the editor commits it.

    Args:
        from_obj: Device the gesture started on.
        to_obj: Device the gesture ended on.
        wire_type: ``dc``, ``ac`` or ``earth``.

    Returns:
        ``None`` when the wire is acceptable; otherwise an ``error`` for AC/DC
        conflicts and plain voltage mismatches, or a ``warning`` for a
        voltage that matches neither winding of a transformer.

    Raises:
        ValueError: If ``wire_type`` is not a known wire type.
    """
    parsed_type = WireType.parse(wire_type)
    if parsed_type is None:
        raise ValueError(f"Unknown wire type: {wire_type!r}")
    source = from_obj if isinstance(from_obj, PlacedObject) else PlacedObject.from_dict(from_obj)
    target = to_obj if isinstance(to_obj, PlacedObject) else PlacedObject.from_dict(to_obj)

    for endpoint in (source, target):
        conflict = wire_type_conflict(endpoint, parsed_type)
        if conflict:
            return ConnectionFeedback(type="error", message=conflict)

    mismatch = check_voltage_pair(source, target)
    if mismatch is None:
        return None
    return ConnectionFeedback(
        type="warning" if mismatch.via_transformer else "error",
        message=mismatch.describe(),
    )

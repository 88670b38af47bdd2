"""
Instantaneous power-flow snapshot.

Splits the layout into electrical islands at open (or auto-tripped)
switchgear and balances each island's demand against its sources in a
caller-chosen priority order. Used by the live view; the yearly energy
figures come from :mod:`.energy_simulator`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from .layout import SWITCHGEAR_TYPES, Layout, ObjectType, PlacedObject
from .load_profiles import HOURS_PER_MONTH
from .topology import AdjacencyGraph, build_graph

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = ("Solar", "Battery", "Grid")
DEFAULT_PANEL_WATTS = 550.0
PANEL_DERATE = 0.85
UNRATED_LOAD_KW = 1.0


@dataclass(frozen=True)
class BatteryLimits:
    """Power limits (kW) a battery may deliver or absorb in the snapshot."""

    max_discharge: float = 0.0
    max_charge: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BatteryLimits":
        return cls(
            max_discharge=float(payload.get("maxDischarge", payload.get("max_discharge", 0.0)) or 0.0),
            max_charge=float(payload.get("maxCharge", payload.get("max_charge", 0.0)) or 0.0),
        )


@dataclass
class NodeFlow:
    """
    Flow state of one object.

    Attributes:
        active_power: Generation of a panel, served demand of a load, meter
            reading for meters (kW).
        grid_flow: Net-meter reading, import minus export (kW).
        load_flow: Gross-meter reading, load actually served (kW).
        battery_flow: Positive when discharging, negative when charging (kW).
        is_energized: The island has a grid, generation or discharge.
        is_tripped: Switchgear that sees a grid in outage.
        can_reset: Switchgear that sees a healthy grid.
    """

    active_power: float = 0.0
    grid_flow: float = 0.0
    load_flow: float = 0.0
    battery_flow: float = 0.0
    is_energized: bool = False
    is_tripped: bool = False
    can_reset: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activePower": self.active_power,
            "gridFlow": self.grid_flow,
            "loadFlow": self.load_flow,
            "batteryFlow": self.battery_flow,
            "isEnergized": self.is_energized,
            "isTripped": self.is_tripped,
            "canReset": self.can_reset,
        }


@dataclass
class Island:
    nodes: List[int] = field(default_factory=list)
    has_grid: bool = False
    total_load: float = 0.0
    total_solar: float = 0.0
    batteries: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class GridStatus:
    has_outage: bool = False
    has_healthy: bool = False


def panel_generation_kw(panel: PlacedObject, sun_hour: float) -> float:
    """``kWp * sin((h - 6) / 12 * pi) * 0.85`` strictly between 6 and 18 h."""
    if not 6 < sun_hour < 18:
        return 0.0
    peak_kw = (panel.watts or DEFAULT_PANEL_WATTS) / 1000.0
    return peak_kw * math.sin((sun_hour - 6) / 12 * math.pi) * PANEL_DERATE


def load_demand_kw(load: PlacedObject) -> float:
    demand = load.units / HOURS_PER_MONTH
    return demand if demand > 0 else UNRATED_LOAD_KW


def _is_open_switch(obj: PlacedObject) -> bool:
    return obj.type in SWITCHGEAR_TYPES and obj.is_switched_off


def grid_status(graph: AdjacencyGraph, start: int) -> GridStatus:
    """
    Search from ``start`` for grids, not entering open switchgear.

    A grid is in outage when flagged ``isOutage`` or switched off.
    """
    objects = graph.layout.objects
    has_outage = has_healthy = False
    for idx in graph.traverse(start, can_visit=lambda n: not _is_open_switch(objects[n])):
        obj = objects[idx]
        if obj.type is not ObjectType.GRID:
            continue
        if obj.is_outage or obj.is_switched_off:
            has_outage = True
        else:
            has_healthy = True
        if has_outage and has_healthy:
            break
    return GridStatus(has_outage=has_outage, has_healthy=has_healthy)


def _find_islands(
    graph: AdjacencyGraph,
    generation: Mapping[str, float],
    switch_status: Mapping[int, GridStatus],
) -> List[Island]:
    objects = graph.layout.objects
    assigned: set = set()

    def can_expand(idx: int) -> bool:
        obj = objects[idx]
        if obj.type not in SWITCHGEAR_TYPES:
            return True
        return not (obj.is_switched_off or switch_status[idx].has_outage)

    islands: List[Island] = []
    for start in range(len(objects)):
        if start in assigned:
            continue
        island = Island()
        for idx in graph.traverse(start, can_expand=can_expand, can_visit=lambda n: n not in assigned):
            assigned.add(idx)
            island.nodes.append(idx)
            obj = objects[idx]
            if obj.type is ObjectType.GRID and not obj.is_outage:
                island.has_grid = True
            elif obj.type is ObjectType.LOAD:
                island.total_load += load_demand_kw(obj)
            elif obj.type is ObjectType.PANEL:
                island.total_solar += generation.get(obj.id, 0.0)
            elif obj.type in (ObjectType.BATTERY, ObjectType.BESS):
                island.batteries.append(idx)
        islands.append(island)
    return islands


def calculate_flows(
    layout: Layout | Sequence[Any],
    sun_hour: float = 12.0,
    priority: Sequence[str] = DEFAULT_PRIORITY,
    battery_limits: Mapping[str, BatteryLimits] | None = None,
    generation: Mapping[str, float] | None = None,
    wires: Sequence[Any] | None = None,
) -> Dict[str, NodeFlow]:
    """
    Compute the power-flow snapshot of a layout.

    Args:
        layout: Layout, or the editor object list (then pass ``wires``).
        sun_hour: Local hour used for panel generation.
        priority: Order in which ``Solar``, ``Battery`` and ``Grid`` serve
            the demand of each island.
        battery_limits: Battery id -> discharge/charge limits (default 0).
        generation: Panel id -> kW, replacing the sun-hour model.
        wires: Wire list when ``layout`` is a plain object list.

    Returns:
        Object id -> :class:`NodeFlow`.

    Notes:
        Every wire counts here, including those of switched-off boards;
        switch state is applied while splitting islands instead.
    """
    layout = Layout.coerce(layout, wires)
    limits = dict(battery_limits or {})
    objects = layout.objects

    if generation is None:
        generation = {obj.id: panel_generation_kw(obj, sun_hour) for obj in layout.of_type(ObjectType.PANEL)}

    graph = build_graph(layout, skip_disabled_boards=False)
    switch_status = {idx: grid_status(graph, idx) for idx in layout.indices_of_type(*SWITCHGEAR_TYPES)}

    flows: Dict[str, NodeFlow] = {}
    for island in _find_islands(graph, generation, switch_status):
        remaining = island.total_load
        solar_used = 0.0
        discharged = 0.0
        grid_import = 0.0
        battery_flow: Dict[int, float] = {idx: 0.0 for idx in island.batteries}

        for source in priority:
            if remaining <= 0:
                break
            if source == "Solar":
                used = min(remaining, island.total_solar)
                solar_used += used
                remaining -= used
            elif source == "Battery":
                for idx in island.batteries:
                    if remaining <= 0:
                        break
                    used = min(remaining, limits.get(objects[idx].id, BatteryLimits()).max_discharge)
                    battery_flow[idx] += used
                    discharged += used
                    remaining -= used
            elif source == "Grid" and island.has_grid:
                grid_import += remaining
                remaining = 0.0

        excess = island.total_solar - solar_used
        for idx in island.batteries:
            if excess <= 0:
                break
            if battery_flow[idx] == 0:
                charge = min(excess, limits.get(objects[idx].id, BatteryLimits()).max_charge)
                battery_flow[idx] = -charge
                excess -= charge

        grid_export = excess if island.has_grid else 0.0
        served = island.total_load - remaining
        energized = island.has_grid or island.total_solar > 0 or discharged > 0

        for idx in island.nodes:
            obj = objects[idx]
            flow = NodeFlow(is_energized=energized)
            if idx in switch_status:
                status = switch_status[idx]
                if status.has_outage:
                    flow.is_energized = False
                    flow.is_tripped = True
                flow.can_reset = status.has_healthy

            if obj.has_tag({"net_meter"}):
                if island.has_grid:
                    flow.grid_flow = grid_import - grid_export
                    flow.active_power = flow.grid_flow
            elif obj.has_tag({"gross_meter"}):
                flow.load_flow = served
                flow.active_power = served
            elif obj.type in (ObjectType.BATTERY, ObjectType.BESS):
                flow.battery_flow = battery_flow.get(idx, 0.0)
            elif obj.type is ObjectType.PANEL:
                flow.active_power = generation.get(obj.id, 0.0)
            elif obj.type is ObjectType.LOAD and island.total_load > 0:
                flow.active_power = load_demand_kw(obj) * served / island.total_load
            flows[obj.id] = flow

    logger.debug("Power flow at hour %.1f over %d objects", sun_hour, len(objects))
    return flows

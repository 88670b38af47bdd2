"""
Layout data model consumed by the analysis engine.

The scene editor produces plain JSON-like mappings for every placed device
and every wire. This module turns them into typed dataclasses and collects
them in a :class:`Layout` arena (tuples plus an id -> index map) so the
graph code can work with integer indices instead of object references and
rebuild its adjacency cheaply on every call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class ObjectType(str, Enum):
    """
    Closed set of device/structure tags understood by the engine.

    Every component that branches on the device type (voltage lookup,
    AC/DC classification, graph targets, BOQ grouping) matches against these
    members instead of raw strings. Tags the engine does not know about are
    parsed as :attr:`UNKNOWN` and simply carried along.
    """

    PANEL = "panel"
    INVERTER = "inverter"
    BATTERY = "battery"
    BESS = "bess"
    LOAD = "load"
    GRID = "grid"
    METER = "meter"
    NET_METER = "net_meter"
    GROSS_METER = "gross_meter"
    VCB = "vcb"
    ACB = "acb"
    ACDB = "acdb"
    LT_PANEL = "lt_panel"
    HT_PANEL = "ht_panel"
    TRANSFORMER = "transformer"
    PSS = "pss"
    MASTER_PLC = "master_plc"
    STRUCTURE = "structure"
    TINSHED = "tinshed"
    OBSTACLE = "obstacle"
    TREE = "tree"
    POLYGON = "polygon"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "ObjectType":
        """
        Map an editor type string to an :class:`ObjectType`.

        Args:
            raw: Type tag as stored by the editor (e.g. ``"panel"`` or the
                legacy ``"Solar Panel"`` label).

        Returns:
            Matching member, or :attr:`UNKNOWN` for unrecognised tags.
        """
        if isinstance(raw, cls):
            return raw
        if raw is None:
            return cls.UNKNOWN
        key = str(raw).strip()
        alias = _LEGACY_TYPE_ALIASES.get(key)
        if alias is not None:
            return alias
        try:
            return cls(key.lower())
        except ValueError:
            return cls.UNKNOWN


_LEGACY_TYPE_ALIASES: Dict[str, ObjectType] = {
    "Solar Panel": ObjectType.PANEL,
    "Inverter": ObjectType.INVERTER,
    "Battery": ObjectType.BATTERY,
}

SWITCHGEAR_TYPES = frozenset(
    {ObjectType.VCB, ObjectType.ACB, ObjectType.ACDB, ObjectType.LT_PANEL, ObjectType.HT_PANEL}
)
"""Devices that open the circuit when switched off."""

DISTRIBUTION_BOARD_TAGS = frozenset({"acdb", "lt_panel", "ht_panel"})
"""Type or subtype tags whose ``isOn == False`` removes their wires from the graph."""


class WireType(str, Enum):
    DC = "dc"
    AC = "ac"
    EARTH = "earth"

    @classmethod
    def parse(cls, raw: Any) -> Optional["WireType"]:
        if isinstance(raw, cls):
            return raw
        if raw is None:
            return None
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return None


def _first(payload: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_vertices(raw: Any) -> Tuple[Tuple[float, float], ...]:
    if not raw:
        return ()
    if not isinstance(raw, (list, tuple)):
        logger.debug("Ignoring vertices that are not a list: %r", raw)
        return ()
    vertices: List[Tuple[float, float]] = []
    for vertex in raw:
        if isinstance(vertex, Mapping):
            vertices.append((_as_float(vertex.get("x")), _as_float(vertex.get("y"))))
        elif isinstance(vertex, (list, tuple)) and len(vertex) == 2:
            vertices.append((_as_float(vertex[0]), _as_float(vertex[1])))
        else:
            logger.debug("Skipping malformed vertex %r", vertex)
    return tuple(vertices)


@dataclass
class PlacedObject:
    """
    One electrical device or physical structure placed in the layout.

    Attributes:
        id: Stable identifier referenced by wires.
        type: Parsed device tag.
        raw_type: Tag exactly as the editor stored it (used for BOQ labels
            when no ``label`` is set).
        x, y, w, h: Bounding box in meters (top-left corner plus size).
        h_z: Absolute elevation of the top surface in meters.
        rotation: Rotation in degrees (display only).
        vertices: Polygon vertices relative to ``(x, y)``.
        watts: Panel nameplate power (W).
        cap_kw: Inverter AC capacity (kW).
        cap_kwh: Battery capacity (kWh).
        units: Monthly consumption of a load box (kWh).
        cost: Unit cost used by the BOQ.
        label: Display label; groups BOQ lines.
        subtype: Secondary tag (``earth``, ``la``, ``net_meter``, ``acdb``...).
        mounting_type: Panel mounting (``rcc``, ``tinshed``, ``ground``).
        specifications: Open attribute map (efficiency, voltages, PLC rules...).
        is_on: Switch state, ``None`` when the editor never set it.
        is_outage: Grid outage flag used by the power-flow snapshot.
    """

    id: str
    type: ObjectType = ObjectType.UNKNOWN
    raw_type: str = ""
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0
    h_z: float = 0.0
    rotation: float = 0.0
    vertices: Tuple[Tuple[float, float], ...] = ()
    watts: float = 0.0
    cap_kw: float = 0.0
    cap_kwh: float = 0.0
    units: float = 0.0
    cost: float = 0.0
    label: Optional[str] = None
    subtype: Optional[str] = None
    mounting_type: Optional[str] = None
    specifications: Dict[str, Any] = field(default_factory=dict)
    is_on: Optional[bool] = None
    is_outage: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PlacedObject":
        """
        Build a :class:`PlacedObject` from an editor payload.

        Accepts both the editor's camelCase keys (``capKw``, ``isOn``...) and
        their snake_case equivalents.
        """
        raw_type = payload.get("type")
        is_on = _first(payload, "isOn", "is_on")
        return cls(
            id=str(payload.get("id")),
            type=ObjectType.parse(raw_type),
            raw_type="" if raw_type is None else str(raw_type),
            x=_as_float(payload.get("x")),
            y=_as_float(payload.get("y")),
            w=_as_float(payload.get("w")),
            h=_as_float(payload.get("h")),
            h_z=_as_float(payload.get("h_z")),
            rotation=_as_float(payload.get("rotation")),
            vertices=_parse_vertices(_first(payload, "vertices", "points")),
            watts=_as_float(payload.get("watts")),
            cap_kw=_as_float(_first(payload, "capKw", "cap_kw")),
            cap_kwh=_as_float(_first(payload, "capKwh", "cap_kwh")),
            units=_as_float(payload.get("units")),
            cost=_as_float(payload.get("cost")),
            label=payload.get("label") or None,
            subtype=payload.get("subtype") or None,
            mounting_type=_first(payload, "mountingType", "mounting_type"),
            specifications=dict(payload.get("specifications") or {}),
            is_on=None if is_on is None else bool(is_on),
            is_outage=bool(_first(payload, "isOutage", "is_outage", default=False)),
        )

    @property
    def display_name(self) -> str:
        return self.label or self.raw_type or self.type.value

    @property
    def area(self) -> float:
        return self.w * self.h

    @property
    def is_switched_off(self) -> bool:
        return self.is_on is False

    def has_tag(self, tags: Iterable[str]) -> bool:
        """Return True when the type or subtype matches one of ``tags``."""
        tags = set(tags)
        return self.type.value in tags or (self.subtype or "") in tags

    def is_meter(self) -> bool:
        return "meter" in self.type.value or "meter" in (self.subtype or "")

    def spec(self, key: str, default: Any = None) -> Any:
        value = self.specifications.get(key)
        return default if value is None else value

    def spec_float(self, key: str, default: float) -> float:
        return _as_float(self.specifications.get(key), default)


@dataclass
class WireConnection:
    """
    Undirected wire between two placed objects.

    The engine never mutates wires; they are created and removed by the editor.
    """

    id: str
    from_id: str
    to_id: str
    type: Optional[WireType] = None
    path: Tuple[Tuple[float, float], ...] = ()
    specifications: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "WireConnection":
        return cls(
            id=str(payload.get("id")),
            from_id=str(_first(payload, "from", "from_id")),
            to_id=str(_first(payload, "to", "to_id")),
            type=WireType.parse(payload.get("type")),
            path=_parse_vertices(payload.get("path")),
            specifications=dict(payload.get("specifications") or {}),
        )


ObjectInput = PlacedObject | Mapping[str, Any]
WireInput = WireConnection | Mapping[str, Any]


@dataclass(frozen=True)
class Layout:
    """
    Arena holding all objects and wires of one analysis call.

    Attributes:
        objects: Placed objects in editor order.
        wires: Wire connections in editor order.
        index_by_id: Object id -> position in ``objects``.
    """

    objects: Tuple[PlacedObject, ...]
    wires: Tuple[WireConnection, ...]
    index_by_id: Mapping[str, int]

    @classmethod
    def build(
        cls,
        objects: Iterable[ObjectInput] | None,
        wires: Iterable[WireInput] | None = None,
    ) -> "Layout":
        """
        Parse editor payloads (or already typed records) into a layout.

        Duplicate ids keep their first occurrence for lookups; the later
        duplicates are still counted as objects.
        """
        parsed_objects = tuple(
            obj if isinstance(obj, PlacedObject) else PlacedObject.from_dict(obj)
            for obj in (objects or [])
        )
        parsed_wires = tuple(
            wire if isinstance(wire, WireConnection) else WireConnection.from_dict(wire)
            for wire in (wires or [])
        )
        index_by_id: Dict[str, int] = {}
        for idx, obj in enumerate(parsed_objects):
            if obj.id in index_by_id:
                logger.debug("Duplicate object id %s ignored for lookups", obj.id)
                continue
            index_by_id[obj.id] = idx
        return cls(objects=parsed_objects, wires=parsed_wires, index_by_id=index_by_id)

    @classmethod
    def coerce(
        cls,
        objects: "Layout" | Iterable[ObjectInput] | None,
        wires: Iterable[WireInput] | None = None,
    ) -> "Layout":
        """Return ``objects`` unchanged when it is already a layout, else build one."""
        if isinstance(objects, Layout):
            return objects
        return cls.build(objects, wires)

    def __len__(self) -> int:
        return len(self.objects)

    def index_of(self, object_id: Any) -> Optional[int]:
        return self.index_by_id.get(str(object_id))

    def get(self, object_id: Any) -> Optional[PlacedObject]:
        idx = self.index_of(object_id)
        return None if idx is None else self.objects[idx]

    def of_type(self, *types: ObjectType) -> List[PlacedObject]:
        wanted = set(types)
        return [obj for obj in self.objects if obj.type in wanted]

    def indices_of_type(self, *types: ObjectType) -> List[int]:
        wanted = set(types)
        return [idx for idx, obj in enumerate(self.objects) if obj.type in wanted]

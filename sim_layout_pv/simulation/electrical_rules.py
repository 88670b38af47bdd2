"""
Shared electrical rule table.

Both the batch topology validator and the live single-wire check read the
nominal voltages, the AC/DC classification and the tolerance rules from this
module, so the two entry points cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .layout import ObjectType, PlacedObject, WireType

VOLTAGE_TOLERANCE = 0.10
"""Maximum relative deviation (of the reference side) for two voltages to match."""

DEFAULT_TRANSFORMER_PRIMARY_V = 11000.0
DEFAULT_TRANSFORMER_SECONDARY_V = 415.0


class CurrentClass(str, Enum):
    DC_ONLY = "dc_only"
    AC_ONLY = "ac_only"
    HYBRID = "hybrid"
    NEUTRAL = "neutral"


_CURRENT_CLASS: Dict[ObjectType, CurrentClass] = {
    ObjectType.PANEL: CurrentClass.DC_ONLY,
    ObjectType.BATTERY: CurrentClass.DC_ONLY,
    ObjectType.GRID: CurrentClass.AC_ONLY,
    ObjectType.LOAD: CurrentClass.AC_ONLY,
    ObjectType.ACDB: CurrentClass.AC_ONLY,
    ObjectType.LT_PANEL: CurrentClass.AC_ONLY,
    ObjectType.HT_PANEL: CurrentClass.AC_ONLY,
    ObjectType.VCB: CurrentClass.AC_ONLY,
    ObjectType.ACB: CurrentClass.AC_ONLY,
    ObjectType.TRANSFORMER: CurrentClass.AC_ONLY,
    ObjectType.PSS: CurrentClass.AC_ONLY,
    ObjectType.INVERTER: CurrentClass.HYBRID,
}

# Nominal voltage resolvers (volts). Types missing here have no nominal
# voltage and are skipped by the compatibility checks.
_VOLTAGE_RULES: Dict[ObjectType, Callable[[PlacedObject], float]] = {
    ObjectType.GRID: lambda obj: obj.spec_float("voltage", 11000.0),
    ObjectType.PANEL: lambda obj: 40.0,
    ObjectType.INVERTER: lambda obj: obj.spec_float("output_voltage", 230.0),
    ObjectType.BATTERY: lambda obj: 48.0,
    ObjectType.LOAD: lambda obj: 230.0,
    ObjectType.VCB: lambda obj: obj.spec_float("voltage_rating", 11.0) * 1000.0,
    ObjectType.ACB: lambda obj: obj.spec_float("voltage", 415.0),
    ObjectType.PSS: lambda obj: obj.spec_float("voltage", 415.0),
}


def current_class(obj: PlacedObject) -> CurrentClass:
    """
    Classify a device as DC-only, AC-only or hybrid.

    Boards tagged only through their subtype (e.g. an ``acdb``) are
    classified by that subtype.
    """
    klass = _CURRENT_CLASS.get(obj.type)
    if klass is None and obj.subtype:
        klass = _CURRENT_CLASS.get(ObjectType.parse(obj.subtype))
    return klass or CurrentClass.NEUTRAL


def nominal_voltage(obj: PlacedObject) -> Optional[float]:
    rule = _VOLTAGE_RULES.get(obj.type)
    return None if rule is None else rule(obj)


def transformer_windings(obj: PlacedObject) -> Tuple[float, float]:
    return (
        obj.spec_float("primary_voltage", DEFAULT_TRANSFORMER_PRIMARY_V),
        obj.spec_float("secondary_voltage", DEFAULT_TRANSFORMER_SECONDARY_V),
    )


def within_tolerance(value: float, reference: float) -> bool:
    return abs(value - reference) <= VOLTAGE_TOLERANCE * abs(reference)


@dataclass(frozen=True)
class VoltageMismatch:
    """
    Result of a failed pairwise voltage check.

    ``transformer`` is set when one endpoint is a transformer, in which case
    ``other_voltage`` matched neither winding.
    """

    source: PlacedObject
    target: PlacedObject
    source_voltage: Optional[float]
    target_voltage: Optional[float]
    transformer: Optional[PlacedObject] = None
    windings: Tuple[float, float] = (0.0, 0.0)

    @property
    def via_transformer(self) -> bool:
        return self.transformer is not None

    def describe(self) -> str:
        if self.transformer is not None:
            other = self.target if self.transformer is self.source else self.source
            other_v = self.target_voltage if self.transformer is self.source else self.source_voltage
            primary, secondary = self.windings
            return (
                f"Voltage Mismatch at {self.transformer.display_name}: "
                f"{other.display_name} ({other_v:g}V) matches neither primary "
                f"({primary:g}V) nor secondary ({secondary:g}V)"
            )
        return (
            f"Voltage Mismatch between {self.source.display_name} ({self.source_voltage:g}V) "
            f"and {self.target.display_name} ({self.target_voltage:g}V)"
        )


def check_voltage_pair(source: PlacedObject, target: PlacedObject) -> Optional[VoltageMismatch]:
    """
    Compare the nominal voltages of two directly connected devices.

    Plain edges match when the target is within 10 % of the source voltage.
    Edges touching a transformer match when the other side is within 10 %
    of either winding.

    Returns:
        ``None`` when compatible (or when a side has no nominal voltage),
        otherwise a :class:`VoltageMismatch`.
    """
    source_is_tr = source.type is ObjectType.TRANSFORMER
    target_is_tr = target.type is ObjectType.TRANSFORMER
    if source_is_tr and target_is_tr:
        return None

    if source_is_tr or target_is_tr:
        transformer, other = (source, target) if source_is_tr else (target, source)
        other_v = nominal_voltage(other)
        if other_v is None:
            return None
        windings = transformer_windings(transformer)
        if any(within_tolerance(other_v, winding) for winding in windings):
            return None
        return VoltageMismatch(
            source=source,
            target=target,
            source_voltage=None if source_is_tr else other_v,
            target_voltage=None if target_is_tr else other_v,
            transformer=transformer,
            windings=windings,
        )

    source_v = nominal_voltage(source)
    target_v = nominal_voltage(target)
    if source_v is None or target_v is None:
        return None
    if abs(source_v - target_v) > VOLTAGE_TOLERANCE * source_v:
        return VoltageMismatch(source=source, target=target, source_voltage=source_v, target_voltage=target_v)
    return None


def wire_type_conflict(obj: PlacedObject, wire_type: Optional[WireType]) -> Optional[str]:
    """
    Return a message when ``wire_type`` cannot terminate on ``obj``.

    DC wires may not touch AC-only devices and AC wires may not touch
    DC-only devices. Earth wires and hybrid devices are always accepted.
    """
    klass = current_class(obj)
    if wire_type is WireType.DC and klass is CurrentClass.AC_ONLY:
        return f"DC wire cannot connect to AC-only device {obj.display_name}"
    if wire_type is WireType.AC and klass is CurrentClass.DC_ONLY:
        return f"AC wire cannot connect to DC-only device {obj.display_name}"
    return None

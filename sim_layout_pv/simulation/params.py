from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class ExtraCostItem:
    """Caller-supplied BOQ line added as a single-count entry."""

    label: str
    cost: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ExtraCostItem":
        return cls(label=str(payload.get("label", "Extra")), cost=float(payload.get("cost") or 0.0))


@dataclass
class SimulationParams:
    """
    Site and economic parameters of one analysis run.

    Attributes:
        base_load: Baseline consumption in units (kWh) per month, added to
            the units of every load box in the layout.
        grid_rate: Tariff paid for imported energy (currency per kWh).
        export_rate: Tariff credited for exported energy (currency per kWh).
        system_cost: Installed cost. ``0`` means "derive it from the BOQ".
        is_commercial: Enables accelerated depreciation tax benefits.
        extra_cost_items: Additional single-count BOQ lines.
        boq_overrides: BOQ line label -> partial entry merged last. A value
            of ``None`` removes the line.
        latitude: Site latitude in degrees (used for sun position).
        longitude: Site longitude in degrees (used for local solar time).
    """

    base_load: float = 500.0
    grid_rate: float = 8.5
    export_rate: float = 3.0
    system_cost: float = 0.0
    is_commercial: bool = False
    extra_cost_items: List[ExtraCostItem] = field(default_factory=list)
    boq_overrides: Dict[str, Optional[Dict[str, Any]]] = field(default_factory=dict)
    latitude: float = 28.6
    longitude: float = 77.2

    def __post_init__(self) -> None:
        if self.grid_rate < 0 or self.export_rate < 0:
            raise ValueError("grid_rate and export_rate must be >= 0")
        if self.base_load < 0:
            raise ValueError("base_load must be >= 0")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("latitude must be between -90 and 90")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "SimulationParams":
        """
        Build parameters from the editor's camelCase payload.

        Missing keys fall back to the defaults of the dataclass.
        """
        data = dict(payload or {})
        defaults = cls()

        def pick(camel: str, snake: str, default: Any) -> Any:
            for key in (camel, snake):
                if data.get(key) is not None:
                    return data[key]
            return default

        extra_items = pick("extraCostItems", "extra_cost_items", [])
        return cls(
            base_load=float(pick("baseLoad", "base_load", defaults.base_load)),
            grid_rate=float(pick("gridRate", "grid_rate", defaults.grid_rate)),
            export_rate=float(pick("exportRate", "export_rate", defaults.export_rate)),
            system_cost=float(pick("systemCost", "system_cost", defaults.system_cost)),
            is_commercial=bool(pick("isCommercial", "is_commercial", defaults.is_commercial)),
            extra_cost_items=[
                item if isinstance(item, ExtraCostItem) else ExtraCostItem.from_dict(item)
                for item in extra_items
            ],
            boq_overrides=dict(pick("boqOverrides", "boq_overrides", {})),
            latitude=float(pick("latitude", "latitude", defaults.latitude)),
            longitude=float(pick("longitude", "longitude", defaults.longitude)),
        )

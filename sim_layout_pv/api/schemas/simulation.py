"""
Analysis schemas for API validation.

This module contains Pydantic models for the analysis endpoints:
- Simulation: full layout analysis (validation, energy, shading, ROI, BOQ)
- Validation: batch topology report
- Connection check: live single-wire validation
- Flows: instantaneous power-flow snapshot
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import ConfigDict, Field

from .common import CamelModel, LayoutPayload


class ExtraCostItemSchema(CamelModel):
    label: str
    cost: float = 0.0


class SimulationParamsSchema(CamelModel):
    """
    Site and economic parameters.

    Attributes:
        base_load: Baseline monthly consumption (kWh) added to every load box.
        grid_rate: Import tariff per kWh.
        export_rate: Export tariff per kWh.
        system_cost: Installed cost; 0 derives it from the BOQ.
        is_commercial: Enables accelerated depreciation.
        extra_cost_items: Additional single-count BOQ lines.
        boq_overrides: Label -> partial BOQ entry; ``null`` deletes the line.
        latitude: Site latitude (degrees).
        longitude: Site longitude (degrees).
    """

    base_load: float = Field(default=500.0, ge=0)
    grid_rate: float = Field(default=8.5, ge=0)
    export_rate: float = Field(default=3.0, ge=0)
    system_cost: float = Field(default=0.0, ge=0)
    is_commercial: bool = False
    extra_cost_items: List[ExtraCostItemSchema] = Field(default_factory=list)
    boq_overrides: Dict[str, Optional[Dict[str, Any]]] = Field(default_factory=dict)
    latitude: float = Field(default=28.6, ge=-90, le=90)
    longitude: float = Field(default=77.2, ge=-180, le=180)


class SimulationRequest(LayoutPayload):
    """
    Request schema for a full layout analysis.

    Example:
        ```python
        # POST /api/simulation
        {
            "objects": [{"id": "p1", "type": "panel", "watts": 550, "w": 1.1, "h": 2.2}],
            "wires": [],
            "params": {"baseLoad": 500, "gridRate": 8.5, "exportRate": 3.0},
            "seed": 42
        }
        ```

    Notes:
        - ``seed`` makes the shadow sampling reproducible; without it the
          application default (environment or entropy) is used.
    """

    params: SimulationParamsSchema = Field(default_factory=SimulationParamsSchema)
    seed: Optional[int] = Field(default=None, description="Random seed for the shadow sampling")


class MonthlyRecordSchema(CamelModel):
    month: str
    generation: float
    load: float
    net_export: float
    net_import: float
    savings: float
    export_value: float
    import_cost: float
    gross_metering_income: float
    shadow_loss: float
    unmet_load: float


class YearlyRecordSchema(CamelModel):
    year: int
    generation: float
    savings: float
    energy_savings: float
    ad_benefit: float
    cumulative: float
    roi_status: str


class BoqEntrySchema(CamelModel):
    model_config = ConfigDict(extra="allow")

    count: Union[int, float] = 0
    cost: float = 0.0
    type: str = "custom"


class RoiMetricsSchema(CamelModel):
    model_config = ConfigDict(populate_by_name=True)

    break_even_year: Optional[int] = Field(default=None, alias="breakEvenYear")
    total_savings_25_year: float = Field(alias="totalSavings25Year")
    roi_25_year: float = Field(alias="roi25Year")
    payback_period: Optional[int] = Field(default=None, alias="paybackPeriod")
    irr: Optional[float] = None


class SimulationResponse(CamelModel):
    """
    Response schema of a layout analysis.

    Mirrors the record rendered by ``SimulationResult.to_dict()``.
    """

    valid: bool
    verdict: str
    score: int
    dc_capacity: float
    ac_capacity: float
    battery_capacity: float
    battery_backup_hours: float
    annual_generation: float
    annual_savings: float
    annual_unmet_load: float
    system_cost: float
    monthly_data: List[MonthlyRecordSchema]
    yearly_data: List[YearlyRecordSchema]
    boq: Dict[str, BoqEntrySchema]
    shadow_loss: float
    issues: List[str]
    validations: List[str]
    suggestions: List[str]
    break_even_year: Optional[int] = None
    break_even_month: int = 0
    monthly_gen_data: List[float]
    monthly_loss_data: List[float]
    months: List[str]
    roi_metrics: RoiMetricsSchema


class ValidationRequest(LayoutPayload):
    pass


class ValidationResponse(CamelModel):
    valid: bool
    issues: List[str]
    validations: List[str]


class ConnectionCheckRequest(CamelModel):
    """
    Live check of one wire gesture.

    Example:
        ```python
        # POST /api/connections/validate
        {"from": {"id": "l1", "type": "load"}, "to": {"id": "p1", "type": "panel"}, "wireType": "dc"}
        ```
    """

    source: Dict[str, Any] = Field(alias="from")
    target: Dict[str, Any] = Field(alias="to")
    wire_type: str


class ConnectionFeedbackSchema(CamelModel):
    type: Literal["error", "warning"]
    message: str


class ConnectionCheckResponse(CamelModel):
    ok: bool
    feedback: Optional[ConnectionFeedbackSchema] = None


class BatteryLimitsSchema(CamelModel):
    max_discharge: float = Field(default=0.0, ge=0)
    max_charge: float = Field(default=0.0, ge=0)


class FlowRequest(LayoutPayload):
    sun_hour: float = Field(default=12.0, ge=0, le=24)
    priority: List[Literal["Solar", "Battery", "Grid"]] = Field(
        default_factory=lambda: ["Solar", "Battery", "Grid"]
    )
    battery_limits: Dict[str, BatteryLimitsSchema] = Field(default_factory=dict)


class NodeFlowSchema(CamelModel):
    active_power: float
    grid_flow: float
    load_flow: float
    battery_flow: float
    is_energized: bool
    is_tripped: bool
    can_reset: bool


class FlowResponse(CamelModel):
    flows: Dict[str, NodeFlowSchema]

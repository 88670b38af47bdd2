"""
Layout analysis engine.

This package collects every pure component of the analysis:

* The layout arena (`layout`), site parameters (`params`) and the shared
  electrical rule table (`electrical_rules`).
* Topology building and validation (`topology`, `validator`, `plc`).
* Hourly energy balance (`energy_simulator`) driven by the deterministic
  solar and load models, plus the Monte Carlo shadow estimator (`shading`).
* Economic post-processing (`financial`, `boq`, `assessment`) and the
  single entry point (`engine.run_simulation`).

Nothing here reads the environment or performs I/O; higher layers
(`application`, FastAPI routes, CLI) pass all configuration explicitly.
"""

from __future__ import annotations

from .battery import BatteryBank
from .boq import apply_boq_overrides, build_boq, resolve_system_cost
from .energy_simulator import (
    EnergyBalanceConfig,
    EnergyBalanceResult,
    EnergyBalanceSimulator,
    MonthlyRecord,
    SystemCapacities,
    simulate_energy_balance,
)
from .engine import SimulationResult, run_simulation
from .financial import (
    DegradationModel,
    FinancialProjection,
    RoiMetrics,
    YearlyRecord,
    calculate_roi_metrics,
    project_financials,
)
from .layout import Layout, ObjectType, PlacedObject, WireConnection, WireType
from .load_profiles import DailyShapeLoadProfile, LoadProfile
from .params import ExtraCostItem, SimulationParams
from .power_flow import BatteryLimits, NodeFlow, calculate_flows
from .shading import ShadowLossEstimate, ShadowLossEstimator, estimate_shadow_loss
from .solar import SolarModel
from .topology import AdjacencyGraph, build_graph
from .validator import ConnectionFeedback, ValidationReport, validate, validate_connection

__all__ = [
    # Data model
    "Layout",
    "ObjectType",
    "PlacedObject",
    "WireConnection",
    "WireType",
    "SimulationParams",
    "ExtraCostItem",
    # Topology + validation
    "AdjacencyGraph",
    "build_graph",
    "ValidationReport",
    "ConnectionFeedback",
    "validate",
    "validate_connection",
    "BatteryLimits",
    "NodeFlow",
    "calculate_flows",
    # Physical models
    "BatteryBank",
    "SolarModel",
    "LoadProfile",
    "DailyShapeLoadProfile",
    "ShadowLossEstimate",
    "ShadowLossEstimator",
    "estimate_shadow_loss",
    # Energy balance
    "EnergyBalanceConfig",
    "EnergyBalanceResult",
    "EnergyBalanceSimulator",
    "MonthlyRecord",
    "SystemCapacities",
    "simulate_energy_balance",
    # Economics
    "DegradationModel",
    "FinancialProjection",
    "RoiMetrics",
    "YearlyRecord",
    "calculate_roi_metrics",
    "project_financials",
    "apply_boq_overrides",
    "build_boq",
    "resolve_system_cost",
    # Entry point
    "SimulationResult",
    "run_simulation",
]

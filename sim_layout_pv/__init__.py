from .simulation.boq import build_boq
from .simulation.energy_simulator import EnergyBalanceConfig, EnergyBalanceSimulator, SystemCapacities
from .simulation.engine import SimulationResult, run_simulation
from .simulation.financial import DegradationModel, calculate_roi_metrics, project_financials
from .simulation.layout import Layout, ObjectType, PlacedObject, WireConnection, WireType
from .simulation.params import ExtraCostItem, SimulationParams
from .simulation.power_flow import calculate_flows
from .simulation.shading import ShadowLossEstimator, estimate_shadow_loss
from .simulation.topology import build_graph
from .simulation.validator import validate, validate_connection
from .formatting import format_currency, format_energy
from .layout_io import load_layout_data
from .application import SimulationApplication

__all__ = [
    "Layout",
    "ObjectType",
    "PlacedObject",
    "WireConnection",
    "WireType",
    "SimulationParams",
    "ExtraCostItem",
    "build_graph",
    "validate",
    "validate_connection",
    "calculate_flows",
    "ShadowLossEstimator",
    "estimate_shadow_loss",
    "EnergyBalanceConfig",
    "EnergyBalanceSimulator",
    "SystemCapacities",
    "DegradationModel",
    "project_financials",
    "calculate_roi_metrics",
    "build_boq",
    "SimulationResult",
    "run_simulation",
    "format_currency",
    "format_energy",
    "load_layout_data",
    "SimulationApplication",
]

"""
Pydantic schemas for API request/response validation.

Organized by domain:
- simulation: analysis, validation, connection check and power-flow schemas
- common: camelCase base model and the shared layout payload

Example:
    ```python
    # Both import styles work:
    from sim_layout_pv.api.schemas import SimulationRequest
    from sim_layout_pv.api.schemas.simulation import SimulationRequest
    ```
"""

from __future__ import annotations

from .common import CamelModel, LayoutPayload
from .simulation import (
    ConnectionCheckRequest,
    ConnectionCheckResponse,
    FlowRequest,
    FlowResponse,
    SimulationParamsSchema,
    SimulationRequest,
    SimulationResponse,
    ValidationRequest,
    ValidationResponse,
)

__all__ = [
    # Base schemas
    "CamelModel",
    "LayoutPayload",
    # Analysis schemas
    "SimulationParamsSchema",
    "SimulationRequest",
    "SimulationResponse",
    # Validation schemas
    "ValidationRequest",
    "ValidationResponse",
    "ConnectionCheckRequest",
    "ConnectionCheckResponse",
    # Power-flow schemas
    "FlowRequest",
    "FlowResponse",
]

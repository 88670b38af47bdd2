"""
Layout analysis API endpoints.

Endpoints:
- POST /simulation: Full analysis (validation, energy, shading, ROI, BOQ)
- POST /validation: Batch topology report
- POST /connections/validate: Pre-commit check of one wire gesture
- POST /flows: Instantaneous power-flow snapshot

Every endpoint takes the layout inline; nothing is persisted. Engine
``ValueError`` (bad parameters, unknown wire type) maps to HTTP 400.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...application import SimulationApplication
from .. import dependencies
from ..schemas import simulation as sim_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post("/simulation", response_model=sim_schemas.SimulationResponse)
def run_simulation(
    payload: sim_schemas.SimulationRequest,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.SimulationResponse:
    """
    Analyse a layout end to end.

    Args:
        payload: Objects, wires, site/economic parameters and optional seed.
        app_service: Simulation application service (dependency injected).

    Returns:
        SimulationResponse with capacities, monthly and yearly series,
        the BOQ, findings and ROI metrics.

    Example:
        ```python
        # POST /api/simulation
        {
            "objects": [...],
            "wires": [...],
            "params": {"baseLoad": 500, "gridRate": 8.5, "isCommercial": false},
            "seed": 42
        }

        # Response (excerpt)
        {"valid": true, "score": 100, "verdict": "System Optimized", "dcCapacity": 4.4, ...}
        ```

    Notes:
        - A layout with no panels still returns a full record with score 0.
        - The shadow estimate is stochastic; pass ``seed`` for repeatable output.
    """
    try:
        result = app_service.simulate(
            payload.objects,
            payload.wires,
            payload.params.model_dump(),
            seed=payload.seed,
        )
    except ValueError as exc:
        logger.warning("Rejected simulation request: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return sim_schemas.SimulationResponse.model_validate(result.to_dict())


@router.post("/validation", response_model=sim_schemas.ValidationResponse)
def run_validation(
    payload: sim_schemas.ValidationRequest,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.ValidationResponse:
    """
    Run the batch topology and rule checks.

    ``valid`` is false when any finding is an ERROR or CRITICAL.
    """
    report = app_service.validate(payload.objects, payload.wires)
    blocking = [
        issue for issue in report["issues"] if issue.startswith(("ERROR", "CRITICAL"))
    ]
    return sim_schemas.ValidationResponse(
        valid=not blocking,
        issues=report["issues"],
        validations=report["validations"],
    )


@router.post("/connections/validate", response_model=sim_schemas.ConnectionCheckResponse)
def check_connection(
    payload: sim_schemas.ConnectionCheckRequest,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.ConnectionCheckResponse:
    """
    Check one wire before the editor commits it.

    Returns ``ok: true`` without feedback when the wire is acceptable.
    """
    try:
        feedback = app_service.check_connection(payload.source, payload.target, payload.wire_type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if feedback is None:
        return sim_schemas.ConnectionCheckResponse(ok=True)
    return sim_schemas.ConnectionCheckResponse(
        ok=feedback["type"] != "error",
        feedback=sim_schemas.ConnectionFeedbackSchema(**feedback),
    )


@router.post("/flows", response_model=sim_schemas.FlowResponse)
def compute_flows(
    payload: sim_schemas.FlowRequest,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.FlowResponse:
    """
    Compute the power-flow snapshot at one sun hour.

    Keys of ``flows`` are object ids; panels, loads, batteries, meters
    and boards each carry their energized and tripped state.
    """
    limits = {
        key: {"max_discharge": value.max_discharge, "max_charge": value.max_charge}
        for key, value in payload.battery_limits.items()
    }
    try:
        flows = app_service.flows(
            payload.objects,
            payload.wires,
            sun_hour=payload.sun_hour,
            priority=payload.priority,
            battery_limits=limits,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return sim_schemas.FlowResponse.model_validate({"flows": flows})

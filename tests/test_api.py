from __future__ import annotations

from fastapi.testclient import TestClient

from sim_layout_pv.api import dependencies
from sim_layout_pv.api.app import create_app
from sim_layout_pv.application import SimulationApplication


def create_test_client() -> TestClient:
    """Build a FastAPI test client with a seeded application service."""
    app = create_app()
    app.dependency_overrides[dependencies.get_application_service] = lambda: SimulationApplication(seed=5)
    return TestClient(app)


def test_api_simulation(default_layout_data: dict):
    """Exercise /api/simulation with the bundled layout."""
    client = create_test_client()
    resp = client.post("/api/simulation", json=default_layout_data)

    assert resp.status_code == 200
    data = resp.json()
    assert data["valid"] is True
    assert data["dcCapacity"] == 4.4
    assert len(data["monthlyData"]) == 12
    assert "netExport" in data["monthlyData"][0]
    assert len(data["yearlyData"]) == 25
    assert data["boq"]["Structure (RCC)"]["type"] == "structure"
    assert "totalSavings25Year" in data["roiMetrics"]


def test_api_simulation_is_reproducible_with_seed(default_layout_data: dict):
    client = create_test_client()
    payload = dict(default_layout_data, seed=9)

    first = client.post("/api/simulation", json=payload).json()
    second = client.post("/api/simulation", json=payload).json()
    assert first == second


def test_api_simulation_rejects_invalid_params():
    client = create_test_client()
    resp = client.post("/api/simulation", json={"objects": [], "params": {"gridRate": -2}})

    assert resp.status_code == 422


def test_api_simulation_empty_layout():
    client = create_test_client()
    resp = client.post("/api/simulation", json={})

    assert resp.status_code == 200
    data = resp.json()
    assert data["score"] == 0
    assert data["issues"][0] == "ERROR: No solar panels in design"


def test_api_validation():
    client = create_test_client()
    resp = client.post(
        "/api/validation",
        json={
            "objects": [{"id": "g1", "type": "grid"}, {"id": "i1", "type": "inverter"}],
            "wires": [{"id": "w1", "from": "g1", "to": "i1", "type": "ac"}],
        },
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["valid"] is False
    assert any(issue.startswith("CRITICAL: Voltage Mismatch") for issue in data["issues"])


def test_api_connection_check():
    client = create_test_client()

    rejected = client.post(
        "/api/connections/validate",
        json={"from": {"id": "l1", "type": "load"}, "to": {"id": "p1", "type": "panel"}, "wireType": "dc"},
    )
    assert rejected.status_code == 200
    assert rejected.json()["ok"] is False
    assert rejected.json()["feedback"]["type"] == "error"

    accepted = client.post(
        "/api/connections/validate",
        json={"from": {"id": "p1", "type": "panel"}, "to": {"id": "p2", "type": "panel"}, "wireType": "dc"},
    )
    assert accepted.json() == {"ok": True, "feedback": None}

    unknown = client.post(
        "/api/connections/validate",
        json={"from": {"id": "p1", "type": "panel"}, "to": {"id": "p2", "type": "panel"}, "wireType": "laser"},
    )
    assert unknown.status_code == 400


def test_api_flows(small_grid_tied_layout: dict):
    client = create_test_client()
    resp = client.post(
        "/api/flows",
        json={**small_grid_tied_layout, "sunHour": 12, "priority": ["Solar", "Battery", "Grid"]},
    )

    assert resp.status_code == 200
    flows = resp.json()["flows"]
    assert flows["p1"]["activePower"] > 0
    assert flows["nm1"]["isEnergized"] is True

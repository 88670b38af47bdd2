from __future__ import annotations

import logging

import pytest

from sim_layout_pv.application import SimulationApplication


def test_run_analysis_uses_bundled_layout_by_default():
    """The bundled example analyses cleanly."""
    app = SimulationApplication(seed=7)
    record = app.run_analysis()

    assert record["valid"] is True
    assert record["dcCapacity"] == pytest.approx(4.4)
    assert record["issues"] == []


def test_run_analysis_accepts_json_file(tmp_path, default_layout_data: dict):
    import json

    path = tmp_path / "layout.json"
    path.write_text(json.dumps(default_layout_data), encoding="utf-8")

    app = SimulationApplication(seed=7)
    assert app.run_analysis(str(path)) == app.run_analysis(default_layout_data)


def test_seeding_is_reproducible(default_layout_data: dict):
    objects, wires = default_layout_data["objects"], default_layout_data["wires"]
    app = SimulationApplication(seed=11)

    assert app.simulate(objects, wires).to_dict() == app.simulate(objects, wires).to_dict()
    # A per-call seed overrides the application default.
    assert (
        app.simulate(objects, wires, seed=3).to_dict()
        == SimulationApplication(seed=3).simulate(objects, wires).to_dict()
    )


def test_seed_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("SIM_LAYOUT_PV_SEED", "99")
    assert SimulationApplication().seed == 99
    assert SimulationApplication(seed=None).seed is None


def test_simulate_logs_a_summary(caplog, small_grid_tied_layout: dict):
    app = SimulationApplication(seed=1)
    with caplog.at_level(logging.INFO, logger="sim_layout_pv.application"):
        app.simulate(small_grid_tied_layout["objects"], small_grid_tied_layout["wires"])

    assert any("Simulated 9 objects / 5 wires" in message for message in caplog.messages)


def test_validate_and_check_connection(small_grid_tied_layout: dict):
    app = SimulationApplication(seed=1)

    report = app.validate(small_grid_tied_layout["objects"], small_grid_tied_layout["wires"])
    assert report["issues"] == []

    feedback = app.check_connection({"id": "l", "type": "load"}, {"id": "p", "type": "panel"}, "dc")
    assert feedback["type"] == "error"
    assert app.check_connection({"id": "a", "type": "panel"}, {"id": "b", "type": "panel"}, "dc") is None


def test_flows_returns_camel_case_records(small_grid_tied_layout: dict):
    app = SimulationApplication(seed=1)
    flows = app.flows(
        small_grid_tied_layout["objects"],
        small_grid_tied_layout["wires"],
        sun_hour=12.0,
        priority=["Solar", "Grid"],
    )

    assert set(flows) == {obj["id"] for obj in small_grid_tied_layout["objects"]}
    assert flows["p1"]["activePower"] == pytest.approx(0.425)
    assert flows["grid1"]["isEnergized"] is True

from __future__ import annotations

import pytest

from sim_layout_pv.simulation.layout import PlacedObject
from sim_layout_pv.simulation.power_flow import BatteryLimits, calculate_flows, panel_generation_kw


def _chain(*ids: str) -> list[dict]:
    return [{"id": f"w{i}", "from": a, "to": b, "type": "ac"} for i, (a, b) in enumerate(zip(ids, ids[1:]))]


PANEL = {"id": "p1", "type": "panel", "watts": 1000}
GRID = {"id": "g1", "type": "grid"}
NET_METER = {"id": "nm1", "type": "net_meter"}


def _load(units: float) -> dict:
    return {"id": "l1", "type": "load", "units": units}


def test_panel_generation_follows_half_sine() -> None:
    panel = PlacedObject.from_dict(PANEL)

    assert panel_generation_kw(panel, 12.0) == pytest.approx(0.85)
    assert panel_generation_kw(panel, 6.0) == 0.0
    assert panel_generation_kw(panel, 18.0) == 0.0
    assert panel_generation_kw(PlacedObject.from_dict({"id": "x", "type": "panel"}), 12.0) == pytest.approx(0.4675)


def test_grid_covers_the_deficit_and_net_meter_reads_import() -> None:
    objects = [PANEL, _load(720), NET_METER, GRID]
    flows = calculate_flows(objects, sun_hour=12.0, wires=_chain("p1", "l1", "nm1", "g1"))

    assert flows["p1"].active_power == pytest.approx(0.85)
    assert flows["l1"].active_power == pytest.approx(1.0)
    assert flows["nm1"].grid_flow == pytest.approx(0.15)
    assert all(flow.is_energized for flow in flows.values())


def test_surplus_is_exported_through_net_meter() -> None:
    objects = [PANEL, _load(144), NET_METER, GRID]
    flows = calculate_flows(objects, sun_hour=12.0, wires=_chain("p1", "l1", "nm1", "g1"))

    assert flows["nm1"].grid_flow == pytest.approx(-0.65)
    assert flows["nm1"].to_dict()["gridFlow"] == pytest.approx(-0.65)


def test_gross_meter_reads_served_load() -> None:
    objects = [PANEL, _load(720), {"id": "gm1", "type": "meter", "subtype": "gross_meter"}, GRID]
    flows = calculate_flows(objects, sun_hour=12.0, wires=_chain("p1", "l1", "gm1", "g1"))

    assert flows["gm1"].load_flow == pytest.approx(1.0)


def test_island_without_grid_uses_battery_limits() -> None:
    objects = [PANEL, _load(720), {"id": "b1", "type": "battery"}]
    flows = calculate_flows(
        objects,
        sun_hour=12.0,
        battery_limits={"b1": BatteryLimits(max_discharge=0.1, max_charge=0.5)},
        wires=_chain("p1", "l1", "b1"),
    )

    assert flows["b1"].battery_flow == pytest.approx(0.1)
    assert flows["l1"].active_power == pytest.approx(0.95)
    assert flows["l1"].is_energized


def test_battery_absorbs_surplus_up_to_charge_limit() -> None:
    objects = [PANEL, _load(144), {"id": "b1", "type": "battery"}]
    flows = calculate_flows(
        objects,
        sun_hour=12.0,
        battery_limits={"b1": BatteryLimits.from_dict({"maxDischarge": 1.0, "maxCharge": 0.5})},
        wires=_chain("p1", "l1", "b1"),
    )

    assert flows["b1"].battery_flow == pytest.approx(-0.5)


def test_priority_order_can_put_grid_first() -> None:
    objects = [PANEL, _load(720), NET_METER, GRID]
    flows = calculate_flows(
        objects,
        sun_hour=12.0,
        priority=("Grid", "Solar"),
        wires=_chain("p1", "l1", "nm1", "g1"),
    )

    # Grid serves the whole load, all generation is exported.
    assert flows["nm1"].grid_flow == pytest.approx(1.0 - 0.85)


def test_breaker_facing_grid_outage_trips_and_isolates_load() -> None:
    objects = [dict(GRID, isOutage=True), {"id": "v1", "type": "vcb"}, _load(720)]
    flows = calculate_flows(objects, sun_hour=3.0, wires=_chain("g1", "v1", "l1"))

    assert flows["v1"].is_tripped
    assert not flows["v1"].is_energized
    assert not flows["v1"].can_reset
    assert not flows["l1"].is_energized
    assert flows["l1"].active_power == 0.0


def test_breaker_facing_healthy_grid_can_reset() -> None:
    objects = [GRID, {"id": "v1", "type": "vcb"}, _load(720)]
    flows = calculate_flows(objects, sun_hour=3.0, wires=_chain("g1", "v1", "l1"))

    assert not flows["v1"].is_tripped
    assert flows["v1"].can_reset
    assert flows["l1"].is_energized
    assert flows["l1"].active_power == pytest.approx(1.0)


def test_open_breaker_splits_islands() -> None:
    objects = [GRID, {"id": "v1", "type": "acb", "isOn": False}, _load(720)]
    flows = calculate_flows(objects, sun_hour=12.0, wires=_chain("g1", "v1", "l1"))

    assert flows["g1"].is_energized
    assert not flows["l1"].is_energized

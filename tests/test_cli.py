from __future__ import annotations

import json
import logging

import pytest

from sim_layout_pv import cli


@pytest.fixture(autouse=True)
def _seeded(monkeypatch):
    monkeypatch.setenv("SIM_LAYOUT_PV_SEED", "3")
    root = logging.getLogger()
    level = root.level
    yield
    # main() installs a stderr handler bound to the captured stream.
    for handler in list(root.handlers):
        if getattr(handler, "_sim_layout_pv", False):
            root.removeHandler(handler)
    root.setLevel(level)


def test_simulate_prints_json_record(capsys):
    cli.main(["simulate"])
    record = json.loads(capsys.readouterr().out)

    assert record["valid"] is True
    assert record["dcCapacity"] == pytest.approx(4.4)


def test_simulate_summary(capsys):
    cli.main(["simulate", "--summary", "--seed", "1"])
    out = capsys.readouterr().out

    assert "Verdict:" in out
    assert "₹" in out
    assert "kWp" in out


def test_validate_reads_layout_file(tmp_path, capsys, small_grid_tied_layout):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps(small_grid_tied_layout), encoding="utf-8")

    cli.main(["validate", "--layout-file", str(path)])
    report = json.loads(capsys.readouterr().out)

    assert report["issues"] == []


def test_check_wire(capsys):
    cli.main(["check-wire", "--from", "p1", "--to", "load1", "--type", "dc"])
    result = json.loads(capsys.readouterr().out)

    assert result["ok"] is False
    assert result["feedback"]["type"] == "error"


def test_check_wire_unknown_object():
    with pytest.raises(SystemExit):
        cli.main(["check-wire", "--from", "p1", "--to", "nope"])


def test_flows_with_priority(capsys):
    cli.main(["flows", "--hour", "12", "--priority", "Grid,Solar"])
    flows = json.loads(capsys.readouterr().out)

    assert flows["p1"]["activePower"] > 0


def test_missing_layout_file_exits(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["validate", "--layout-file", str(tmp_path / "missing.json")])


def test_unknown_priority_exits():
    with pytest.raises(SystemExit):
        cli.main(["flows", "--priority", "Solar,Wind"])


def test_no_command_prints_help(capsys):
    cli.main([])
    assert "usage" in capsys.readouterr().out.lower()

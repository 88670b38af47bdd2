from __future__ import annotations

import copy
from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sim_layout_pv.layout_io import load_layout_data  # noqa: E402

_DEFAULT_LAYOUT = load_layout_data()


@pytest.fixture()
def default_layout_data() -> dict:
    """Return a fresh copy of the bundled 4.4 kWp hybrid rooftop layout."""
    return copy.deepcopy(_DEFAULT_LAYOUT)


@pytest.fixture()
def rng() -> np.random.Generator:
    """Seeded generator for the shadow sampling."""
    return np.random.default_rng(123)


@pytest.fixture()
def small_grid_tied_layout() -> dict:
    """Two panels, a 1 kW inverter, one load box and a grid behind a net meter."""
    objects = [
        {"id": "p1", "type": "panel", "x": 0.0, "y": 0.0, "w": 1.0, "h": 2.0, "watts": 500, "cost": 10000},
        {"id": "p2", "type": "panel", "x": 1.1, "y": 0.0, "w": 1.0, "h": 2.0, "watts": 500, "cost": 10000},
        {"id": "jb1", "type": "dcdb", "x": 3.0, "y": 0.0, "w": 0.3, "h": 0.3},
        {"id": "inv1", "type": "inverter", "x": 4.0, "y": 0.0, "w": 0.5, "h": 0.3, "capKw": 1.0, "cost": 30000},
        {"id": "load1", "type": "load", "x": 6.0, "y": 0.0, "w": 1.0, "h": 1.0, "units": 100},
        {"id": "nm1", "type": "net_meter", "x": 7.0, "y": 0.0, "w": 0.3, "h": 0.3},
        {"id": "grid1", "type": "grid", "x": 8.0, "y": 0.0, "w": 1.0, "h": 1.0, "specifications": {"voltage": 230}},
        {"id": "e1", "type": "earthing", "subtype": "earth", "x": 0.0, "y": 5.0, "w": 0.5, "h": 0.5},
        {"id": "la1", "type": "lightning_arrestor", "subtype": "la", "x": 1.0, "y": 5.0, "w": 0.2, "h": 0.2},
    ]
    wires = [
        {"id": "w1", "from": "p1", "to": "jb1", "type": "dc"},
        {"id": "w2", "from": "jb1", "to": "inv1", "type": "dc"},
        {"id": "w3", "from": "inv1", "to": "load1", "type": "ac"},
        {"id": "w4", "from": "inv1", "to": "nm1", "type": "ac"},
        {"id": "w5", "from": "nm1", "to": "grid1", "type": "ac"},
    ]
    return {"objects": objects, "wires": wires}

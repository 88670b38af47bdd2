from __future__ import annotations

import math
import time

import numpy as np
import pytest

from sim_layout_pv.simulation.layout import Layout, PlacedObject
from sim_layout_pv.simulation.shading import (
    ShadowLossEstimator,
    estimate_shadow_loss,
    footprint_mask,
    shadow_vector,
)
from sim_layout_pv.simulation.sun import local_solar_sample, solar_position

PANEL = {"id": "p1", "type": "panel", "x": 0.0, "y": 0.0, "w": 1.0, "h": 2.0, "h_z": 0.0, "watts": 500}


def test_zero_panels_means_zero_loss() -> None:
    objects = [{"id": "tank", "type": "obstacle", "x": 0, "y": 0, "w": 5, "h": 5, "h_z": 10}]
    assert estimate_shadow_loss(objects, 28.6, 77.2, rng=np.random.default_rng(0)) == 0.0


def test_panel_under_large_tall_object_is_fully_shaded() -> None:
    canopy = {"id": "roof", "type": "structure", "x": -50.0, "y": -50.0, "w": 100.0, "h": 100.0, "h_z": 0.5}
    estimate = ShadowLossEstimator(28.6, 77.2, rng=np.random.default_rng(1)).estimate(Layout.build([PANEL, canopy]))

    assert estimate.ratio == pytest.approx(1.0)
    assert estimate.samples == 36


def test_lower_objects_cast_no_shadow() -> None:
    raised_panel = dict(PANEL, h_z=3.0)
    low_wall = {"id": "wall", "type": "obstacle", "x": -5.0, "y": -5.0, "w": 10.0, "h": 10.0, "h_z": 3.0}

    assert estimate_shadow_loss([raised_panel, low_wall], 28.6, 77.2, rng=np.random.default_rng(2)) == 0.0


def test_partial_shading_is_bounded_and_reproducible_with_seed() -> None:
    objects = [
        PANEL,
        dict(PANEL, id="p2", x=1.1),
        {"id": "tank", "type": "obstacle", "x": 0.5, "y": 2.2, "w": 1.0, "h": 1.0, "h_z": 2.0},
    ]
    first = estimate_shadow_loss(objects, 28.6, 77.2, rng=np.random.default_rng(42))
    second = estimate_shadow_loss(objects, 28.6, 77.2, rng=np.random.default_rng(42))

    assert first == second
    assert 0.0 <= first <= 1.0


def test_monthly_ratio_is_reported_for_daylight_months() -> None:
    canopy = {"id": "roof", "type": "structure", "x": -50.0, "y": -50.0, "w": 100.0, "h": 100.0, "h_z": 0.5}
    estimate = ShadowLossEstimator(28.6, 77.2, rng=np.random.default_rng(3)).estimate(Layout.build([PANEL, canopy]))

    assert estimate.monthly_ratio.shape == (12,)
    assert np.allclose(estimate.monthly_ratio, 1.0)


def test_shadow_vector_is_none_at_night_and_capped() -> None:
    assert shadow_vector(0.0, -0.1) is None
    dx, dy = shadow_vector(0.0, 1e-6)
    assert math.hypot(dx, dy) == pytest.approx(10.0)
    dx, dy = shadow_vector(math.pi, math.pi / 4)
    assert math.hypot(dx, dy) == pytest.approx(1.0)


def test_polygon_footprint_uses_outline() -> None:
    triangle = PlacedObject.from_dict(
        {
            "id": "poly",
            "type": "polygon",
            "x": 0.0,
            "y": 0.0,
            "w": 2.0,
            "h": 2.0,
            "vertices": [{"x": 0, "y": 0}, {"x": 2, "y": 0}, {"x": 0, "y": 2}],
        }
    )
    xs = np.array([0.5, 1.8, 0.5])
    ys = np.array([0.5, 1.8, 0.5])

    inside = footprint_mask(triangle, 0.0, 0.0, xs, ys)
    assert inside.tolist() == [True, False, True]
    shifted = footprint_mask(triangle, 10.0, 0.0, xs, ys)
    assert not shifted.any()


def test_sun_is_high_at_local_noon_and_down_at_midnight() -> None:
    noon = solar_position(local_solar_sample(2024, 5, 12.0, 77.2), 28.6, 77.2)
    midnight = solar_position(local_solar_sample(2024, 5, 0.0, 77.2), 28.6, 77.2)

    # Mid-June at 28.6 N the noon sun is close to 85 degrees high.
    assert math.degrees(noon.altitude) == pytest.approx(85.0, abs=2.0)
    assert midnight.altitude < 0


def test_polygon_caster_shades_panels_below_it() -> None:
    canopy = {
        "id": "canopy",
        "type": "polygon",
        "x": -50.0,
        "y": -50.0,
        "h_z": 0.5,
        "vertices": [[0, 0], [100, 0], [100, 100], [0, 100]],
    }
    estimate = ShadowLossEstimator(28.6, 77.2, rng=np.random.default_rng(4)).estimate(Layout.build([PANEL, canopy]))

    assert estimate.ratio == pytest.approx(1.0)


def test_taller_panel_shades_lower_panel_but_not_itself() -> None:
    low = dict(PANEL, id="low", h_z=0.0)
    high = dict(PANEL, id="high", x=-50.0, y=-50.0, w=100.0, h=100.0, h_z=0.5)
    estimate = ShadowLossEstimator(28.6, 77.2, rng=np.random.default_rng(6)).estimate(Layout.build([low, high]))

    # The large panel is fully lit and the small one fully shaded.
    low_area = 2.0
    high_area = 100.0 * 100.0
    assert estimate.ratio == pytest.approx(low_area / (low_area + high_area))


def test_few_hundred_objects_are_sampled_quickly() -> None:
    panels = [
        {"id": f"p{i}", "type": "panel", "x": (i % 20) * 1.2, "y": (i // 20) * 2.3, "w": 1.1, "h": 2.2, "h_z": 0.0}
        for i in range(200)
    ]
    obstacles = [
        {"id": f"o{i}", "type": "obstacle", "x": (i % 10) * 2.5, "y": -5.0 - (i // 10) * 2.0, "w": 1.0, "h": 1.0, "h_z": 3.0}
        for i in range(100)
    ]
    layout = Layout.build(panels + obstacles)
    estimator = ShadowLossEstimator(28.6, 77.2, rng=np.random.default_rng(0))
    estimator.estimate(layout)

    start = time.perf_counter()
    ratio = estimator.estimate(layout).ratio
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    assert 0.0 <= ratio <= 1.0
    assert elapsed_ms < 200.0

"""
Monte Carlo shadow-loss estimation.

For each month (sampled on the 15th) and each of three local solar times,
random points are drawn on every panel and tested against the shadow
footprint of every taller object. The result is the yearly fraction of
panel area in shade.

Box casters are tested for all panels at once by broadcasting over
(panel, caster, point); only polygon casters are visited one by one.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .layout import Layout, ObjectType, PlacedObject
from .sun import DEFAULT_REFERENCE_YEAR, local_solar_sample, solar_position

logger = logging.getLogger(__name__)

SAMPLE_HOURS: Tuple[float, ...] = (9.0, 12.0, 15.0)
POINTS_PER_PANEL = 5
MAX_SHADOW_LENGTH = 10.0


def shadow_vector(azimuth: float, altitude: float) -> Optional[Tuple[float, float]]:
    """
    Ground displacement of a shadow per meter of height.

    Returns:
        ``(dx, dy)`` or ``None`` when the sun is below the horizon.
    """
    if altitude <= 0:
        return None
    length = min(1.0 / math.tan(altitude), MAX_SHADOW_LENGTH)
    return -math.sin(azimuth) * length, math.cos(azimuth) * length


def _points_in_polygon(xs: np.ndarray, ys: np.ndarray, polygon: Sequence[Tuple[float, float]]) -> np.ndarray:
    inside = np.zeros(np.shape(xs), dtype=bool)
    n = len(polygon)
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        if y1 == y2:
            continue
        crosses = (y1 > ys) != (y2 > ys)
        x_cross = (x2 - x1) * (ys - y1) / (y2 - y1) + x1
        inside ^= crosses & (xs < x_cross)
    return inside


def _is_polygon(obj: PlacedObject) -> bool:
    return obj.type is ObjectType.POLYGON and len(obj.vertices) >= 3


def footprint_mask(caster: PlacedObject, dx, dy, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """
    Which points fall inside ``caster``'s footprint shifted by ``(dx, dy)``.

    ``dx`` and ``dy`` may be scalars or arrays broadcastable against the
    points. Polygons with at least three vertices (relative to ``x, y``)
    use their outline; everything else uses its axis-aligned bounding box.
    """
    rel_x = xs - dx - caster.x
    rel_y = ys - dy - caster.y
    if _is_polygon(caster):
        return _points_in_polygon(rel_x, rel_y, caster.vertices)
    return (rel_x >= 0) & (rel_x <= caster.w) & (rel_y >= 0) & (rel_y <= caster.h)


@dataclass
class ShadowLossEstimate:
    """
    Attributes:
        ratio: Yearly shaded fraction of panel area (0-1).
        monthly_ratio: Shaded fraction per month, shape (12,); NaN for
            months where the sun never rose at the sample times.
        samples: Number of (month, hour) samples with the sun above the horizon.
    """

    ratio: float
    monthly_ratio: np.ndarray = field(default_factory=lambda: np.zeros(12))
    samples: int = 0


@dataclass
class _SceneArrays:
    """Panel and caster geometry flattened into arrays once per estimate."""

    panel_x: np.ndarray
    panel_y: np.ndarray
    panel_w: np.ndarray
    panel_h: np.ndarray
    panel_z: np.ndarray
    panel_area: np.ndarray
    box_x: np.ndarray
    box_y: np.ndarray
    box_w: np.ndarray
    box_h: np.ndarray
    box_z: np.ndarray
    polygons: List[PlacedObject]

    @classmethod
    def from_layout(cls, panels: List[PlacedObject], objects: Sequence[PlacedObject]) -> "_SceneArrays":
        lowest_panel = min(panel.h_z for panel in panels)
        # Nothing at or below the lowest panel top can shade any panel.
        casters = [obj for obj in objects if obj.h_z > lowest_panel]
        boxes = [obj for obj in casters if not _is_polygon(obj)]

        def column(items: Sequence[PlacedObject], attr: str) -> np.ndarray:
            return np.array([getattr(item, attr) for item in items], dtype=float)

        return cls(
            panel_x=column(panels, "x"),
            panel_y=column(panels, "y"),
            panel_w=column(panels, "w"),
            panel_h=column(panels, "h"),
            panel_z=column(panels, "h_z"),
            panel_area=column(panels, "area"),
            box_x=column(boxes, "x"),
            box_y=column(boxes, "y"),
            box_w=column(boxes, "w"),
            box_h=column(boxes, "h"),
            box_z=column(boxes, "h_z"),
            polygons=[obj for obj in casters if _is_polygon(obj)],
        )


class ShadowLossEstimator:
    """
    Randomised occlusion sampler.

    The random generator is injected so a caller can seed it; two estimators
    never share sampling state.
    """

    def __init__(
        self,
        latitude: float,
        longitude: float,
        *,
        rng: np.random.Generator | None = None,
        reference_year: int = DEFAULT_REFERENCE_YEAR,
        sample_hours: Iterable[float] = SAMPLE_HOURS,
        points_per_panel: int = POINTS_PER_PANEL,
    ) -> None:
        if points_per_panel < 1:
            raise ValueError("points_per_panel must be >= 1")
        self.latitude = latitude
        self.longitude = longitude
        self.rng = rng if rng is not None else np.random.default_rng()
        self.reference_year = reference_year
        self.sample_hours = tuple(sample_hours)
        self.points_per_panel = points_per_panel

    def _shaded_area(self, scene: _SceneArrays, vector: Tuple[float, float]) -> float:
        draws = self.rng.random((scene.panel_x.size, self.points_per_panel, 2))
        xs = scene.panel_x[:, None] + draws[:, :, 0] * scene.panel_w[:, None]
        ys = scene.panel_y[:, None] + draws[:, :, 1] * scene.panel_h[:, None]
        shaded = np.zeros(xs.shape, dtype=bool)

        if scene.box_x.size:
            # (panel, caster) height of each caster above each panel
            dh = scene.box_z[None, :] - scene.panel_z[:, None]
            left = scene.box_x[None, :] + vector[0] * dh
            bottom = scene.box_y[None, :] + vector[1] * dh
            rel_x = xs[:, None, :] - left[:, :, None]
            rel_y = ys[:, None, :] - bottom[:, :, None]
            hits = (
                (rel_x >= 0)
                & (rel_x <= scene.box_w[None, :, None])
                & (rel_y >= 0)
                & (rel_y <= scene.box_h[None, :, None])
                & (dh > 0)[:, :, None]
            )
            shaded |= hits.any(axis=1)

        for caster in scene.polygons:
            dh = caster.h_z - scene.panel_z
            mask = footprint_mask(caster, vector[0] * dh[:, None], vector[1] * dh[:, None], xs, ys)
            shaded |= mask & (dh > 0)[:, None]

        fraction = shaded.sum(axis=1) / self.points_per_panel
        return float(np.dot(fraction, scene.panel_area))

    def estimate(self, layout: Layout) -> ShadowLossEstimate:
        """
        Estimate the yearly shadow loss of every panel in ``layout``.

        The yearly ratio is the sum over months of the time-averaged shaded
        area divided by the panel area counted once per sampled month.
        """
        panels = layout.of_type(ObjectType.PANEL)
        monthly_ratio = np.full(12, np.nan)
        panel_area = sum(panel.area for panel in panels)
        if not panels or panel_area <= 0:
            return ShadowLossEstimate(ratio=0.0, monthly_ratio=np.zeros(12), samples=0)

        scene = _SceneArrays.from_layout(panels, layout.objects)
        total_shadow = 0.0
        total_area = 0.0
        n_samples = 0
        for month in range(12):
            month_shadow = 0.0
            valid = 0
            for hour in self.sample_hours:
                when = local_solar_sample(self.reference_year, month, hour, self.longitude)
                position = solar_position(when, self.latitude, self.longitude)
                vector = shadow_vector(position.azimuth, position.altitude)
                if vector is None:
                    continue
                month_shadow += self._shaded_area(scene, vector)
                valid += 1
            if valid == 0:
                continue
            month_average = month_shadow / valid
            monthly_ratio[month] = month_average / panel_area
            total_shadow += month_average
            total_area += panel_area
            n_samples += valid

        ratio = total_shadow / total_area if total_area > 0 else 0.0
        ratio = min(max(ratio, 0.0), 1.0)
        logger.debug(
            "Shadow loss %.4f from %d sun samples over %d panels and %d casters",
            ratio,
            n_samples,
            len(panels),
            scene.box_x.size + len(scene.polygons),
        )
        return ShadowLossEstimate(ratio=ratio, monthly_ratio=monthly_ratio, samples=n_samples)


def estimate_shadow_loss(
    objects: Layout | Iterable,
    latitude: float,
    longitude: float,
    rng: np.random.Generator | None = None,
    reference_year: int = DEFAULT_REFERENCE_YEAR,
) -> float:
    """
    Convenience wrapper returning only the yearly shadow-loss ratio in [0, 1].

    Args:
        objects: Layout or editor object list.
        latitude: Site latitude (degrees).
        longitude: Site longitude (degrees).
        rng: Optional seeded generator; a fresh entropy-seeded one otherwise.
        reference_year: Year of the 15th-of-month samples.
    """
    layout = Layout.coerce(objects)
    estimator = ShadowLossEstimator(latitude, longitude, rng=rng, reference_year=reference_year)
    return estimator.estimate(layout).ratio

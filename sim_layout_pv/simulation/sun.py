"""
Simplified solar position (low-precision NOAA/SunCalc formulation).

Good to a fraction of a degree, which is plenty for shadow sampling on a
site plan.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

DEFAULT_REFERENCE_YEAR = 2024

_RAD = math.pi / 180.0
_DAY_SECONDS = 86400.0
_J1970 = 2440588.0
_J2000 = 2451545.0


@dataclass(frozen=True)
class SunPosition:
    """
    Attributes:
        azimuth: Radians, the south-based solar azimuth shifted by pi to
            match the north-up canvas.
        altitude: Radians above the horizon (negative at night).
    """

    azimuth: float
    altitude: float


def local_solar_sample(year: int, month: int, local_hour: float, longitude: float) -> datetime:
    """
    UTC instant for ``local_hour`` local solar time on the 15th of ``month``.

    Args:
        year: Calendar year.
        month: Month index 0-11.
        local_hour: Local solar time in hours.
        longitude: Site longitude in degrees (east positive); the UTC hour
            is ``local_hour - longitude / 15``.
    """
    utc_hour = local_hour - longitude / 15.0
    base = datetime(year, month + 1, 15, tzinfo=timezone.utc)
    return base + timedelta(hours=utc_hour)


def solar_position(when: datetime, latitude: float, longitude: float) -> SunPosition:
    """
    Compute sun azimuth and altitude for a UTC instant.

    Args:
        when: Timezone-aware datetime (naive values are treated as UTC).
        latitude: Degrees north.
        longitude: Degrees east.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    when = when.astimezone(timezone.utc)

    julian = when.timestamp() / _DAY_SECONDS - 0.5 + _J1970
    d = julian - _J2000

    mean_longitude = (280.16 + 0.9856235 * d) % 360
    mean_anomaly = (357.5291 + 0.98560028 * d) % 360
    ecliptic_longitude = (
        mean_longitude
        + 1.9148 * math.sin(mean_anomaly * _RAD)
        + 0.02 * math.sin(2 * mean_anomaly * _RAD)
        + 0.0003 * math.sin(3 * mean_anomaly * _RAD)
    ) * _RAD
    obliquity = (23.4393 - 0.0000004 * d) * _RAD

    right_ascension = math.atan2(math.cos(obliquity) * math.sin(ecliptic_longitude), math.cos(ecliptic_longitude))
    declination = math.asin(math.sin(obliquity) * math.sin(ecliptic_longitude))

    sidereal = (
        6.697375
        + 0.0657098242 * d
        + 1.0027379 * when.hour
        + (when.minute / 60.0) * 1.0027379
    ) * 15 * _RAD
    hour_angle = sidereal + longitude * _RAD - right_ascension

    lat = latitude * _RAD
    azimuth = math.atan2(
        math.sin(hour_angle),
        math.cos(hour_angle) * math.sin(lat) - math.tan(declination) * math.cos(lat),
    )
    altitude = math.asin(
        math.sin(lat) * math.sin(declination) + math.cos(lat) * math.cos(declination) * math.cos(hour_angle)
    )
    # Rotate from south-based to north-up canvas azimuth.
    return SunPosition(azimuth=azimuth + math.pi, altitude=altitude)

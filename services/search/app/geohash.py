"""
Geohash codec used to index provider service areas.

Stored provider geohashes use precision 7 (~153m cells). Searches pick a prefix
set for a radius and scan each prefix as a sorted-key range; callers must refine
the hits with `haversine_km` since a prefix cover is only approximate.
"""

from __future__ import annotations

import math

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP = {c: i for i, c in enumerate(BASE32)}

DEFAULT_PRECISION = 7
EARTH_RADIUS_KM = 6371.0

# (radius >= meters, precision); thresholds are kept exactly as the index was built with
_PRECISION_TABLE = (
    (5_000_000, 1),
    (1_250_000, 2),
    (156_000, 3),
    (39_000, 4),
    (4_900, 5),
    (1_200, 6),
    (153, 7),
    (38, 8),
)
SMALL_RADIUS_METERS = 1000

# N, NE, E, SE, S, SW, W, NW as (lat step, lon step)
_DIRECTIONS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))


class InvalidCoordinate(ValueError):
    """Latitude/longitude out of range, bad precision, or a malformed geohash."""


def encode(latitude: float, longitude: float, precision: int = DEFAULT_PRECISION) -> str:
    if isinstance(precision, bool) or not isinstance(precision, int) or precision <= 0:
        raise InvalidCoordinate(f"precision must be a positive integer, got {precision!r}")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinate(f"latitude out of range: {latitude!r}")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinate(f"longitude out of range: {longitude!r}")

    lat_min, lat_max = -90.0, 90.0
    lon_min, lon_max = -180.0, 180.0
    even = True
    out: list[str] = []

    while len(out) < precision:
        ch = 0
        for mask in (16, 8, 4, 2, 1):
            if even:
                mid = (lon_min + lon_max) / 2.0
                if longitude > mid:
                    ch |= mask
                    lon_min = mid
                else:
                    lon_max = mid
            else:
                mid = (lat_min + lat_max) / 2.0
                if latitude > mid:
                    ch |= mask
                    lat_min = mid
                else:
                    lat_max = mid
            even = not even
        out.append(BASE32[ch])

    return "".join(out)


def decode_bbox(geohash: str) -> tuple[float, float, float, float]:
    """Return (lat_min, lat_max, lon_min, lon_max) for geohash."""
    if not geohash:
        raise InvalidCoordinate("geohash must be non-empty")

    lat_min, lat_max = -90.0, 90.0
    lon_min, lon_max = -180.0, 180.0
    even = True

    for c in geohash.lower():
        try:
            cd = _DECODE_MAP[c]
        except KeyError as e:
            raise InvalidCoordinate(f"Invalid geohash character: {c!r}") from e

        for mask in (16, 8, 4, 2, 1):
            if even:
                mid = (lon_min + lon_max) / 2.0
                if cd & mask:
                    lon_min = mid
                else:
                    lon_max = mid
            else:
                mid = (lat_min + lat_max) / 2.0
                if cd & mask:
                    lat_min = mid
                else:
                    lat_max = mid
            even = not even

    return lat_min, lat_max, lon_min, lon_max


def decode(geohash: str) -> tuple[float, float]:
    """Cell center as (latitude, longitude)."""
    lat_min, lat_max, lon_min, lon_max = decode_bbox(geohash)
    return (lat_min + lat_max) / 2.0, (lon_min + lon_max) / 2.0


def cell_error(geohash: str) -> tuple[float, float]:
    """Half cell height/width in degrees: the max error of `decode`."""
    lat_min, lat_max, lon_min, lon_max = decode_bbox(geohash)
    return (lat_max - lat_min) / 2.0, (lon_max - lon_min) / 2.0


def neighbors(geohash: str) -> list[str]:
    """The 8-connected cells around geohash at the same precision.

    Ordered N, NE, E, SE, S, SW, W, NW. Longitude wraps at the antimeridian;
    cells past a pole do not exist and are left out.
    """
    lat_min, lat_max, lon_min, lon_max = decode_bbox(geohash)
    lat_c, lon_c = (lat_min + lat_max) / 2.0, (lon_min + lon_max) / 2.0
    height, width = lat_max - lat_min, lon_max - lon_min
    precision = len(geohash)
    origin = geohash.lower()

    out: list[str] = []
    for dlat, dlon in _DIRECTIONS:
        lat = lat_c + dlat * height
        if not -90.0 <= lat <= 90.0:
            continue
        lon = lon_c + dlon * width
        lon = (lon + 180.0) % 360.0 - 180.0
        cell = encode(lat, lon, precision)
        if cell != origin and cell not in out:
            out.append(cell)
    return out


def precision_for_radius(radius_meters: float) -> int:
    """Coarsest precision for radius; larger radius gives a shorter geohash."""
    for threshold, precision in _PRECISION_TABLE:
        if radius_meters >= threshold:
            return precision
    return 9


def prefixes_for_search(latitude: float, longitude: float, radius_meters: float) -> list[str]:
    """Geohash prefixes to range-scan for a search around (latitude, longitude).

    Small radii scan the base cell plus its neighbors to cover cell-edge effects;
    larger radii scan a single prefix two levels coarser. Not an exact disk cover.
    """
    precision = precision_for_radius(radius_meters)
    base = encode(latitude, longitude, precision)

    if radius_meters <= SMALL_RADIUS_METERS:
        return [base, *neighbors(base)]

    return [encode(latitude, longitude, max(1, precision - 2))]


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c

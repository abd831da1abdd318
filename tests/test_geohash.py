from __future__ import annotations

import random

import pytest

from services.search.app.geohash import (
    InvalidCoordinate,
    cell_error,
    decode,
    decode_bbox,
    encode,
    haversine_km,
    neighbors,
    precision_for_radius,
    prefixes_for_search,
)


def test_encode_matches_reference_value():
    assert encode(57.64911, 10.40744, 11) == "u4pruydqqvj"


def test_encode_default_precision_is_seven():
    assert len(encode(6.5244, 3.3792)) == 7


def test_encode_prefix_of_longer_precision():
    assert encode(6.5244, 3.3792, 9).startswith(encode(6.5244, 3.3792, 4))


@pytest.mark.parametrize(
    "lat, lon, precision",
    [(91, 0, 7), (-90.5, 0, 7), (0, 180.1, 7), (0, -181, 7), (0, 0, 0), (0, 0, -3), (float("nan"), 0, 5)],
)
def test_encode_rejects_bad_input(lat, lon, precision):
    with pytest.raises(InvalidCoordinate):
        encode(lat, lon, precision)


def test_invalid_coordinate_is_a_value_error():
    with pytest.raises(ValueError):
        encode(100, 0)


@pytest.mark.parametrize("bad", ["", "u4pa", "abc!"])
def test_decode_rejects_malformed_geohash(bad):
    with pytest.raises(InvalidCoordinate):
        decode(bad)


def test_decode_recovers_point_within_cell_error():
    rng = random.Random(42)
    for _ in range(200):
        lat = rng.uniform(-90, 90)
        lon = rng.uniform(-180, 180)
        precision = rng.randint(1, 10)
        gh = encode(lat, lon, precision)
        dlat, dlon = decode(gh)
        lat_err, lon_err = cell_error(gh)
        assert abs(dlat - lat) <= lat_err + 1e-9
        assert abs(dlon - lon) <= lon_err + 1e-9


def test_neighbors_are_eight_adjacent_cells():
    gh = encode(6.5244, 3.3792, 7)
    out = neighbors(gh)
    assert len(out) == 8
    assert len(set(out)) == 8
    assert gh not in out
    assert all(len(n) == 7 for n in out)

    lat_min, lat_max, lon_min, lon_max = decode_bbox(gh)
    north_lat, north_lon = decode(out[0])
    assert north_lat == pytest.approx(lat_max + (lat_max - lat_min) / 2)
    assert north_lon == pytest.approx((lon_min + lon_max) / 2)


def test_neighbors_wrap_across_antimeridian():
    gh = encode(10.0, 179.99, 5)
    east = neighbors(gh)[2]
    _, east_lon = decode(east)
    assert east_lon < -179


def test_neighbors_skip_cells_beyond_pole():
    gh = encode(89.99, 0.5, 3)
    out = neighbors(gh)
    assert len(out) == 5
    assert all(decode(n)[0] < 90 for n in out)


@pytest.mark.parametrize(
    "radius, precision",
    [
        (10_000_000, 1), (5_000_000, 1), (4_999_999, 2), (1_250_000, 2), (156_000, 3),
        (50_000, 4), (39_000, 4), (38_999, 5), (4_900, 5), (1_200, 6), (1_000, 7),
        (153, 7), (152, 8), (38, 8), (37.9, 9), (0, 9),
    ],
)
def test_precision_for_radius_table(radius, precision):
    assert precision_for_radius(radius) == precision


def test_precision_for_radius_is_non_increasing():
    radii = [0, 1, 10, 38, 100, 153, 500, 1200, 3000, 4900, 20_000, 39_000, 100_000, 156_000, 1_250_000, 5_000_000, 9e6]
    precisions = [precision_for_radius(r) for r in radii]
    assert precisions == sorted(precisions, reverse=True)


def test_small_radius_prefixes_are_base_cell_and_neighbors():
    lat, lon = 6.5244, 3.3792
    prefixes = prefixes_for_search(lat, lon, 500)
    base = encode(lat, lon, precision_for_radius(500))
    assert prefixes[0] == base
    assert prefixes[1:] == neighbors(base)


def test_small_radius_prefixes_always_include_base():
    rng = random.Random(3)
    for _ in range(100):
        lat, lon = rng.uniform(-89, 89), rng.uniform(-180, 180)
        radius = rng.uniform(0, 1000)
        assert encode(lat, lon, precision_for_radius(radius)) in prefixes_for_search(lat, lon, radius)


def test_large_radius_uses_single_coarser_prefix():
    lat, lon = 6.5244, 3.3792
    # 50 km -> precision 4, scanned two levels coarser
    assert prefixes_for_search(lat, lon, 50_000) == [encode(lat, lon, 2)]
    assert prefixes_for_search(lat, lon, 6_000_000) == [encode(lat, lon, 1)]


def test_haversine_known_distances():
    assert haversine_km(6.5244, 3.3792, 6.5244, 3.3792) == 0
    # one degree of latitude on a 6371 km sphere
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.195, abs=0.01)
    # London -> Paris
    assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343.5, abs=1.0)

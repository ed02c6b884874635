from __future__ import annotations

import math

import pytest

from jael.models import PixelCoordinate, Point
from jael.tiles import (
    TILE_SIZE,
    locate,
    parse_tile_name,
    tile_bounds,
    tile_filename,
    tile_name,
    tile_origin,
)


def test_tile_origin_steps_down_for_negative_values() -> None:
    assert tile_origin(51.9283) == 51
    assert tile_origin(0.0) == 0
    assert tile_origin(-0.5) == -1
    assert tile_origin(-3.1476) == -4


def test_tile_origin_negative_whole_degree_moves_one_tile_west() -> None:
    assert tile_origin(-4.0) == -5
    assert tile_origin(4.0) == 4


def test_tile_name_and_filename() -> None:
    assert tile_name(51, -4) == "N51W004"
    assert tile_name(-1, 123) == "S01E123"
    assert tile_filename(51, -4) == "ASTGTMV003_N51W004_dem.tif"
    assert tile_filename(0, 0) == "ASTGTMV003_N00E000_dem.tif"


def test_parse_tile_name_accepts_names_and_filenames() -> None:
    assert parse_tile_name("N51W004") == (51, -4)
    assert parse_tile_name("ASTGTMV003_S01W123_dem.tif") == (-1, -123)


def test_parse_tile_name_rejects_bad_names() -> None:
    with pytest.raises(ValueError, match="Invalid tile name"):
        parse_tile_name("51W4")


def test_tile_bounds() -> None:
    assert tile_bounds("ASTGTMV003_N51W004_dem.tif") == (-4, 51, -3, 52)


def test_locate_brecon_beacons_points() -> None:
    first = locate(Point(latitude=51.92830, longitude=-3.14760))
    second = locate(Point(latitude=51.92002, longitude=-3.14563))

    assert first.tile == "ASTGTMV003_N51W004_dem.tif"
    assert second.tile == first.tile
    assert first.pixel == PixelCoordinate(column=3069, row=258)
    assert second.pixel == PixelCoordinate(column=3076, row=288)


def test_locate_on_negative_whole_degree_uses_east_edge_of_western_tile() -> None:
    location = locate(Point(latitude=51.5, longitude=-4.0))

    assert location.tile == "ASTGTMV003_N51W005_dem.tif"
    assert location.pixel == PixelCoordinate(column=3600, row=1800)


def test_locate_on_positive_whole_degree() -> None:
    location = locate(Point(latitude=47.0, longitude=8.0))

    assert location.tile == "ASTGTMV003_N47E008_dem.tif"
    assert location.pixel == PixelCoordinate(column=0, row=3600)


def test_locate_southern_hemisphere() -> None:
    location = locate(Point(latitude=-33.5, longitude=151.25))

    assert location.tile == "ASTGTMV003_S34E151_dem.tif"
    assert location.pixel == PixelCoordinate(column=900, row=1800)


def test_locate_pixels_stay_inside_tile_grid() -> None:
    for lat in (-82.99, -45.123, -0.0001, 0.0001, 12.5, 82.99):
        for lng in (-179.99, -90.5, -0.0001, 0.0001, 33.333, 179.99):
            location = locate(Point(latitude=lat, longitude=lng))
            min_lon, min_lat, max_lon, max_lat = tile_bounds(location.tile)
            assert min_lon <= lng <= max_lon
            assert min_lat <= lat <= max_lat
            assert 0 <= location.pixel.column < TILE_SIZE
            assert 0 <= location.pixel.row < TILE_SIZE


def test_locate_rejects_out_of_range_and_non_finite() -> None:
    with pytest.raises(ValueError, match="out of bounds"):
        locate(Point(latitude=87.0, longitude=-4.9))
    with pytest.raises(ValueError, match="finite"):
        locate(Point(latitude=math.nan, longitude=0.0))

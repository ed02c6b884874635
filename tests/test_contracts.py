from __future__ import annotations

import math
from types import MappingProxyType

import jsonschema
import pytest

from jael import contracts
from jael.errors import MALFORMED, OUT_OF_RANGE, WRONG_TYPE, ValidationError


@pytest.mark.parametrize(
    ("points", "index", "reason", "message"),
    [
        (
            [{"lat": 51.2194, "lon": -4.94915}, {"lat": 51.21932, "lng": -3.94935}],
            0,
            MALFORMED,
            "Malformed point at index 0",
        ),
        (
            [{"lat": 87.2194, "lng": -4.94915}, {"lat": 51.21932, "lng": -3.94935}],
            0,
            OUT_OF_RANGE,
            "Lat or lng out of bounds at point index 0",
        ),
        (
            [{"lat": 51.2194, "lng": -4.94915}, {"lat": 51.21932, "lng": -183.94935}],
            1,
            OUT_OF_RANGE,
            "Lat or lng out of bounds at point index 1",
        ),
        (
            [{"lat": 51.2194, "lng": -4.94915}, {"lat": 51.21932, "lng": "gordon"}],
            1,
            WRONG_TYPE,
            "Unexpected type at point index 1",
        ),
    ],
)
def test_validate_request_reports_first_bad_point(points, index, reason, message) -> None:
    with pytest.raises(ValidationError) as excinfo:
        contracts.validate_request({"points": points})

    assert excinfo.value.index == index
    assert excinfo.value.reason == reason
    assert message in str(excinfo.value)


def test_validate_request_stops_at_first_violation() -> None:
    points = [
        {"lat": 51.0, "lng": -3.0},
        {"lat": 51.0, "lng": "x"},
        {"lat": 99.0},
    ]
    with pytest.raises(ValidationError) as excinfo:
        contracts.validate_request({"points": points})
    assert excinfo.value.index == 1
    assert excinfo.value.reason == WRONG_TYPE


def test_missing_field_outranks_wrong_type() -> None:
    with pytest.raises(ValidationError) as excinfo:
        contracts.validate_point({"lat": "x"}, 3)
    assert excinfo.value.reason == MALFORMED
    assert excinfo.value.index == 3


def test_booleans_and_non_objects_are_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        contracts.validate_point({"lat": True, "lng": 1.0}, 0)
    assert excinfo.value.reason == WRONG_TYPE

    with pytest.raises(ValidationError) as excinfo:
        contracts.validate_point([51.0, -3.0], 2)
    assert excinfo.value.reason == MALFORMED


def test_non_finite_coordinates_are_out_of_range() -> None:
    with pytest.raises(ValidationError) as excinfo:
        contracts.validate_point({"lat": math.nan, "lng": 0.0}, 0)
    assert excinfo.value.reason == OUT_OF_RANGE


def test_validate_request_accepts_boundaries_and_other_sequences() -> None:
    points = (
        MappingProxyType({"lat": 83, "lng": -180}),
        {"lat": -83.0, "lng": 180.0, "name": "edge"},
    )
    assert len(contracts.validate_request({"points": points})) == 2


def test_validate_request_requires_points_list() -> None:
    with pytest.raises(ValidationError, match="Malformed elevation request") as excinfo:
        contracts.validate_request({"pts": []})
    assert excinfo.value.index is None

    with pytest.raises(ValidationError, match="Malformed elevation request"):
        contracts.validate_request({"points": "N51W004"})


def test_validate_service_config() -> None:
    contracts.validate_service_config({"tile_root": "/data", "tile_jobs": 4, "timeout": 2.5})
    with pytest.raises(jsonschema.ValidationError):
        contracts.validate_service_config({"tile_jobs": -1})
    with pytest.raises(jsonschema.ValidationError):
        contracts.validate_service_config({"tile_path": "/data"})

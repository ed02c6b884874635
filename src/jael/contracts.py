"""Schema validation helpers for elevation requests and service config."""

from __future__ import annotations

import json
import math
from functools import lru_cache
from importlib import resources
from typing import Any, Mapping, Sequence

import jsonschema

from jael.errors import MALFORMED, OUT_OF_RANGE, WRONG_TYPE, ValidationError

_REASON_PRIORITY = {MALFORMED: 0, WRONG_TYPE: 1, OUT_OF_RANGE: 2}


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema bundled in the package."""
    with resources.files("jael.schemas").joinpath(name).open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=None)
def _validator(name: str) -> jsonschema.protocols.Validator:
    schema = _load_schema(name)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _reason(error: jsonschema.ValidationError) -> str:
    """Map a jsonschema error onto a point validation reason."""
    if error.validator == "required" or not error.path:
        return MALFORMED
    if error.validator == "type":
        return WRONG_TYPE
    return OUT_OF_RANGE


def _as_instance(value: Any) -> Any:
    if isinstance(value, Mapping) and not isinstance(value, dict):
        return dict(value)
    return value


def validate_point(point: Any, index: int) -> None:
    """Validate a single point, raising ValidationError for the worst violation."""
    instance = _as_instance(point)
    errors = list(_validator("point.schema.json").iter_errors(instance))
    if errors:
        reasons = sorted((_reason(error) for error in errors), key=_REASON_PRIORITY.__getitem__)
        raise ValidationError(index, reasons[0])
    if not (math.isfinite(instance["lat"]) and math.isfinite(instance["lng"])):
        raise ValidationError(index, OUT_OF_RANGE, "coordinates must be finite")


def validate_points(points: Sequence[Any]) -> None:
    """Validate points in order, stopping at the first invalid index."""
    for index, point in enumerate(points):
        validate_point(point, index)


def validate_request(request: Mapping[str, Any]) -> list[Any]:
    """Validate an elevation request and return its point list."""
    instance = _as_instance(request)
    if isinstance(instance, dict):
        points = instance.get("points")
        if isinstance(points, Sequence) and not isinstance(points, (str, bytes)):
            instance = {**instance, "points": list(points)}
    error = jsonschema.exceptions.best_match(
        _validator("elevation_request.schema.json").iter_errors(instance)
    )
    if error is not None:
        raise ValidationError(None, MALFORMED, f"Malformed elevation request: {error.message}")
    points = instance["points"]
    validate_points(points)
    return points


def validate_service_config(payload: Mapping[str, Any]) -> None:
    """Validate a service config payload against the schema."""
    jsonschema.validate(dict(payload), _load_schema("service_config.schema.json"))

"""
Shared dataclasses and angle helpers.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from . import constants
from .errors import InvalidArgumentError


def deg_to_rad(value: float) -> float:
    return math.radians(value)


def rad_to_deg(value: float) -> float:
    return math.degrees(value)


def _pick(data: Mapping[str, Any], *keys: str) -> float:
    for key in keys:
        if data.get(key) is not None:
            try:
                return float(data[key])
            except (TypeError, ValueError) as exc:
                raise InvalidArgumentError(f"Field '{key}' is not a number: {data[key]!r}") from exc
    raise InvalidArgumentError(f"Missing field, expected one of {', '.join(keys)}")


def _coerce(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"{name} is not a number: {value!r}") from exc


def _check_latitude(latitude: float) -> None:
    if not math.isfinite(latitude) or not constants.LAT_MIN_DEG <= latitude <= constants.LAT_MAX_DEG:
        raise InvalidArgumentError(f"Latitude must be within [-90, 90] degrees, got {latitude}")


@dataclass(frozen=True)
class OrthometricPosition:
    """WGS 84 position with a height above mean sea level (geoid)."""

    latitude: float  # degrees
    longitude: float  # degrees, not range-checked
    height: float  # meters above MSL

    def __post_init__(self) -> None:
        for name in ("latitude", "longitude", "height"):
            object.__setattr__(self, name, _coerce(name.capitalize(), getattr(self, name)))
        _check_latitude(self.latitude)
        if not math.isfinite(self.height):
            raise InvalidArgumentError(f"Orthometric height must be finite, got {self.height}")

    def to_dict(self) -> Dict[str, float]:
        return {
            "latitude": float(self.latitude),
            "longitude": float(self.longitude),
            "height": float(self.height),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "OrthometricPosition":
        return OrthometricPosition(
            latitude=_pick(data, "latitude", "lat"),
            longitude=_pick(data, "longitude", "lon"),
            height=_pick(data, "height", "msl", "alt"),
        )


@dataclass(frozen=True)
class EllipsoidalPosition:
    """WGS 84 (EPSG:4979) position with a height above the ellipsoid."""

    latitude: float
    longitude: float
    height: float  # meters above the WGS 84 ellipsoid

    def to_dict(self) -> Dict[str, float]:
        return {
            "latitude": float(self.latitude),
            "longitude": float(self.longitude),
            "height": float(self.height),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "EllipsoidalPosition":
        return EllipsoidalPosition(
            latitude=_pick(data, "latitude", "lat"),
            longitude=_pick(data, "longitude", "lon"),
            height=_pick(data, "height", "alt", "alt_ellip"),
        )

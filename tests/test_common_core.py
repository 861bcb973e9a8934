from __future__ import annotations

import pytest

from geoidshift.common_core import EllipsoidalPosition, OrthometricPosition, deg_to_rad, rad_to_deg
from geoidshift.errors import InvalidArgumentError


def test_orthometric_position_round_trips_dict():
    pos = OrthometricPosition(latitude=40.6892, longitude=-74.0445, height=12.5)
    data = pos.to_dict()
    assert data == {"latitude": 40.6892, "longitude": -74.0445, "height": 12.5}
    assert OrthometricPosition.from_dict(data) == pos


def test_from_dict_accepts_short_keys():
    pos = OrthometricPosition.from_dict({"lat": "10.5", "lon": 20, "msl": -3})
    assert pos == OrthometricPosition(10.5, 20.0, -3.0)
    out = EllipsoidalPosition.from_dict({"lat": 1, "lon": 2, "alt": 3})
    assert out == EllipsoidalPosition(1.0, 2.0, 3.0)


@pytest.mark.parametrize("lat", [90.0001, -91.0, float("nan"), float("inf")])
def test_orthometric_position_rejects_bad_latitude(lat):
    with pytest.raises(InvalidArgumentError):
        OrthometricPosition(lat, 0.0, 0.0)


def test_orthometric_position_rejects_non_finite_height():
    with pytest.raises(InvalidArgumentError):
        OrthometricPosition(0.0, 0.0, float("nan"))


def test_longitude_is_not_range_checked():
    assert OrthometricPosition(0.0, 540.0, 0.0).longitude == 540.0


@pytest.mark.parametrize("lon", ["abc", None, [1.0]])
def test_orthometric_position_rejects_non_numeric_longitude(lon):
    with pytest.raises(InvalidArgumentError, match="Longitude"):
        OrthometricPosition(40.0, lon, 0.0)


def test_numeric_strings_are_coerced():
    pos = OrthometricPosition("40.5", "-74", 1)
    assert pos.to_dict() == {"latitude": 40.5, "longitude": -74.0, "height": 1.0}
    assert isinstance(pos.height, float)


def test_from_dict_missing_or_bad_field():
    with pytest.raises(InvalidArgumentError):
        OrthometricPosition.from_dict({"lat": 1.0, "lon": 2.0})
    with pytest.raises(InvalidArgumentError):
        OrthometricPosition.from_dict({"lat": "north", "lon": 2.0, "msl": 0.0})


def test_positions_are_immutable():
    pos = OrthometricPosition(1.0, 2.0, 3.0)
    with pytest.raises(AttributeError):
        pos.height = 4.0  # type: ignore[misc]


@pytest.mark.parametrize("deg", [-90.0, -74.0445, 0.0, 40.6892, 90.0, 179.999999])
def test_angle_round_trip_drift_below_nano_degree(deg):
    assert abs(rad_to_deg(deg_to_rad(deg)) - deg) < 1e-9

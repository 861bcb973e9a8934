from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pytest
from pyproj.exceptions import ProjError

from conftest import UNDULATION_M
from geoidshift.common_core import OrthometricPosition
from geoidshift.errors import (
    InvalidArgumentError,
    ReleasedResourceError,
    TransformationApplyError,
    TransformationResolutionError,
)
from geoidshift.geoid import vertical as vertical_mod
from geoidshift.geoid.context import ContextConfig, GeodeticContext
from geoidshift.geoid.grids import missing_grids
from geoidshift.geoid.vertical import VerticalTransformation

LIBERTY = OrthometricPosition(latitude=40.6892, longitude=-74.0445, height=0.0)


def _egm2008_available() -> bool:
    try:
        return not missing_grids(ContextConfig())
    except Exception:
        return False


@pytest.fixture
def transformation(grid_config):
    ctx = GeodeticContext.acquire(grid_config)
    yield ctx.resolve()
    ctx.release()


@pytest.mark.parametrize("height", [0.0, 93.0, -12.25, 8848.86])
def test_ellipsoidal_height_is_msl_plus_undulation(transformation, height):
    pos = OrthometricPosition(LIBERTY.latitude, LIBERTY.longitude, height)
    out = transformation.apply(pos)
    assert abs(out.height - (height + UNDULATION_M)) < 1e-3


def test_horizontal_position_is_unchanged(transformation):
    for lat, lon in [(40.6892, -74.0445), (35.0000001, -79.9999999), (44.123456789, -70.5)]:
        out = transformation.apply(OrthometricPosition(lat, lon, 10.0))
        assert abs(out.latitude - lat) < 1e-9
        assert abs(out.longitude - lon) < 1e-9


def test_longitude_first_ordering(longitude_grid):
    with GeodeticContext.acquire(ContextConfig(geoid_grid=str(longitude_grid))) as ctx:
        out = ctx.vertical().apply(LIBERTY)
    # N(lon) = lon + 100; swapped axes would fall outside the grid window
    assert abs(out.height - (LIBERTY.longitude + 100.0)) < 1e-6


def test_outside_grid_coverage_raises_apply_error(transformation):
    with pytest.raises(TransformationApplyError):
        transformation.apply(OrthometricPosition(0.0, 0.0, 0.0))
    # per-input failure; the transformation stays usable
    assert transformation.apply(LIBERTY).height == pytest.approx(UNDULATION_M, abs=1e-3)


@pytest.mark.parametrize("lat", [90.0, -90.0])
def test_boundary_latitudes_never_return_nan(transformation, lat):
    try:
        out = transformation.apply(OrthometricPosition(lat, -74.0, 0.0))
    except TransformationApplyError:
        return
    assert all(math.isfinite(v) for v in (out.latitude, out.longitude, out.height))


def test_missing_input_is_rejected(transformation):
    with pytest.raises(InvalidArgumentError):
        transformation.apply(None)  # type: ignore[arg-type]


def test_released_transformation_is_rejected(grid_config):
    ctx = GeodeticContext.acquire(grid_config)
    txn = ctx.resolve()
    txn.release()
    txn.release()
    with pytest.raises(ReleasedResourceError):
        txn.apply(LIBERTY)

    txn = ctx.resolve()
    ctx.release()
    with pytest.raises(ReleasedResourceError):
        txn.apply(LIBERTY)


def test_resolution_failure_leaves_context_releasable(grid_config, monkeypatch):
    class _Broken:
        @staticmethod
        def from_pipeline(*args, **kwargs):
            raise ProjError("no operation")

    monkeypatch.setattr(vertical_mod, "Transformer", _Broken)
    ctx = GeodeticContext.acquire(grid_config)
    with pytest.raises(TransformationResolutionError):
        ctx.resolve()
    assert ctx.live
    ctx.release()
    assert not ctx.live


def test_corrupt_grid_fails_resolution(tmp_path: Path):
    grid = tmp_path / "corrupt.gtx"
    grid.write_bytes(b"not a grid")
    with GeodeticContext.acquire(ContextConfig(geoid_grid=str(grid))) as ctx:
        with pytest.raises(TransformationResolutionError):
            VerticalTransformation.resolve(ctx)


def test_apply_array_flags_rows_outside_coverage(transformation):
    lat = np.array([40.6892, 0.0, 41.0])
    lon = np.array([-74.0445, 0.0, -73.0])
    h = np.array([0.0, 5.0, 100.0])
    result = transformation.apply_array(lat, lon, h)
    assert result.valid.tolist() == [True, False, True]
    assert np.allclose(result.height[result.valid], h[[0, 2]] + UNDULATION_M, atol=1e-3)
    assert np.allclose(result.latitude[result.valid], lat[[0, 2]], atol=1e-9)
    assert np.isnan(result.height[1]) and np.isnan(result.latitude[1]) and np.isnan(result.longitude[1])


def test_apply_array_broadcasts_scalar_height(transformation):
    result = transformation.apply_array([40.0, 41.0], [-74.0, -75.0], 10.0)
    assert result.height.shape == (2,)
    assert result.valid.all()


def test_apply_array_rejects_bad_input(transformation):
    with pytest.raises(InvalidArgumentError):
        transformation.apply_array([40.0, 41.0], [-74.0, -75.0, -76.0], 0.0)
    with pytest.raises(InvalidArgumentError):
        transformation.apply_array([95.0], [-74.0], 0.0)


@pytest.mark.skipif(not _egm2008_available(), reason="EGM2008 grid not installed for PROJ")
def test_statue_of_liberty_egm2008():
    with GeodeticContext.acquire(ContextConfig(geoid_model="EGM2008")) as ctx:
        out = ctx.vertical().apply(LIBERTY)
    # EGM2008 undulation in New York harbour is about -32.7 m
    assert -35.0 < out.height < -30.0
    assert abs(out.latitude - LIBERTY.latitude) < 1e-9
    assert abs(out.longitude - LIBERTY.longitude) < 1e-9

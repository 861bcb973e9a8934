from __future__ import annotations

import struct
from pathlib import Path

import numpy as np
import pytest

from geoidshift.geoid.context import ContextConfig

# Synthetic GTX window around New York harbour: lat 35..45, lon -80..-70, 1 degree nodes
LAT0, LON0, STEP, NODES = 35.0, -80.0, 1.0, 11
UNDULATION_M = -32.5


def write_gtx(path: Path, values: np.ndarray, lat0: float = LAT0, lon0: float = LON0, step: float = STEP) -> Path:
    """Write a NOAA .gtx vertical grid (big-endian header + float32 rows, south to north)."""
    values = np.asarray(values, dtype=">f4")
    rows, cols = values.shape
    header = struct.pack(">4d2i", lat0, lon0, step, step, rows, cols)
    path.write_bytes(header + values.tobytes())
    return path


@pytest.fixture
def constant_grid(tmp_path: Path) -> Path:
    return write_gtx(tmp_path / "constant_n.gtx", np.full((NODES, NODES), UNDULATION_M))


@pytest.fixture
def longitude_grid(tmp_path: Path) -> Path:
    # N depends on longitude only: N(lon) = lon + 100
    lons = LON0 + STEP * np.arange(NODES)
    return write_gtx(tmp_path / "lon_n.gtx", np.tile(lons + 100.0, (NODES, 1)))


@pytest.fixture
def grid_config(constant_grid: Path) -> ContextConfig:
    return ContextConfig(geoid_grid=str(constant_grid))

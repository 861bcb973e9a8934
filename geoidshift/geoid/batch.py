"""Chunked conversion of point tables (pandas) through a vertical transformation."""
from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from tqdm import tqdm

from .. import constants
from ..errors import InvalidArgumentError
from .vertical import VerticalTransformation

log = logging.getLogger(__name__)


def convert_frame(
    frame: pd.DataFrame,
    transformation: VerticalTransformation,
    lat_col: str = constants.CSV_LAT_COL,
    lon_col: str = constants.CSV_LON_COL,
    height_col: str = constants.CSV_HEIGHT_COL,
    out_col: str = constants.CSV_OUT_HEIGHT_COL,
    chunk_size: int = constants.CSV_CHUNK_SIZE,
    progress: bool = False,
) -> pd.DataFrame:
    """
    Return a copy of *frame* with the ellipsoidal height in *out_col* and a
    boolean ``geoid_ok`` column. Rows the engine rejects get NaN heights and
    ``geoid_ok == False``; horizontal columns are left untouched.
    """
    missing = [col for col in (lat_col, lon_col, height_col) if col not in frame.columns]
    if missing:
        raise InvalidArgumentError(f"Missing columns: {', '.join(missing)}")
    if chunk_size <= 0:
        raise InvalidArgumentError("chunk_size must be positive")

    out = frame.copy()
    n = len(out)
    heights = np.full(n, np.nan, dtype=float)
    valid = np.zeros(n, dtype=bool)

    starts = range(0, n, chunk_size)
    for start in tqdm(starts, total=len(starts), desc="Converting heights", unit="chunk", disable=not progress):
        stop = min(start + chunk_size, n)
        chunk = out.iloc[start:stop]
        lat = chunk[lat_col].to_numpy(dtype=float)
        # unparseable or out-of-range latitudes stay invalid instead of failing the chunk
        usable = np.isfinite(lat) & (np.abs(lat) <= constants.LAT_MAX_DEG)
        if not usable.any():
            continue
        result = transformation.apply_array(
            lat[usable],
            chunk[lon_col].to_numpy(dtype=float)[usable],
            chunk[height_col].to_numpy(dtype=float)[usable],
        )
        idx = np.arange(start, stop)[usable]
        heights[idx] = result.height
        valid[idx] = result.valid

    out[out_col] = heights
    out[constants.CSV_VALID_COL] = valid
    rejected = int(n - valid.sum())
    if rejected:
        log.info("%d of %d rows could not be transformed", rejected, n)
    return out

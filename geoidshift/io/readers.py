"""
Readers for point tables (lat, lon, MSL height).
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from .. import constants
from ..errors import InvalidArgumentError


def read_points_csv(
    path: Path | str,
    lat_col: str = constants.CSV_LAT_COL,
    lon_col: str = constants.CSV_LON_COL,
    height_col: str = constants.CSV_HEIGHT_COL,
) -> pd.DataFrame:
    path = Path(path)
    if not path.is_file():
        raise InvalidArgumentError(f"Input table not found: {path}")
    frame = pd.read_csv(path)
    missing = [col for col in (lat_col, lon_col, height_col) if col not in frame.columns]
    if missing:
        raise InvalidArgumentError(f"{path}: missing columns {', '.join(missing)}")
    for col in (lat_col, lon_col, height_col):
        frame[col] = pd.to_numeric(frame[col], errors="coerce")
    return frame

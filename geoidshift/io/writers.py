"""
Writers for converted point tables.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd


def write_points_csv(frame: pd.DataFrame, path: Path | str, float_format: str | None = None) -> Path:
    """Write *frame* as CSV, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False, float_format=float_format)
    return path

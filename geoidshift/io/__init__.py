"""CSV point table readers and writers."""

from .readers import read_points_csv
from .writers import write_points_csv

__all__ = ["read_points_csv", "write_points_csv"]

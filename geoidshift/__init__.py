"""MSL to WGS84 ellipsoidal height conversion on top of PROJ.

The package provides:
- geoid: geodetic context, vertical transformation, pooling and grid helpers
- convert: status-code entry point and long-lived converter
- io: CSV readers/writers for point tables
- cli: typer command line
"""
from __future__ import annotations

from .common_core import EllipsoidalPosition, OrthometricPosition
from .convert import Conversion, Converter, alt_wgs84_from_msl, epsg4979_from_epsg9705, try_convert
from .errors import (
    ContextCreationError,
    GeoidShiftError,
    InvalidArgumentError,
    ReleasedResourceError,
    Status,
    TransformationApplyError,
    TransformationResolutionError,
    status_of,
)
from .geoid import ContextConfig, GeodeticContext, TransformationPool, VerticalTransformation

__version__ = "0.1.0"

__all__ = [
    "Conversion",
    "Converter",
    "ContextConfig",
    "ContextCreationError",
    "EllipsoidalPosition",
    "GeodeticContext",
    "GeoidShiftError",
    "InvalidArgumentError",
    "OrthometricPosition",
    "ReleasedResourceError",
    "Status",
    "TransformationApplyError",
    "TransformationPool",
    "TransformationResolutionError",
    "VerticalTransformation",
    "alt_wgs84_from_msl",
    "epsg4979_from_epsg9705",
    "status_of",
    "try_convert",
]

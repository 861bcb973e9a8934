"""
Vertical transformation pipeline: MSL (orthometric) -> WGS 84 ellipsoidal heights.

The transformer is built with ``always_xy=True`` so coordinates are always
fed as (longitude, latitude, height, time). Angles cross the engine boundary
in radians; heights stay in meters.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, NamedTuple, Optional

import numpy as np
from pyproj import Transformer
from pyproj.enums import TransformDirection
from pyproj.exceptions import ProjError

from .. import constants
from ..common_core import EllipsoidalPosition, OrthometricPosition, deg_to_rad, rad_to_deg
from ..errors import (
    InvalidArgumentError,
    ReleasedResourceError,
    TransformationApplyError,
    TransformationResolutionError,
)

if TYPE_CHECKING:
    from .context import GeodeticContext

log = logging.getLogger(__name__)


class BatchResult(NamedTuple):
    latitude: np.ndarray
    longitude: np.ndarray
    height: np.ndarray
    valid: np.ndarray  # bool; False rows are NaN in all three arrays


class VerticalTransformation:
    """Resolved MSL -> ellipsoid mapping bound to exactly one context."""

    def __init__(self, context: "GeodeticContext", transformer: Transformer):
        self.context = context
        self._transformer: Optional[Transformer] = transformer

    @classmethod
    def resolve(cls, context: "GeodeticContext") -> "VerticalTransformation":
        context.ensure_live()
        pipeline = context.pipeline
        try:
            if pipeline:
                transformer = Transformer.from_pipeline(pipeline)
            else:
                transformer = Transformer.from_crs(
                    context.source_crs,
                    constants.TARGET_CRS,
                    always_xy=True,
                    allow_ballpark=context.config.allow_ballpark,
                )
        except ProjError as exc:
            source = pipeline or context.source_crs
            raise TransformationResolutionError(
                f"Cannot resolve {source} -> {constants.TARGET_CRS}: {exc}"
            ) from exc

        transformation = cls(context, transformer)
        context._register(transformation)
        log.debug("Resolved vertical transformation: %s", transformer.description)
        return transformation

    @property
    def released(self) -> bool:
        return self._transformer is None or not self.context.live

    @property
    def description(self) -> str:
        return self._live_transformer().description

    def _live_transformer(self) -> Transformer:
        if self._transformer is None:
            raise ReleasedResourceError("Vertical transformation has been released")
        if not self.context.live:
            raise ReleasedResourceError("Owning geodetic context has been released")
        return self._transformer

    def apply(self, position: OrthometricPosition) -> EllipsoidalPosition:
        """Forward-transform one position; raises instead of returning partial data."""
        if position is None:
            raise InvalidArgumentError("Input position is required")
        transformer = self._live_transformer()

        lon_rad = deg_to_rad(position.longitude)
        lat_rad = deg_to_rad(position.latitude)
        try:
            lon_out, lat_out, h_out, _ = transformer.transform(
                lon_rad,
                lat_rad,
                position.height,
                0.0,
                radians=True,
                errcheck=True,
                direction=TransformDirection.FORWARD,
            )
        except ProjError as exc:
            raise TransformationApplyError(
                f"Transformation failed for [lat={position.latitude} deg, "
                f"lon={position.longitude} deg, msl={position.height} m]: {exc}"
            ) from exc

        if not (math.isfinite(lon_out) and math.isfinite(lat_out) and math.isfinite(h_out)):
            raise TransformationApplyError(
                f"Non-finite result for [lat={position.latitude} deg, "
                f"lon={position.longitude} deg, msl={position.height} m]"
            )
        return EllipsoidalPosition(
            latitude=rad_to_deg(lat_out),
            longitude=rad_to_deg(lon_out),
            height=float(h_out),
        )

    def apply_array(self, latitude, longitude, height) -> BatchResult:
        """
        Vectorised `apply`. Rows the engine cannot transform are flagged in
        ``valid`` and set to NaN; the call itself only raises for bad input.
        """
        try:
            lat, lon, h = np.broadcast_arrays(
                np.asarray(latitude, dtype=float),
                np.asarray(longitude, dtype=float),
                np.asarray(height, dtype=float),
            )
        except ValueError as exc:
            raise InvalidArgumentError(f"Coordinate arrays do not broadcast: {exc}") from exc
        if np.any(~np.isfinite(lat)) or np.any(np.abs(lat) > constants.LAT_MAX_DEG):
            raise InvalidArgumentError("Latitudes must be finite and within [-90, 90] degrees")
        transformer = self._live_transformer()

        shape = lat.shape
        lon_out, lat_out, h_out = transformer.transform(
            np.radians(lon.ravel()),
            np.radians(lat.ravel()),
            h.astype(float).ravel(),
            radians=True,
            errcheck=False,
            direction=TransformDirection.FORWARD,
        )
        lon_out = np.degrees(np.asarray(lon_out, dtype=float)).reshape(shape)
        lat_out = np.degrees(np.asarray(lat_out, dtype=float)).reshape(shape)
        h_out = np.asarray(h_out, dtype=float).reshape(shape)

        valid = np.isfinite(lon_out) & np.isfinite(lat_out) & np.isfinite(h_out) & np.isfinite(h)
        lat_out = np.where(valid, lat_out, np.nan)
        lon_out = np.where(valid, lon_out, np.nan)
        h_out = np.where(valid, h_out, np.nan)
        if not valid.all():
            log.debug("%d of %d positions outside transformation coverage", int((~valid).sum()), valid.size)
        return BatchResult(latitude=lat_out, longitude=lon_out, height=h_out, valid=valid)

    def release(self) -> None:
        if self._transformer is None:
            return
        self._transformer = None
        self.context._forget(self)

    def __enter__(self) -> "VerticalTransformation":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"VerticalTransformation({self.context.source_crs or self.context.pipeline!r}, {state})"

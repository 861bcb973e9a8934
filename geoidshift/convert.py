"""
Single-position conversion entry points.

- `epsg4979_from_epsg9705`: status-code boundary, fresh resources per call.
- `try_convert`: tagged result over an existing transformation.
- `alt_wgs84_from_msl`: raising one-shot conversion.
- `Converter`: long-lived owner of a context and its transformation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping, Optional, Union

from .common_core import EllipsoidalPosition, OrthometricPosition
from .errors import GeoidShiftError, InvalidArgumentError, Status, status_of
from .geoid.context import ContextConfig, GeodeticContext
from .geoid.vertical import VerticalTransformation

log = logging.getLogger(__name__)

PositionLike = Union[OrthometricPosition, Mapping[str, Any]]


@dataclass(frozen=True)
class Conversion:
    """Either a position or the error that prevented it, never both."""

    position: Optional[EllipsoidalPosition] = None
    error: Optional[GeoidShiftError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> Status:
        return status_of(self.error)

    def unwrap(self) -> EllipsoidalPosition:
        if self.error is not None:
            raise self.error
        return self.position


def _as_position(src: PositionLike) -> OrthometricPosition:
    if isinstance(src, OrthometricPosition):
        return src
    if isinstance(src, Mapping):
        return OrthometricPosition.from_dict(src)
    raise InvalidArgumentError(f"Unsupported input position type: {type(src).__name__}")


def try_convert(transformation: VerticalTransformation, position: PositionLike) -> Conversion:
    try:
        if position is None:
            raise InvalidArgumentError("Input position is required")
        return Conversion(position=transformation.apply(_as_position(position)))
    except GeoidShiftError as exc:
        return Conversion(error=exc)


def alt_wgs84_from_msl(src: PositionLike, config: ContextConfig | None = None) -> EllipsoidalPosition:
    """Acquire, resolve, apply and release in one call."""
    if src is None:
        raise InvalidArgumentError("Input position is required")
    position = _as_position(src)
    with GeodeticContext.acquire(config) as ctx:
        with ctx.resolve() as transformation:
            return transformation.apply(position)


def epsg4979_from_epsg9705(
    src: Optional[PositionLike],
    dst: Optional[MutableMapping[str, float]],
    config: ContextConfig | None = None,
) -> Status:
    """
    Convert EPSG:9705-style (WGS 84 + MSL height) input into EPSG:4979.

    ``dst`` receives ``latitude``, ``longitude`` and ``height`` only when the
    returned status is `Status.OK`; on any other status it is left untouched.
    """
    if src is None or dst is None:
        return Status.INVALID_ARGUMENT
    try:
        result = alt_wgs84_from_msl(src, config)
    except GeoidShiftError as exc:
        return exc.status
    dst.update(result.to_dict())
    return Status.OK


class Converter:
    """
    Long-lived MSL -> ellipsoid converter; setup cost is paid once.

    >>> with Converter() as conv:
    ...     conv.convert(40.6892, -74.0445, 0.0)
    """

    def __init__(self, config: ContextConfig | None = None):
        self.context = GeodeticContext.acquire(config)
        try:
            self.transformation = self.context.vertical()
        except GeoidShiftError:
            self.context.release()
            raise
        log.debug("Converter ready: %s", self.transformation.description)

    def position(self, lat_deg: float, lon_deg: float, msl_m: float) -> EllipsoidalPosition:
        return self.transformation.apply(OrthometricPosition(lat_deg, lon_deg, msl_m))

    def convert(self, lat_deg: float, lon_deg: float, msl_m: float) -> float:
        """Ellipsoidal height (m) for a position given with an MSL height."""
        return self.position(lat_deg, lon_deg, msl_m).height

    def close(self) -> None:
        self.context.release()

    def __enter__(self) -> "Converter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

"""
Error taxonomy for context acquisition and vertical transformation.

Every exception carries the discrete status code of the C-style boundary
(`geoidshift.convert.epsg4979_from_epsg9705`). All of them also subclass the
matching built-in so callers may catch ``ValueError`` / ``RuntimeError``.
"""
from __future__ import annotations

from enum import IntEnum


class Status(IntEnum):
    OK = 0
    INVALID_ARGUMENT = -1
    CONTEXT_CREATION = -2
    TRANSFORMATION_RESOLUTION = -3
    TRANSFORMATION_APPLY = -4


class GeoidShiftError(Exception):
    """Base exception for all geoidshift errors."""

    status: Status = Status.INVALID_ARGUMENT


class InvalidArgumentError(GeoidShiftError, ValueError):
    """A required input or output slot is missing or out of range.

    Raised before any engine resource is touched.
    """

    status = Status.INVALID_ARGUMENT


class ReleasedResourceError(InvalidArgumentError):
    """A context, transformation or pool was used after release."""


class ContextCreationError(GeoidShiftError, RuntimeError):
    """The PROJ environment could not be initialized.

    Missing data directory, unknown geoid model or missing local grid.
    """

    status = Status.CONTEXT_CREATION


class TransformationResolutionError(GeoidShiftError, RuntimeError):
    """The MSL -> ellipsoid operation could not be built for the context.

    The context stays valid and must still be released.
    """

    status = Status.TRANSFORMATION_RESOLUTION


class TransformationApplyError(GeoidShiftError, RuntimeError):
    """The engine flagged a fault for one input (outside grid, singularity)."""

    status = Status.TRANSFORMATION_APPLY


def status_of(exc: BaseException | None) -> Status:
    """Map an exception (or ``None`` for success) to its status code."""
    if exc is None:
        return Status.OK
    if isinstance(exc, GeoidShiftError):
        return exc.status
    raise TypeError(f"No status code for {type(exc).__name__}") from exc

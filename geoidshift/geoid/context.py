"""Geodetic context: owns the PROJ environment a vertical transformation needs."""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Mapping, Optional

from pyproj import datadir, network
from pyproj.exceptions import DataDirError

from .. import constants
from ..errors import ContextCreationError, ReleasedResourceError

if TYPE_CHECKING:
    from .vertical import VerticalTransformation

log = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

# PROJ networking is a process-wide switch; live contexts share it by refcount.
_network_lock = threading.Lock()
_network_users = 0
_network_previous: Optional[bool] = None


def _network_acquire() -> None:
    global _network_users, _network_previous
    with _network_lock:
        if _network_users == 0:
            _network_previous = network.is_network_enabled()
            network.set_network_enabled(active=True)
            log.debug("PROJ network enabled (previously %s)", _network_previous)
        _network_users += 1


def _network_release() -> None:
    global _network_users, _network_previous
    with _network_lock:
        if _network_users == 0:
            return
        _network_users -= 1
        if _network_users == 0:
            network.set_network_enabled(active=bool(_network_previous))
            log.debug("PROJ network restored to %s", _network_previous)
            _network_previous = None


@dataclass(frozen=True)
class ContextConfig:
    """Geoid selection and engine switches for a `GeodeticContext`."""

    geoid_model: str = constants.DEFAULT_GEOID_MODEL
    geoid_grid: Optional[str] = None  # local vgridshift grid, overrides geoid_model
    network: bool = constants.NETWORK_ENABLED
    allow_ballpark: bool = constants.ALLOW_BALLPARK

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ContextConfig":
        env = os.environ if environ is None else environ
        network_raw = env.get(constants.ENV_NETWORK)
        return cls(
            geoid_model=env.get(constants.ENV_GEOID_MODEL) or constants.DEFAULT_GEOID_MODEL,
            geoid_grid=env.get(constants.ENV_GEOID_GRID) or None,
            network=(
                network_raw.strip().lower() in _TRUTHY
                if network_raw is not None
                else constants.NETWORK_ENABLED
            ),
        )

    @property
    def model_key(self) -> str:
        return self.geoid_model.strip().upper()

    def source_crs(self) -> Optional[str]:
        """Compound MSL CRS for the registry model, ``None`` for a local grid."""
        if self.geoid_grid:
            return None
        return constants.GEOID_MODELS.get(self.model_key)

    def pipeline(self) -> Optional[str]:
        if not self.geoid_grid:
            return None
        grid = Path(self.geoid_grid).expanduser().resolve()
        return (
            f"+proj=vgridshift +grids={grid} "
            f"+multiplier={constants.VGRIDSHIFT_MULTIPLIER:g}"
        )


class GeodeticContext:
    """
    Exclusively owned PROJ environment for one logical owner (thread/request).

    Use `acquire` (or the class as a context manager) and always `release`.
    Transformations resolved from a context are released with it.
    """

    def __init__(self, config: ContextConfig | None = None):
        self.config = config or ContextConfig()
        self.data_dir: Optional[str] = None
        self._live = False
        self._released = False
        self._networked = False
        self._lock = threading.Lock()
        self._cached: Optional["VerticalTransformation"] = None
        self._transformations: List["VerticalTransformation"] = []

    @classmethod
    def acquire(cls, config: ContextConfig | None = None) -> "GeodeticContext":
        ctx = cls(config)
        ctx._open()
        return ctx

    def _open(self) -> None:
        try:
            self.data_dir = datadir.get_data_dir()
        except DataDirError as exc:
            raise ContextCreationError(f"PROJ data directory not found: {exc}") from exc

        if self.config.geoid_grid:
            grid = Path(self.config.geoid_grid).expanduser()
            if not grid.is_file():
                raise ContextCreationError(f"Geoid grid not found: {grid}")
        elif self.config.model_key not in constants.GEOID_MODELS:
            known = ", ".join(sorted(constants.GEOID_MODELS))
            raise ContextCreationError(
                f"Unknown geoid model '{self.config.geoid_model}' (known: {known})"
            )

        if self.config.network:
            _network_acquire()
            self._networked = True
        self._live = True
        log.debug(
            "Acquired geodetic context (source=%s, data_dir=%s, network=%s)",
            self.source_crs or self.pipeline,
            self.data_dir,
            self.config.network,
        )

    @property
    def live(self) -> bool:
        return self._live

    @property
    def source_crs(self) -> Optional[str]:
        return self.config.source_crs()

    @property
    def pipeline(self) -> Optional[str]:
        return self.config.pipeline()

    def ensure_live(self) -> None:
        if not self._live:
            raise ReleasedResourceError("Geodetic context has been released")

    def resolve(self) -> "VerticalTransformation":
        """Resolve a new MSL -> ellipsoid transformation owned by the caller."""
        from .vertical import VerticalTransformation

        return VerticalTransformation.resolve(self)

    def vertical(self) -> "VerticalTransformation":
        """Transformation resolved once per context and shared by its callers."""
        with self._lock:
            self.ensure_live()
            if self._cached is None or self._cached.released:
                self._cached = self.resolve()
            return self._cached

    def _register(self, transformation: "VerticalTransformation") -> None:
        self._transformations.append(transformation)

    def _forget(self, transformation: "VerticalTransformation") -> None:
        if transformation in self._transformations:
            self._transformations.remove(transformation)

    def release(self) -> None:
        if not self._live:
            return
        self._live = False
        self._released = True
        for transformation in list(self._transformations):
            transformation.release()
        self._transformations.clear()
        self._cached = None
        if self._networked:
            _network_release()
            self._networked = False
        log.debug("Released geodetic context")

    def __enter__(self) -> "GeodeticContext":
        if self._released:
            raise ReleasedResourceError("Geodetic context has been released")
        if not self._live:
            self._open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "live" if self._live else "released"
        return f"GeodeticContext({self.source_crs or self.pipeline!r}, {state})"

# Geoid grid availability, download and cache housekeeping.
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from pyproj import datadir
from pyproj.exceptions import ProjError
from pyproj.transformer import TransformerGroup

from .. import constants
from ..errors import ContextCreationError, TransformationResolutionError
from .context import ContextConfig

log = logging.getLogger(__name__)


def _group(config: ContextConfig) -> TransformerGroup:
    source = config.source_crs()
    if source is None:
        raise ContextCreationError(f"Unknown geoid model '{config.geoid_model}'")
    try:
        return TransformerGroup(source, constants.TARGET_CRS, always_xy=True)
    except ProjError as exc:
        raise TransformationResolutionError(
            f"Cannot list operations {source} -> {constants.TARGET_CRS}: {exc}"
        ) from exc


def missing_grids(config: ContextConfig | None = None) -> List[str]:
    """Short names of grids PROJ needs for *config* but cannot find locally."""
    config = config or ContextConfig()
    if config.geoid_grid:
        grid = Path(config.geoid_grid).expanduser()
        return [] if grid.is_file() else [str(grid)]

    group = _group(config)
    if group.best_available:
        return []
    names: List[str] = []
    for operation in group.unavailable_operations:
        for grid in operation.grids:
            if not grid.available and grid.short_name not in names:
                names.append(grid.short_name)
    return names


def fetch_grids(
    config: ContextConfig | None = None,
    directory: Path | str | None = None,
    open_license: bool = True,
) -> List[str]:
    """Download the grids reported by `missing_grids`; returns what was missing."""
    config = config or ContextConfig()
    missing = missing_grids(config)
    if not missing or config.geoid_grid:
        return missing
    target = Path(directory) if directory is not None else grid_cache_dir()
    target.mkdir(parents=True, exist_ok=True)
    log.info("Downloading %d geoid grid(s) to %s: %s", len(missing), target, ", ".join(missing))
    _group(config).download_grids(directory=target, open_license=open_license, verbose=False)
    return missing


def grid_cache_dir() -> Path:
    return Path(datadir.get_user_data_dir(create=True))


def directory_size_bytes(path: Path) -> int:
    total = 0
    for file_path in path.rglob("*"):
        try:
            if file_path.is_file():
                total += file_path.stat().st_size
        except OSError:
            continue
    return total


def _grid_entries(path: Path) -> List[Tuple[float, Path, int]]:
    entries: List[Tuple[float, Path, int]] = []
    for file_path in path.rglob("*"):
        if file_path.suffix.lower() not in constants.GRID_FILE_SUFFIXES:
            continue
        try:
            if not file_path.is_file():
                continue
            stat = file_path.stat()
        except OSError:
            continue
        entries.append((stat.st_mtime, file_path, stat.st_size))
    return entries


def enforce_quota(path: Path, max_gb: float = constants.GRID_CACHE_MAX_GB) -> Tuple[int, List[Path]]:
    """
    Keep the grid files under *path* below max_gb by deleting the oldest ones.

    Only grid files (`GRID_FILE_SUFFIXES`) count toward the quota or get
    removed; PROJ's network cache.db and config files are left alone.
    Returns the remaining grid bytes and the removed paths.
    """
    path = Path(path)
    if not path.exists():
        return 0, []
    entries = _grid_entries(path)
    total_bytes = sum(item[2] for item in entries)
    removed: List[Path] = []
    if max_gb <= 0:
        return total_bytes, removed

    limit_bytes = int(max_gb * (1024**3))
    if total_bytes <= limit_bytes:
        return total_bytes, removed

    entries.sort(key=lambda item: item[0])
    for _, file_path, size in entries:
        try:
            file_path.unlink()
            removed.append(file_path)
            total_bytes -= size
        except OSError as exc:
            log.warning("Failed to remove grid file %s: %s", file_path, exc)
        if total_bytes <= limit_bytes:
            break

    if removed:
        log.info("Pruned %d grid files from %s to enforce %.2f GB quota", len(removed), path, max_gb)
    return total_bytes, removed

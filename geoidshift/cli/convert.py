"""
Typer CLI for MSL -> WGS 84 ellipsoidal height conversion.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from .. import constants
from ..common_core import OrthometricPosition
from ..convert import epsg4979_from_epsg9705
from ..errors import GeoidShiftError, Status
from ..geoid.batch import convert_frame
from ..geoid.context import ContextConfig, GeodeticContext
from ..geoid.grids import enforce_quota, fetch_grids, grid_cache_dir, missing_grids
from ..io.readers import read_points_csv
from ..io.writers import write_points_csv

log = logging.getLogger(__name__)

app = typer.Typer(help="Convert MSL (orthometric) heights to WGS 84 ellipsoidal heights")

_GEOID_HELP = f"Geoid model ({', '.join(sorted(constants.GEOID_MODELS))})"


def _config(geoid: str, grid: Optional[Path], network: bool) -> ContextConfig:
    return ContextConfig(
        geoid_model=geoid,
        geoid_grid=str(grid) if grid is not None else None,
        network=network,
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Negative coordinates are not option flags.
@app.command("point", context_settings={"ignore_unknown_options": True})
def cli_point(
    lat: float = typer.Argument(..., help="Latitude in degrees"),
    lon: float = typer.Argument(..., help="Longitude in degrees"),
    height: float = typer.Argument(..., help="Height above MSL in meters"),
    geoid: str = typer.Option(constants.DEFAULT_GEOID_MODEL, help=_GEOID_HELP),
    grid: Optional[Path] = typer.Option(None, help="Local vgridshift grid (overrides --geoid)"),
    network: bool = typer.Option(constants.NETWORK_ENABLED, help="Allow PROJ to fetch grids"),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON"),
) -> None:
    """Convert a single position; the exit code is the absolute status code."""
    try:
        src = OrthometricPosition(lat, lon, height)
    except GeoidShiftError as exc:
        log.error("%s", exc)
        raise typer.Exit(code=abs(int(exc.status)))

    dst: dict = {}
    status = epsg4979_from_epsg9705(src, dst, _config(geoid, grid, network))
    if status != Status.OK:
        log.error("Conversion failed with status %s (%d)", status.name, int(status))
        raise typer.Exit(code=abs(int(status)))

    if as_json:
        typer.echo(json.dumps(dst))
    else:
        typer.echo(f"{dst['latitude']:.9f} {dst['longitude']:.9f} {dst['height']:.4f}")


@app.command("csv")
def cli_csv(
    input_path: Path = typer.Argument(..., help="CSV with latitude, longitude and MSL height"),
    output_path: Path = typer.Argument(..., help="Destination CSV"),
    lat_col: str = typer.Option(constants.CSV_LAT_COL, help="Latitude column"),
    lon_col: str = typer.Option(constants.CSV_LON_COL, help="Longitude column"),
    height_col: str = typer.Option(constants.CSV_HEIGHT_COL, help="MSL height column"),
    out_col: str = typer.Option(constants.CSV_OUT_HEIGHT_COL, help="Ellipsoidal height column"),
    chunk_size: int = typer.Option(constants.CSV_CHUNK_SIZE, help="Rows per engine call"),
    geoid: str = typer.Option(constants.DEFAULT_GEOID_MODEL, help=_GEOID_HELP),
    grid: Optional[Path] = typer.Option(None, help="Local vgridshift grid (overrides --geoid)"),
    network: bool = typer.Option(constants.NETWORK_ENABLED, help="Allow PROJ to fetch grids"),
) -> None:
    """Convert every row of a CSV table."""
    try:
        frame = read_points_csv(input_path, lat_col=lat_col, lon_col=lon_col, height_col=height_col)
        with GeodeticContext.acquire(_config(geoid, grid, network)) as ctx:
            converted = convert_frame(
                frame,
                ctx.vertical(),
                lat_col=lat_col,
                lon_col=lon_col,
                height_col=height_col,
                out_col=out_col,
                chunk_size=chunk_size,
                progress=True,
            )
    except GeoidShiftError as exc:
        log.error("%s", exc)
        raise typer.Exit(code=abs(int(exc.status)))

    write_points_csv(converted, output_path)
    ok = int(converted[constants.CSV_VALID_COL].sum())
    typer.echo(f"Wrote {output_path} ({ok}/{len(converted)} rows converted)")


@app.command("grids")
def cli_grids(
    geoid: str = typer.Option(constants.DEFAULT_GEOID_MODEL, help=_GEOID_HELP),
    fetch: bool = typer.Option(False, help="Download missing grids"),
    directory: Optional[Path] = typer.Option(None, help="Download directory (default: PROJ user dir)"),
    max_gb: Optional[float] = typer.Option(None, help="Prune the grid directory to this size"),
) -> None:
    """Report (and optionally download) the grids the geoid model needs."""
    config = ContextConfig(geoid_model=geoid)
    try:
        missing = fetch_grids(config, directory=directory) if fetch else missing_grids(config)
    except GeoidShiftError as exc:
        log.error("%s", exc)
        raise typer.Exit(code=abs(int(exc.status)))

    if not missing:
        typer.echo(f"{config.model_key}: all grids available")
    elif fetch:
        typer.echo(f"{config.model_key}: fetched {', '.join(missing)}")
    else:
        typer.echo(f"{config.model_key}: missing {', '.join(missing)}")

    if max_gb is not None:
        target = directory if directory is not None else grid_cache_dir()
        total, removed = enforce_quota(target, max_gb)
        typer.echo(f"{target}: {total} bytes after pruning {len(removed)} file(s)")


if __name__ == "__main__":
    app()

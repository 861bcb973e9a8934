#!/usr/bin/env python3
"""Environment validation helper for the geoidshift runtime."""

from __future__ import annotations

import argparse
import importlib
import json
import os
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .. import constants
from ..errors import GeoidShiftError
from ..geoid.context import ContextConfig, GeodeticContext
from ..geoid.grids import missing_grids

Result = Tuple[bool, str]


@dataclass(frozen=True)
class Check:
    name: str
    required: bool
    runner: Callable[[argparse.Namespace], Result]


def _format_status(ok: bool) -> str:
    return "OK" if ok else "FAIL"


def _config(args: argparse.Namespace) -> ContextConfig:
    return ContextConfig(geoid_model=args.geoid, geoid_grid=args.grid)


def check_python(_: argparse.Namespace) -> Result:
    target = (3, 9)
    version = sys.version_info
    if version < target:
        return False, f"Python {target[0]}.{target[1]}+ required, detected {version.major}.{version.minor}"
    return True, f"Python {version.major}.{version.minor}.{version.micro}"


def check_module(module: str, hint: str | None = None) -> Callable[[argparse.Namespace], Result]:
    def _runner(_: argparse.Namespace) -> Result:
        try:
            imported = importlib.import_module(module)
        except ImportError as exc:
            message = f"import failed: {exc}"
            if hint:
                message += f" ({hint})"
            return False, message
        version = getattr(imported, "__version__", None)
        return True, f"import ok ({version})" if version else "import ok"

    return _runner


def check_proj(_: argparse.Namespace) -> Result:
    import pyproj

    return True, f"PROJ {pyproj.proj_version_str}"


def check_context(args: argparse.Namespace) -> Result:
    try:
        with GeodeticContext.acquire(_config(args)) as ctx:
            return True, f"data dir {ctx.data_dir}"
    except GeoidShiftError as exc:
        return False, str(exc)


def check_grids(args: argparse.Namespace) -> Result:
    try:
        missing = missing_grids(_config(args))
    except GeoidShiftError as exc:
        return False, str(exc)
    if missing:
        return False, "missing " + ", ".join(missing) + " (run `geoidshift grids --fetch`)"
    return True, "all grids available"


def check_resolve(args: argparse.Namespace) -> Result:
    try:
        with GeodeticContext.acquire(_config(args)) as ctx:
            return True, ctx.vertical().description
    except GeoidShiftError as exc:
        return False, str(exc)


def check_env_var(name: str, required: bool) -> Callable[[argparse.Namespace], Result]:
    def _runner(_: argparse.Namespace) -> Result:
        value = os.getenv(name)
        if value:
            return True, f"set ({value})"
        status = "required" if required else "optional"
        return (not required), f"{status} env var not set"

    return _runner


def base_checks() -> List[Check]:
    return [
        Check("python", True, check_python),
        Check("numpy", True, check_module("numpy")),
        Check("pyproj", True, check_module("pyproj", hint="pip install pyproj")),
        Check("pandas", True, check_module("pandas")),
        Check("PROJ", True, check_proj),
        Check("geodetic context", True, check_context),
        Check("geoid grids", True, check_grids),
    ]


def optional_checks() -> List[Check]:
    return [
        Check("transformation", False, check_resolve),
        Check("PROJ_DATA", False, check_env_var("PROJ_DATA", required=False)),
        Check(constants.ENV_GEOID_MODEL, False, check_env_var(constants.ENV_GEOID_MODEL, required=False)),
        Check(constants.ENV_NETWORK, False, check_env_var(constants.ENV_NETWORK, required=False)),
    ]


def run_checks(checks: Iterable[Check], args: argparse.Namespace) -> Tuple[List[dict], bool]:
    results: List[dict] = []
    all_ok = True
    for check in checks:
        ok, message = check.runner(args)
        results.append(
            {
                "name": check.name,
                "status": "pass" if ok else "fail",
                "required": check.required,
                "message": message,
            }
        )
        if check.required and not ok:
            all_ok = False
    return results, all_ok


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate geoidshift runtime environment.")
    parser.add_argument(
        "--full",
        action="store_true",
        help="Run optional checks in addition to required ones.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable table.",
    )
    parser.add_argument(
        "--geoid",
        default=os.getenv(constants.ENV_GEOID_MODEL, constants.DEFAULT_GEOID_MODEL),
        help="Geoid model to validate (default: %(default)s).",
    )
    parser.add_argument(
        "--grid",
        default=os.getenv(constants.ENV_GEOID_GRID) or None,
        help="Local vgridshift grid to validate instead of a geoid model.",
    )
    return parser.parse_args(argv)


def render_table(rows: List[dict]) -> None:
    width_name = max(len(row["name"]) for row in rows) + 2
    print(f"{'Check':{width_name}}Status  Message")
    print("-" * (width_name + 40))
    for row in rows:
        status = _format_status(row["status"] == "pass")
        print(f"{row['name']:{width_name}}{status:<6} {row['message']}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    rows, required_ok = run_checks(base_checks(), args)
    if args.full:
        optional_rows, _ = run_checks(optional_checks(), args)
        rows.extend(optional_rows)
    if args.json:
        print(json.dumps(rows, indent=2))
    else:
        render_table(rows)
    return 0 if required_ok else 1


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import json

from geoidshift.scripts import check_env


def test_check_env_passes_with_local_grid(constant_grid, capsys):
    code = check_env.main(["--json", "--full", "--grid", str(constant_grid)])
    rows = {row["name"]: row for row in json.loads(capsys.readouterr().out)}
    assert code == 0
    assert rows["geodetic context"]["status"] == "pass"
    assert rows["geoid grids"]["status"] == "pass"
    assert rows["transformation"]["status"] == "pass"
    assert rows["PROJ"]["message"].startswith("PROJ ")


def test_check_env_fails_for_unknown_model(capsys):
    code = check_env.main(["--geoid", "EGM1900"])
    out = capsys.readouterr().out
    assert code == 1
    assert "Unknown geoid model" in out
    assert out.splitlines()[0].startswith("Check")


def test_run_checks_marks_optional_failures_non_blocking():
    args = check_env.parse_args(["--grid", "/does/not/exist.gtx"])
    rows, ok = check_env.run_checks(
        [check_env.Check("optional", False, check_env.check_context)], args
    )
    assert ok is True
    assert rows[0]["status"] == "fail"

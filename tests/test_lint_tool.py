from __future__ import annotations

import json
from pathlib import Path

from worldtick.cli.lint_tool import main

EXAMPLE_DIR = Path(__file__).resolve().parents[1] / "content" / "examples" / "forest_glade"


def _write_schedules(content_dir: Path, entries: list[dict]) -> None:
    payload = {"schema_version": 1, "schedules": [{"npc_id": "n1", "world_id": "w1", "entries": entries}]}
    (content_dir / "schedules.json").write_text(json.dumps(payload), encoding="utf-8")


def test_lint_tool_example_content_passes(capsys) -> None:
    exit_code = main([str(EXAMPLE_DIR)])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert output.strip() == "stats events=2 regions=2 schedules=2 errors=0 warnings=0"


def test_lint_tool_warnings_fail_only_in_strict_mode(tmp_path: Path, capsys) -> None:
    _write_schedules(tmp_path, [{"band": "morning", "location": "gate", "intent": "guard"}])

    assert main([str(tmp_path), "--bands", "morning,night"]) == 0
    relaxed = capsys.readouterr().out
    assert main([str(tmp_path), "--bands", "morning,night", "--strict"]) == 1
    capsys.readouterr()

    assert "warning npc n1: no schedule entry for band night" in relaxed.splitlines()


def test_lint_tool_errors_fail(tmp_path: Path, capsys) -> None:
    _write_schedules(tmp_path, [{"band": "brunch", "location": "inn", "intent": "rest"}])

    exit_code = main([str(tmp_path)])
    output = capsys.readouterr().out
    assert exit_code == 1
    assert "error npc n1: unknown schedule band 'brunch'" in output.splitlines()


def test_lint_tool_reports_load_errors(tmp_path: Path, capsys) -> None:
    exit_code = main([str(tmp_path / "missing")])

    assert exit_code == 1
    assert capsys.readouterr().out.startswith("error: content directory not found")

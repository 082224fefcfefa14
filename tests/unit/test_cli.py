from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from logsieve.main import app

runner = CliRunner()


def _write_candidates(path: Path) -> Path:
    lines = [
        {"message": "queue drained", "meta": {"level": "info"}},
        {"message": "queue drained", "meta": {"level": "info"}},
        {"is_http": True, "meta": {"response": {"headers": {"content-type": "font/woff2"}}}},
    ]
    path.write_text("\n".join(json.dumps(line) for line in lines), encoding="utf-8")
    return path


def test_info_shows_admission_policy() -> None:
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "max_bytes=" in result.stdout
    assert "retention=" in result.stdout


def test_ingest_dry_run_prints_json_summary(tmp_path: Path) -> None:
    path = _write_candidates(tmp_path / "candidates.jsonl")

    result = runner.invoke(app, ["ingest", str(path), "--dry-run", "--json", "-c", "1"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout[result.stdout.index("{"):])
    assert payload["submitted"] == 3
    assert payload["accepted"] == 1
    assert payload["rejected"] == {"duplicate": 1, "ignored_content_type": 1}


def test_ingest_rejects_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["ingest", str(tmp_path / "missing.jsonl"), "--dry-run"])

    assert result.exit_code != 0

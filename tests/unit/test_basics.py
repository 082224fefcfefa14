import json
from datetime import timedelta
from pathlib import Path
from time import sleep

from logsieve import config
from logsieve.utils import profiler
from scripts import generate_logs


def test_get_settings_defaults():
    settings = config.Settings(_env_file=None)
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_user == "postgres"
    assert settings.logs_table == "logs"
    assert settings.log_max_bytes == 20_480
    assert settings.duplicate_window == timedelta(hours=1)
    assert settings.severe_window == timedelta(minutes=10)
    assert settings.retention_ttl == timedelta(days=30)
    assert settings.severe_levels == ["error", "fatal"]
    assert settings.ignored_content_types == config.DEFAULT_IGNORED_CONTENT_TYPES
    assert settings.ingest_concurrency > 0


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LOG_MAX_BYTES", "1024")
    monkeypatch.setenv("DUPLICATE_WINDOW_SECONDS", "60")
    monkeypatch.setenv("SEVERE_LEVELS", '["fatal"]')
    monkeypatch.setenv("LOGS_TABLE", "app_logs")

    settings = config.Settings(_env_file=None)

    assert settings.log_max_bytes == 1024
    assert settings.duplicate_window == timedelta(seconds=60)
    assert settings.severe_levels == ["fatal"]
    assert settings.logs_table == "app_logs"


def test_default_ignored_content_types_are_not_shared():
    first = config.Settings(_env_file=None)
    first.ignored_content_types.append("video")

    assert "video" not in config.Settings(_env_file=None).ignored_content_types


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    if stats.cpu_percent is not None:
        assert isinstance(stats.cpu_percent, float)
    assert stats.as_dict()["label"] == "sleep"


def test_generate_logs_is_deterministic():
    first = generate_logs.generate_candidates(50, seed=123)
    second = generate_logs.generate_candidates(50, seed=123)

    assert first == second
    assert len(first) == 50


def test_generate_logs_writes_jsonl(tmp_path: Path):
    jsonl_path = tmp_path / "nested" / "candidates.jsonl"
    candidates = generate_logs.generate_candidates(5, seed=7)

    written = generate_logs.write_jsonl(jsonl_path, candidates)

    assert written == 5
    lines = jsonl_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 5
    for line in lines:
        candidate = json.loads(line)
        assert "message" in candidate
        assert "meta" in candidate

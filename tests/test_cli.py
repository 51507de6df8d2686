"""Smoke tests for the command-line interface."""
import json

import pytest
from typer.testing import CliRunner

from corehealth.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch):
    for name in ("LLM_PROVIDER", "OPENAI_API_KEY", "DEEPSEEK_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({
        "profile": {"age": 34, "height_cm": 170, "weight_kg": 65},
        "biomarkers": [{"name": "Fasting Glucose", "value": 200, "unit": "mg/dL"}],
        "health_score": {"overall": 72},
    }))
    return path


class TestCli:
    """Tests for CLI commands without a provider credential."""

    def test_health(self, tmp_path):
        result = runner.invoke(app, ["health", "--db", str(tmp_path / "kv.db")])
        assert result.exit_code == 0
        assert "NOT SET" in result.output

    def test_insights_fall_back_to_mock(self, snapshot_file):
        result = runner.invoke(app, ["insights", "--data", str(snapshot_file)])
        assert result.exit_code == 0
        assert "Recommendations" in result.output

    def test_trends_are_local(self, snapshot_file, tmp_path):
        result = runner.invoke(app, ["trends", "--data", str(snapshot_file), "--db", str(tmp_path / "kv.db")])
        assert result.exit_code == 0
        assert "Fasting Glucose" in result.output

    def test_invalid_snapshot(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        result = runner.invoke(app, ["insights", "--data", str(bad)])
        assert result.exit_code == 1

    def test_reset(self, tmp_path):
        result = runner.invoke(app, ["reset", "--yes", "--db", str(tmp_path / "kv.db")])
        assert result.exit_code == 0
        assert "cleared" in result.output

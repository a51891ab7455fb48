from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from a11y_audit import auditor as auditor_module
from a11y_audit.auditor import INFO_TEXT
from a11y_audit.cli import cli, print_score_bar
from a11y_audit.models import Counts
from a11y_audit.scoring import GRADE_COLORS, score

from conftest import H37, FakeEngine


@pytest.fixture
def use_engine(monkeypatch):
    def install(engine):
        monkeypatch.setattr(auditor_module, "get_engine", lambda cfg: engine)
        return engine
    return install


def test_scan_json(use_engine, sample_issues) -> None:
    engine = use_engine(FakeEngine(sample_issues))
    result = CliRunner().invoke(cli, ["scan", "example.com", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["success"] is True
    assert data["url"] == "https://example.com"
    assert data["issues"][0]["code"] == H37
    assert engine.calls[0][0] == "https://example.com"


def test_scan_pretty_output(use_engine, sample_issues) -> None:
    use_engine(FakeEngine(sample_issues))
    result = CliRunner().invoke(cli, ["scan", "http://example.com", "--verbose"])
    assert result.exit_code == 0, result.output
    assert "Bild ohne Alternativtext" in result.output
    assert "Quick Wins" in result.output
    assert "56/100" in result.output


def test_scan_failure_exits_nonzero(use_engine, failing_engine) -> None:
    use_engine(failing_engine)
    result = CliRunner().invoke(cli, ["scan", "https://example.com", "--json"])
    assert result.exit_code == 1
    assert json.loads(result.output)["errorType"] == "TimeoutError"


def test_scan_rejects_bad_url(use_engine) -> None:
    engine = use_engine(FakeEngine([]))
    result = CliRunner().invoke(cli, ["scan", "ftp://example.com"])
    assert result.exit_code == 1
    assert "Keine URL" in result.output
    assert engine.calls == []


def test_timeout_option_reaches_engine(use_engine) -> None:
    engine = use_engine(FakeEngine([]))
    result = CliRunner().invoke(cli, ["scan", "example.com", "--json", "-t", "12.5"])
    assert result.exit_code == 0, result.output
    assert engine.calls[0][1].timeout_ms == 12500


def test_explain_known_code() -> None:
    result = CliRunner().invoke(cli, ["explain", H37])
    assert result.exit_code == 0
    assert "Bild ohne Alternativtext" in result.output
    assert "critical" in result.output


def test_info() -> None:
    result = CliRunner().invoke(cli, ["info"])
    assert result.exit_code == 0
    assert result.output.strip() == INFO_TEXT.strip()


def test_invalid_config_file(tmp_path) -> None:
    path = tmp_path / "bad.toml"
    path.write_text("[limits]\nmax_concurrent = -1\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["scan", "example.com", "-c", str(path)])
    assert result.exit_code == 1
    assert "Invalid config" in result.output


def test_score_bar_uses_grade_color() -> None:
    result = score(Counts(errors=3, warnings=2, notices=10))
    bar = print_score_bar(result, width=10)
    assert bar.plain == "█████░░░░░ 54/100"
    assert str(bar.spans[0].style) == GRADE_COLORS["F"]
    assert str(bar.spans[-1].style) == f"bold {GRADE_COLORS['F']}"

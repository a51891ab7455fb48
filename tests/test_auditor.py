from __future__ import annotations

import asyncio
import json

import pytest

from a11y_audit.auditor import (
    FAILURE_HINT,
    INVALID_URL_MESSAGE,
    Auditor,
    tally_counts,
    upgrade_to_https,
    validate_url,
)
from a11y_audit.config import AuditConfig
from a11y_audit.engines import EngineOptions
from a11y_audit.errors import AuditBusyError, InvalidURLError
from a11y_audit.models import AuditFailure, AuditResponse, Counts

from conftest import H37, FakeEngine, raw


@pytest.mark.parametrize("url", ["https://example.com", "http://example.com/a?b=1", " https://x.org "])
def test_validate_url_accepts_http_urls(url) -> None:
    assert validate_url(url) == url.strip()


@pytest.mark.parametrize(
    "url",
    [None, "", 42, "example.com", "/relative/path", "ftp://example.com", "file:///etc/passwd",
     "https://", "http://[::1"],
)
def test_validate_url_rejects(url) -> None:
    with pytest.raises(InvalidURLError):
        validate_url(url)


def test_upgrade_to_https() -> None:
    assert upgrade_to_https("http://example.com/path?q=1") == "https://example.com/path?q=1"
    assert upgrade_to_https("https://example.com") == "https://example.com"
    # unparseable input passes through unchanged
    assert upgrade_to_https("http://[::1") == "http://[::1"


def test_tally_counts_treats_unknown_types_as_notices() -> None:
    issues = [
        raw("a", "error"), raw("b", "error"), raw("c", "warning"),
        raw("d", "notice"), raw("e", "bogus"), raw("f", ""),
    ]
    assert tally_counts(issues) == Counts(errors=2, warnings=1, notices=3)


def test_successful_audit(fake_engine, sample_issues) -> None:
    auditor = Auditor(fake_engine)
    result = asyncio.run(auditor.run_audit("http://example.com"))

    assert isinstance(result, AuditResponse)
    assert fake_engine.calls[0][0] == "https://example.com"
    assert isinstance(fake_engine.calls[0][1], EngineOptions)

    data = result.to_dict()
    assert data["success"] is True
    assert data["url"] == "https://example.com"
    assert data["counts"] == {"errors": 4, "warnings": 1, "notices": 1}
    assert data["breakdown"]["totalPenalty"] == 40 + 3 + 1
    assert data["score"] == 56
    assert data["grade"] == "F"
    assert data["meta"]["totalIssuesFound"] == len(sample_issues)
    assert data["meta"]["uniqueIssueTypes"] == 5
    assert data["meta"]["worstOffenders"][0] == "Bild ohne Alternativtext"
    assert data["issues"][0]["code"] == H37
    assert data["summary"]["criticalCount"] == 3
    assert isinstance(data["analysisTimeMs"], int)
    assert data["timestamp"].endswith("+00:00")
    json.dumps(data)


def test_clean_page_scores_full_marks() -> None:
    result = asyncio.run(Auditor(FakeEngine([])).run_audit("https://example.com"))
    assert result.result.score == 100
    assert result.issues == []
    assert result.summary.total == 0


def test_invalid_url_never_reaches_engine(fake_engine) -> None:
    auditor = Auditor(fake_engine)
    for bad in ("not a url", "ftp://example.com", ""):
        with pytest.raises(InvalidURLError):
            asyncio.run(auditor.run_audit(bad))
    assert fake_engine.calls == []


def test_engine_failure_becomes_structured_failure(failing_engine) -> None:
    result = asyncio.run(Auditor(failing_engine).run_audit("https://slow.example"))
    assert isinstance(result, AuditFailure)
    data = result.to_dict()
    assert data["success"] is False
    assert data["errorType"] == "TimeoutError"
    assert data["error"] == "TimeoutError: Navigation timeout of 60000 ms exceeded"
    assert data["hint"] == FAILURE_HINT
    assert "issues" not in data
    assert isinstance(data["analysisTimeMs"], int)


def test_unexpected_engine_exception_is_caught() -> None:
    engine = FakeEngine(error=RuntimeError("browser crashed"))
    result = asyncio.run(Auditor(engine).run_audit("https://example.com"))
    assert isinstance(result, AuditFailure)
    assert result.category == "RuntimeError"
    assert result.message == "browser crashed"


class SlowEngine(FakeEngine):
    def __init__(self):
        super().__init__([])
        self.active = 0
        self.peak = 0

    async def run(self, url, options):
        self.calls.append((url, options))
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return []


def test_concurrency_is_bounded() -> None:
    engine = SlowEngine()
    auditor = Auditor(engine, max_concurrent=2, max_queued=10)

    async def go():
        return await asyncio.gather(*(auditor.run_audit(f"https://site{n}.example") for n in range(6)))

    results = asyncio.run(go())
    assert all(isinstance(r, AuditResponse) for r in results)
    assert engine.peak == 2
    assert len(engine.calls) == 6
    assert auditor.in_flight == 0


def test_full_queue_rejects_new_audits() -> None:
    engine = SlowEngine()
    auditor = Auditor(engine, max_concurrent=1, max_queued=1)

    async def go():
        return await asyncio.gather(
            *(auditor.run_audit(f"https://site{n}.example") for n in range(3)),
            return_exceptions=True,
        )

    results = asyncio.run(go())
    assert sum(isinstance(r, AuditBusyError) for r in results) == 1
    assert len(engine.calls) == 2


def test_handle_request_statuses(fake_engine, failing_engine) -> None:
    ok = Auditor(fake_engine)
    status, body = asyncio.run(ok.handle_request({"url": "https://example.com"}))
    assert status == 200 and body["success"] is True

    for payload in ({}, {"url": 5}, None, {"url": "javascript:alert(1)"}):
        status, body = asyncio.run(ok.handle_request(payload))
        assert status == 400
        assert body == {"success": False, "error": INVALID_URL_MESSAGE}

    status, body = asyncio.run(Auditor(failing_engine).handle_request({"url": "https://example.com"}))
    assert status == 500 and body["success"] is False


def test_from_config_loads_external_dictionary(tmp_path, fake_engine) -> None:
    code = "WCAG2AA.Principle2.Guideline2_4.2_4_4.H77"
    path = tmp_path / "wcag-de.json"
    path.write_text(json.dumps({code: "Linkzweck unklar. Mehr Kontext nötig."}), encoding="utf-8")

    cfg = AuditConfig.model_validate({
        "engine": {"timeout_ms": 5000, "standard_label": "WCAG 2.1 AA"},
        "limits": {"max_concurrent": 3, "max_queued": 0},
        "translations": {"dictionary_path": str(path)},
    })
    auditor = Auditor.from_config(cfg, engine=fake_engine)
    assert auditor.options.timeout_ms == 5000
    assert auditor.max_concurrent == 3
    assert auditor.standard_label == "WCAG 2.1 AA"
    assert auditor.taxonomy.translate(code).title == "Linkzweck unklar"

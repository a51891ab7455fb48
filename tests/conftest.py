from __future__ import annotations

import pytest

from a11y_audit.engines import AuditEngine
from a11y_audit.errors import EngineError
from a11y_audit.models import RawIssue


H37 = "WCAG2AA.Principle1.Guideline1_1.1_1_1.H37"
CONTRAST = "WCAG2AA.Principle1.Guideline1_4.1_4_3.G18.Fail"
TITLE = "WCAG2AA.Principle2.Guideline2_4.2_4_2.H25.1.NoTitleEl"
DUPLICATE_ID = "WCAG2AA.Principle4.Guideline4_1.4_1_1.F77"
HEADINGS = "WCAG2AA.Principle1.Guideline1_3.1_3_1.H42"
NOTICE_CODE = "WCAG2AA.Principle1.Guideline1_3.1_3_1_A.G141"
LOW_CODE = "WCAG2AA.Principle2.Guideline2_2.2_2_1.F41.2"


def raw(code: str, type: str = "error", message: str = "", selector: str = "") -> RawIssue:
    return RawIssue.from_dict({"code": code, "type": type, "message": message, "selector": selector})


class FakeEngine(AuditEngine):
    """Records every call and returns canned issues or raises."""

    name = "fake"

    def __init__(self, issues=None, error: Exception | None = None):
        self.issues = list(issues or [])
        self.error = error
        self.calls: list[tuple[str, object]] = []

    async def run(self, url, options):
        self.calls.append((url, options))
        if self.error is not None:
            raise self.error
        return list(self.issues)


@pytest.fixture
def sample_issues() -> list[RawIssue]:
    return [
        raw(HEADINGS, "warning", "Heading markup should be used", "#intro > p"),
        raw(H37, "error", "Img element missing an alt attribute.", "img.logo"),
        raw(H37, "error", "Img element missing an alt attribute. ", "img.hero"),
        raw(CONTRAST, "error", "This element has insufficient contrast", "a.nav"),
        raw(LOW_CODE, "notice", "Check meta refresh", "meta"),
        raw(TITLE, "error", "A title should be provided", "html"),
    ]


@pytest.fixture
def fake_engine(sample_issues) -> FakeEngine:
    return FakeEngine(sample_issues)


@pytest.fixture
def failing_engine() -> FakeEngine:
    return FakeEngine(error=EngineError("TimeoutError", "Navigation timeout of 60000 ms exceeded"))

"""Data models for accessibility audit results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class IssueType(Enum):
    """Native classification attached to each raw issue by the engine."""
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"

    @classmethod
    def coerce(cls, value: Any) -> "IssueType":
        """Map an engine value to an IssueType; anything unknown is a notice."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NOTICE


class Priority(Enum):
    """Triage classification derived from the rule code."""
    CRITICAL = "critical"
    WARNING = "warning"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    Priority.CRITICAL: 0,
    Priority.WARNING: 1,
    Priority.LOW: 2,
}


@dataclass(frozen=True)
class RawIssue:
    """A single rule violation as reported by the testing engine."""
    code: str
    type: IssueType
    message: str = ""
    selector: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "RawIssue":
        return cls(
            code=str(data.get("code") or "").strip() or "unknown",
            type=IssueType.coerce(data.get("type")),
            message=str(data.get("message") or ""),
            selector=str(data.get("selector") or ""),
        )


@dataclass(frozen=True)
class Translation:
    """Localized explanation for a rule code."""
    title: str
    description: str
    fix: str

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "fix": self.fix}


@dataclass
class NormalizedIssue:
    """One record per distinct rule code observed in an audit."""
    code: str
    type: IssueType
    priority: Priority
    translation: Translation
    count: int = 0
    # dicts keep insertion order, so they double as ordered sets
    messages: dict[str, None] = field(default_factory=dict)
    selectors: dict[str, None] = field(default_factory=dict)

    @property
    def samples(self) -> list[str]:
        return list(self.selectors)[:3]

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "type": self.type.value,
            "count": self.count,
            "messages": list(self.messages),
            "samples": self.samples,
            "isPriority": self.priority.value,
            "translation": self.translation.to_dict(),
        }


@dataclass(frozen=True)
class Counts:
    """Raw issue counts by engine type."""
    errors: int = 0
    warnings: int = 0
    notices: int = 0

    @property
    def total(self) -> int:
        return self.errors + self.warnings + self.notices

    def to_dict(self) -> dict:
        return {"errors": self.errors, "warnings": self.warnings, "notices": self.notices}


@dataclass(frozen=True)
class ScoreBreakdown:
    error_penalty: int
    warning_penalty: int
    notice_penalty: int

    @property
    def total_penalty(self) -> int:
        return self.error_penalty + self.warning_penalty + self.notice_penalty

    def to_dict(self) -> dict:
        return {
            "errorPenalty": self.error_penalty,
            "warningPenalty": self.warning_penalty,
            "noticePenalty": self.notice_penalty,
            "totalPenalty": self.total_penalty,
        }


@dataclass(frozen=True)
class ScoreResult:
    score: int  # 0-100
    grade: str
    grade_color: str
    breakdown: ScoreBreakdown
    assessment: str

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "grade": self.grade,
            "gradeColor": self.grade_color,
            "breakdown": self.breakdown.to_dict(),
            "assessment": self.assessment,
        }


@dataclass(frozen=True)
class CriticalItem:
    title: str
    count: int
    fix: str

    def to_dict(self) -> dict:
        return {"title": self.title, "count": self.count, "fix": self.fix}


@dataclass
class Summary:
    """Human-facing digest of the normalized issues."""
    total: int = 0
    critical_count: int = 0
    warning_count: int = 0
    top_critical: list[CriticalItem] = field(default_factory=list)
    quick_wins: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "criticalCount": self.critical_count,
            "warningCount": self.warning_count,
            "topCritical": [item.to_dict() for item in self.top_critical],
            "quickWins": list(self.quick_wins),
        }


@dataclass
class AuditMeta:
    total_issues_found: int = 0
    unique_issue_types: int = 0
    worst_offenders: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalIssuesFound": self.total_issues_found,
            "uniqueIssueTypes": self.unique_issue_types,
            "worstOffenders": list(self.worst_offenders),
        }


@dataclass
class AuditResponse:
    """Complete, successful audit for a URL."""
    url: str
    standard: str
    counts: Counts
    result: ScoreResult
    issues: list[NormalizedIssue]
    summary: Summary
    meta: AuditMeta
    timestamp: str
    analysis_time_ms: int = 0

    success = True

    def to_dict(self) -> dict:
        data = {
            "success": True,
            "url": self.url,
            "standard": self.standard,
            "counts": self.counts.to_dict(),
        }
        data.update(self.result.to_dict())
        data.update({
            "timestamp": self.timestamp,
            "analysisTimeMs": self.analysis_time_ms,
            "issues": [issue.to_dict() for issue in self.issues],
            "summary": self.summary.to_dict(),
            "meta": self.meta.to_dict(),
        })
        return data


@dataclass
class AuditFailure:
    """An audit that could not be completed; carries no issue data."""
    url: str
    category: str
    message: str
    timestamp: str
    analysis_time_ms: int = 0
    hint: Optional[str] = None

    success = False

    @property
    def error(self) -> str:
        return f"{self.category}: {self.message}" if self.message else self.category

    def to_dict(self) -> dict:
        data = {
            "success": False,
            "error": self.error,
            "errorType": self.category,
            "timestamp": self.timestamp,
            "analysisTimeMs": self.analysis_time_ms,
        }
        if self.hint:
            data["hint"] = self.hint
        return data

"""Digest of normalized issues for the report header."""

from typing import Optional, Sequence

from .models import CriticalItem, NormalizedIssue, Priority, Summary
from .taxonomy import DEFAULT_TAXONOMY, RuleTaxonomy, strip_code_prefix


def issue_title(issue: NormalizedIssue) -> str:
    return issue.translation.title or strip_code_prefix(issue.code)


def summarize(
    issues: Sequence[NormalizedIssue],
    taxonomy: Optional[RuleTaxonomy] = None,
) -> Summary:
    """Build the summary from issues already ranked by the normalizer.

    Quick wins are picked from the critical issues only, in their existing
    order.
    """
    taxonomy = taxonomy or DEFAULT_TAXONOMY
    critical = [i for i in issues if i.priority is Priority.CRITICAL]
    warnings = [i for i in issues if i.priority is Priority.WARNING]

    top_critical = [
        CriticalItem(title=issue_title(i), count=i.count, fix=i.translation.fix)
        for i in critical[:3]
    ]
    quick_wins = [issue_title(i) for i in critical if taxonomy.is_quick_win(i.code)][:3]

    return Summary(
        total=len(issues),
        critical_count=len(critical),
        warning_count=len(warnings),
        top_critical=top_critical,
        quick_wins=quick_wins,
    )


def worst_offenders(issues: Sequence[NormalizedIssue], limit: int = 5) -> list[str]:
    """Titles of the highest-ranked issues."""
    return [issue_title(i) for i in issues[:limit]]

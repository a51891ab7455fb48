"""Collapse raw engine issues into one record per rule code."""

from typing import Iterable, Optional, Union

from .models import NormalizedIssue, RawIssue
from .taxonomy import DEFAULT_TAXONOMY, RuleTaxonomy


def normalize(
    raw_issues: Iterable[Union[RawIssue, dict]],
    taxonomy: Optional[RuleTaxonomy] = None,
) -> list[NormalizedIssue]:
    """Group raw issues by code and rank the groups.

    Messages and selectors are deduplicated but ``count`` is not: it is the
    number of raw issues with that code. Output is ordered critical, warning,
    low, and by descending count within a priority. Ties keep first-seen order.
    """
    taxonomy = taxonomy or DEFAULT_TAXONOMY
    groups: dict[str, NormalizedIssue] = {}

    for raw in raw_issues:
        if not isinstance(raw, RawIssue):
            raw = RawIssue.from_dict(raw)
        code = raw.code or "unknown"

        issue = groups.get(code)
        if issue is None:
            issue = NormalizedIssue(
                code=code,
                type=raw.type,
                priority=taxonomy.classify(code),
                translation=taxonomy.translate(code),
            )
            groups[code] = issue

        issue.count += 1
        message = raw.message.strip()
        if message:
            issue.messages.setdefault(message, None)
        if raw.selector:
            issue.selectors.setdefault(raw.selector, None)

    return sorted(groups.values(), key=lambda i: (i.priority.rank, -i.count))

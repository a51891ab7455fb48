from __future__ import annotations

from a11y_audit.models import IssueType, Priority
from a11y_audit.normalizer import normalize
from a11y_audit.taxonomy import RuleTaxonomy

from conftest import CONTRAST, H37, HEADINGS, LOW_CODE, TITLE, raw


def test_empty_input() -> None:
    assert normalize([]) == []


def test_duplicates_collapse_but_count_is_raw() -> None:
    issues = normalize([
        {"code": "X", "type": "error", "message": "m1", "selector": "s1"},
        {"code": "X", "type": "error", "message": "m1", "selector": "s2"},
    ])
    assert len(issues) == 1
    issue = issues[0]
    assert issue.count == 2
    assert list(issue.messages) == ["m1"]
    assert issue.samples == ["s1", "s2"]


def test_identical_issues_are_all_counted() -> None:
    issues = normalize([raw(H37, "error", "same", "img")] * 4)
    assert issues[0].count == 4
    assert issues[0].samples == ["img"]
    assert list(issues[0].messages) == ["same"]


def test_messages_are_trimmed_and_empty_values_skipped() -> None:
    issue = normalize([
        raw(H37, message="  Missing alt  ", selector=""),
        raw(H37, message="Missing alt", selector="img.a"),
        raw(H37, message="", selector="img.b"),
    ])[0]
    assert list(issue.messages) == ["Missing alt"]
    assert issue.samples == ["img.a", "img.b"]
    assert issue.count == 3


def test_samples_capped_at_three_in_insertion_order() -> None:
    issue = normalize([raw(H37, selector=f"img:nth-child({n})") for n in range(1, 8)])[0]
    assert issue.samples == ["img:nth-child(1)", "img:nth-child(2)", "img:nth-child(3)"]
    assert len(issue.selectors) == 7


def test_missing_code_groups_as_unknown() -> None:
    issues = normalize([{"type": "error"}, {"code": "", "type": "warning"}])
    assert [i.code for i in issues] == ["unknown"]
    assert issues[0].count == 2


def test_first_issue_type_is_kept() -> None:
    issue = normalize([raw(H37, "warning"), raw(H37, "error")])[0]
    assert issue.type is IssueType.WARNING


def test_priority_dominates_count() -> None:
    issues = normalize(
        [raw(LOW_CODE)] * 5 + [raw(H37)] + [raw(HEADINGS)] * 10
    )
    assert [(i.priority, i.count) for i in issues] == [
        (Priority.CRITICAL, 1),
        (Priority.WARNING, 10),
        (Priority.LOW, 5),
    ]


def test_higher_count_first_within_priority() -> None:
    issues = normalize([raw(TITLE)] + [raw(CONTRAST)] * 3 + [raw(H37)] * 2)
    assert [i.code for i in issues] == [CONTRAST, H37, TITLE]


def test_normalize_is_repeatable(sample_issues) -> None:
    first = [i.to_dict() for i in normalize(sample_issues)]
    second = [i.to_dict() for i in normalize(sample_issues)]
    assert first == second


def test_translation_and_priority_attached(sample_issues) -> None:
    by_code = {i.code: i for i in normalize(sample_issues)}
    assert by_code[H37].translation.title == "Bild ohne Alternativtext"
    assert by_code[H37].priority is Priority.CRITICAL
    assert by_code[LOW_CODE].translation.title == "Unbekanntes Problem"


def test_injected_taxonomy_is_used() -> None:
    taxonomy = RuleTaxonomy(critical_patterns=("Custom",), warning_patterns=())
    issue = normalize([raw("My.Custom.Rule")], taxonomy)[0]
    assert issue.priority is Priority.CRITICAL


def test_to_dict_contract() -> None:
    data = normalize([raw(H37, "error", "m", "img")])[0].to_dict()
    assert data == {
        "code": H37,
        "type": "error",
        "count": 1,
        "messages": ["m"],
        "samples": ["img"],
        "isPriority": "critical",
        "translation": data["translation"],
    }
    assert set(data["translation"]) == {"title", "description", "fix"}

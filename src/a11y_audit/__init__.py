"""a11y-audit - Automated WCAG accessibility audit with a ranked, translated report."""

__version__ = "1.0.0"

from .auditor import Auditor, audit_url
from .normalizer import normalize
from .scoring import score
from .summary import summarize
from .taxonomy import RuleTaxonomy, classify, translate

__all__ = [
    "Auditor",
    "RuleTaxonomy",
    "audit_url",
    "classify",
    "normalize",
    "score",
    "summarize",
    "translate",
]

"""Rule taxonomy: priority patterns and translations for WCAG2AA rule codes.

Rule codes come from HTML_CodeSniffer via pa11y and look like::

    WCAG2AA.Principle1.Guideline1_1.1_1_1.H37

Priorities are assigned by substring match against ordered pattern lists, so
a single pattern such as ``1_1_1.H37`` covers every qualifier variant of that
technique.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from .errors import TaxonomyError
from .models import Priority, Translation


UNKNOWN_DESCRIPTION = "Unbekanntes Problem. Bitte manuell prüfen."
DEFAULT_FIX = "Siehe WCAG-Richtlinien"

# Checked before WARNING_PATTERNS; first match wins.
CRITICAL_PATTERNS: tuple[str, ...] = (
    "1_1_1.H37",        # img without alt
    "1_1_1.H30",        # linked image without text alternative
    "1_1_1.H36",        # image submit button without alt
    "1_1_1.G94",        # non-text content without alternative
    "1_3_1.F68",        # form control without label
    "1_4_3.G18",        # contrast below 4.5:1
    "1_4_3.G145",       # contrast of large text below 3:1
    "2_4_2.H25",        # missing page title
    "3_1_1.H57",        # missing lang attribute
    "4_1_1.F77",        # duplicate id
    "4_1_2.H91",        # control or link without accessible name
)

WARNING_PATTERNS: tuple[str, ...] = (
    "1_3_1.H42",        # heading markup
    "1_3_1_A.G141",     # heading order
    "1_3_1.H48",        # list markup
    "1_3_1.H39",        # table caption
    "1_3_1.H43",        # table headers
    "1_3_1.H63",        # table scope
    "1_3_1.H49",        # presentational markup
    "1_3_1.H44",        # label for attribute
    "1_4_3.F24",        # foreground/background colour pairing
    "2_4_1.H64",        # iframe title
    "2_4_1.G1",         # skip links
    "2_4_4.H77",        # link purpose
    "3_2_2.H32",        # form without submit button
    "3_3_2.G131",       # input labels
)

# Cheap to remediate; every entry must also match a critical pattern.
QUICK_WIN_PATTERNS: tuple[str, ...] = (
    "1_1_1.H37",
    "1_1_1.H30",
    "2_4_2.H25",
    "3_1_1.H57",
)

_STANDARD_PREFIX = re.compile(r"^WCAG2AA\.")
_GUIDELINE_SEGMENT = re.compile(r"Principle\d+\.Guideline\d+_\d+\.\d+_\d+_\d+\.")


def _t(title: str, description: str, fix: str) -> Translation:
    return Translation(title=title, description=description, fix=fix)


CURATED_TRANSLATIONS: Mapping[str, Translation] = MappingProxyType({
    "WCAG2AA.Principle1.Guideline1_1.1_1_1.H37": _t(
        "Bild ohne Alternativtext",
        "Ein <img>-Element hat kein alt-Attribut. Screenreader können den Bildinhalt nicht vermitteln.",
        "Jedem Bild ein aussagekräftiges alt-Attribut geben; rein dekorative Bilder erhalten alt=\"\".",
    ),
    "WCAG2AA.Principle1.Guideline1_1.1_1_1.H30.2": _t(
        "Bildlink ohne Textalternative",
        "Ein Link enthält nur ein Bild ohne Alternativtext. Das Linkziel ist für Screenreader nicht erkennbar.",
        "Im alt-Attribut des Bildes das Linkziel beschreiben.",
    ),
    "WCAG2AA.Principle1.Guideline1_1.1_1_1.H36": _t(
        "Grafischer Button ohne Alternativtext",
        "Ein Bild-Button (input type=\"image\") hat keinen Alternativtext.",
        "Dem Button ein alt-Attribut mit der ausgelösten Aktion geben.",
    ),
    "WCAG2AA.Principle1.Guideline1_3.1_3_1.F68": _t(
        "Formularfeld ohne Beschriftung",
        "Ein Formularfeld hat keinen zugänglichen Namen. Nutzer wissen nicht, was eingegeben werden soll.",
        "Ein <label for=\"...\"> verknüpfen oder aria-label bzw. aria-labelledby setzen.",
    ),
    "WCAG2AA.Principle1.Guideline1_4.1_4_3.G18.Fail": _t(
        "Zu geringer Farbkontrast",
        "Der Kontrast zwischen Text und Hintergrund liegt unter 4,5:1. Menschen mit Sehschwäche können den Text schlecht lesen.",
        "Textfarbe abdunkeln oder Hintergrund aufhellen, bis mindestens 4,5:1 erreicht ist.",
    ),
    "WCAG2AA.Principle1.Guideline1_4.1_4_3.G145.Fail": _t(
        "Zu geringer Kontrast bei großer Schrift",
        "Großer Text erreicht nicht das Kontrastverhältnis von 3:1.",
        "Farben anpassen, bis mindestens 3:1 erreicht ist.",
    ),
    "WCAG2AA.Principle2.Guideline2_4.2_4_2.H25.1.NoTitleEl": _t(
        "Seitentitel fehlt",
        "Das Dokument hat kein <title>-Element. Nutzer können die Seite in Tabs und Verlauf nicht zuordnen.",
        "Im <head> ein eindeutiges, beschreibendes <title>-Element ergänzen.",
    ),
    "WCAG2AA.Principle3.Guideline3_1.3_1_1.H57.2": _t(
        "Sprache der Seite nicht angegeben",
        "Das <html>-Element hat kein lang-Attribut. Screenreader wählen womöglich die falsche Aussprache.",
        "Am <html>-Element die Sprache angeben, z. B. lang=\"de\".",
    ),
    "WCAG2AA.Principle4.Guideline4_1.4_1_1.F77": _t(
        "Doppelte ID",
        "Eine ID wird auf der Seite mehrfach verwendet. Verknüpfungen wie Labels oder ARIA-Referenzen werden unzuverlässig.",
        "Jede ID nur einmal pro Seite vergeben.",
    ),
    "WCAG2AA.Principle4.Guideline4_1.4_1_2.H91.A.EmptyNoId": _t(
        "Leerer Link",
        "Ein Link enthält weder Text noch einen zugänglichen Namen.",
        "Linktext ergänzen oder aria-label setzen; leere Anker entfernen.",
    ),
    "WCAG2AA.Principle4.Guideline4_1.4_1_2.H91.InputText.Name": _t(
        "Eingabefeld ohne Namen",
        "Ein Textfeld hat keinen zugänglichen Namen.",
        "Ein sichtbares <label> verknüpfen oder aria-label setzen.",
    ),
    "WCAG2AA.Principle4.Guideline4_1.4_1_2.H91.Button.Name": _t(
        "Button ohne Namen",
        "Ein Button hat keinen zugänglichen Namen, etwa weil er nur ein Icon enthält.",
        "Sichtbaren Text oder aria-label ergänzen.",
    ),
    "WCAG2AA.Principle1.Guideline1_3.1_3_1.H42": _t(
        "Überschrift nicht ausgezeichnet",
        "Text sieht aus wie eine Überschrift, ist aber nicht als <h1>-<h6> ausgezeichnet.",
        "Überschriften mit den passenden Heading-Elementen auszeichnen.",
    ),
    "WCAG2AA.Principle1.Guideline1_3.1_3_1_A.G141": _t(
        "Überschriftenhierarchie lückenhaft",
        "Überschriftenebenen werden übersprungen, etwa von <h2> direkt auf <h4>.",
        "Überschriftenebenen ohne Sprünge verschachteln.",
    ),
    "WCAG2AA.Principle2.Guideline2_4.2_4_1.H64.1": _t(
        "iframe ohne Titel",
        "Ein <iframe> hat kein title-Attribut. Der eingebettete Inhalt ist nicht identifizierbar.",
        "Dem iframe ein title-Attribut geben, das den Inhalt beschreibt.",
    ),
})


def strip_code_prefix(code: str) -> str:
    """Drop the standard prefix and the principle/guideline segment from a code."""
    stripped = _STANDARD_PREFIX.sub("", code or "")
    return _GUIDELINE_SEGMENT.sub("", stripped)


def classify(
    code: str,
    critical: Sequence[str] = CRITICAL_PATTERNS,
    warning: Sequence[str] = WARNING_PATTERNS,
) -> Priority:
    """Return the triage priority for a rule code."""
    code = code or ""
    if any(pattern in code for pattern in critical):
        return Priority.CRITICAL
    if any(pattern in code for pattern in warning):
        return Priority.WARNING
    return Priority.LOW


def _first_sentence(text: str) -> str:
    return text.split(".", 1)[0].strip()


def translate(
    code: str,
    external: Optional[Mapping[str, str]] = None,
    curated: Mapping[str, Translation] = CURATED_TRANSLATIONS,
) -> Translation:
    """Resolve title, description and fix for a rule code.

    Never raises: missing data degrades to placeholders.
    """
    code = code or "unknown"
    entry = curated.get(code)
    if entry is not None:
        return entry

    description = (external or {}).get(code) or UNKNOWN_DESCRIPTION

    if len(description) > 10 and _first_sentence(description):
        title = _first_sentence(description)
    else:
        title = strip_code_prefix(code) or code

    return Translation(title=title, description=description, fix=DEFAULT_FIX)


def load_external_dictionary(path: str | Path) -> dict[str, str]:
    """Load a JSON object mapping rule codes to localized descriptions."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise TaxonomyError(f"Translation dictionary not found: {path}") from e
    except json.JSONDecodeError as e:
        raise TaxonomyError(f"Translation dictionary is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise TaxonomyError(f"Translation dictionary must be a JSON object: {path}")
    return {str(k): v for k, v in data.items() if isinstance(v, str) and v.strip()}


@dataclass(frozen=True)
class RuleTaxonomy:
    """Immutable bundle of classification patterns and translation tables."""
    critical_patterns: tuple[str, ...] = CRITICAL_PATTERNS
    warning_patterns: tuple[str, ...] = WARNING_PATTERNS
    quick_win_patterns: tuple[str, ...] = QUICK_WIN_PATTERNS
    curated: Mapping[str, Translation] = field(default_factory=lambda: CURATED_TRANSLATIONS)
    external: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def default(cls, external: Optional[Mapping[str, str]] = None) -> "RuleTaxonomy":
        return cls(external=MappingProxyType(dict(external or {})))

    def classify(self, code: str) -> Priority:
        return classify(code, self.critical_patterns, self.warning_patterns)

    def translate(self, code: str) -> Translation:
        return translate(code, self.external, self.curated)

    def is_quick_win(self, code: str) -> bool:
        return any(pattern in (code or "") for pattern in self.quick_win_patterns)


DEFAULT_TAXONOMY = RuleTaxonomy.default()

"""Audit orchestration: engine run, normalization, scoring and summary."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Iterable, Optional, Union
from urllib.parse import urlparse, urlunparse

from .config import AuditConfig, default_config
from .engines import AuditEngine, EngineOptions, get_engine
from .errors import AuditBusyError, EngineError, InvalidURLError
from .models import AuditFailure, AuditMeta, AuditResponse, Counts, IssueType, RawIssue
from .normalizer import normalize
from .scoring import score
from .summary import summarize, worst_offenders
from .taxonomy import RuleTaxonomy, load_external_dictionary


logger = logging.getLogger(__name__)

INVALID_URL_MESSAGE = "Keine URL angegeben oder falsches Format."
BUSY_MESSAGE = "Zu viele Analysen gleichzeitig. Bitte warten Sie kurz und versuchen Sie es erneut."
FAILURE_HINT = (
    "Analyse fehlgeschlagen. Die Site blockiert evtl. Bots/CORS oder ist nicht erreichbar."
)

INFO_TEXT = (
    "Dieser automatisierte Barrierefreiheits-Check prüft WCAG 2.1 AA Kriterien wie Kontraste, "
    "Alternativtexte, Struktur, Formularkennzeichnungen und mehr.\n"
    "Was er nicht prüft: inhaltliche Verständlichkeit, komplexe Tastaturnavigation oder sinnvolle "
    "Alternativtexte. Diese müssen manuell validiert werden."
)


def validate_url(url) -> str:
    """Return the URL if it is an absolute http(s) URL, else raise InvalidURLError."""
    if not url or not isinstance(url, str):
        raise InvalidURLError(INVALID_URL_MESSAGE)
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidURLError(f"{INVALID_URL_MESSAGE} ({e})") from e
    if parsed.scheme not in ("http", "https") or not parsed.netloc or not parsed.hostname:
        raise InvalidURLError(INVALID_URL_MESSAGE)
    return url


def upgrade_to_https(url: str) -> str:
    """Rewrite http:// to https://; leave the URL untouched if that fails."""
    try:
        parsed = urlparse(url)
        if parsed.scheme == "http":
            return urlunparse(parsed._replace(scheme="https"))
    except ValueError:
        logger.warning("Could not upgrade %s to https, using it unchanged", url)
    return url


def tally_counts(raw_issues: Iterable[RawIssue]) -> Counts:
    errors = warnings = notices = 0
    for issue in raw_issues:
        kind = IssueType.coerce(issue.type)
        if kind is IssueType.ERROR:
            errors += 1
        elif kind is IssueType.WARNING:
            warnings += 1
        else:
            notices += 1
    return Counts(errors=errors, warnings=warnings, notices=notices)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Auditor:
    """Runs audits against one engine with a bound on concurrent work.

    At most ``max_concurrent`` audits talk to the engine at once; up to
    ``max_queued`` more wait for a slot. Anything beyond that is refused with
    AuditBusyError instead of piling up browser processes.
    """

    def __init__(
        self,
        engine: AuditEngine,
        taxonomy: Optional[RuleTaxonomy] = None,
        options: Optional[EngineOptions] = None,
        standard_label: str = "WCAG 2.1 AA (pa11y: WCAG2AA)",
        max_concurrent: int = 2,
        max_queued: int = 8,
    ):
        self.engine = engine
        self.taxonomy = taxonomy or RuleTaxonomy.default()
        self.options = options or EngineOptions()
        self.standard_label = standard_label
        self.max_concurrent = max_concurrent
        self.max_queued = max_queued
        self._slots = asyncio.Semaphore(max_concurrent)
        self._in_flight = 0

    @classmethod
    def from_config(cls, cfg: Optional[AuditConfig] = None, engine: Optional[AuditEngine] = None) -> "Auditor":
        cfg = cfg or default_config()
        external = {}
        if cfg.translations.dictionary_path:
            external = load_external_dictionary(cfg.translations.dictionary_path)
            logger.debug("Loaded %d external translations", len(external))
        return cls(
            engine=engine or get_engine(cfg.engine),
            taxonomy=RuleTaxonomy.default(external),
            options=EngineOptions.from_config(cfg.engine),
            standard_label=cfg.engine.standard_label,
            max_concurrent=cfg.limits.max_concurrent,
            max_queued=cfg.limits.max_queued,
        )

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def run_audit(self, url: str) -> Union[AuditResponse, AuditFailure]:
        """Audit a URL.

        Raises InvalidURLError before touching the engine and AuditBusyError
        when the queue is full. Engine failures come back as AuditFailure.
        """
        url = upgrade_to_https(validate_url(url))

        if self._in_flight >= self.max_concurrent + self.max_queued:
            raise AuditBusyError(BUSY_MESSAGE)

        self._in_flight += 1
        try:
            async with self._slots:
                return await self._audit(url)
        finally:
            self._in_flight -= 1

    async def _audit(self, url: str) -> Union[AuditResponse, AuditFailure]:
        start_time = time.time()
        logger.info("Starting analysis for %s", url)

        try:
            raw_issues = await self.engine.run(url, self.options)
        except EngineError as e:
            logger.error("Analysis of %s failed: %s %s", url, e.category, e.message)
            return self._failure(url, e.category, e.message, start_time)
        except Exception as e:
            logger.exception("Engine crashed while analysing %s", url)
            return self._failure(url, type(e).__name__, str(e), start_time)

        logger.info(
            "Found %d issues across %d codes for %s",
            len(raw_issues), len({i.code for i in raw_issues}), url,
        )

        counts = tally_counts(raw_issues)
        result, issues = await asyncio.gather(
            asyncio.to_thread(score, counts),
            asyncio.to_thread(normalize, raw_issues, self.taxonomy),
        )
        summary = summarize(issues, self.taxonomy)

        return AuditResponse(
            url=url,
            standard=self.standard_label,
            counts=counts,
            result=result,
            issues=issues,
            summary=summary,
            meta=AuditMeta(
                total_issues_found=len(raw_issues),
                unique_issue_types=len(issues),
                worst_offenders=worst_offenders(issues),
            ),
            timestamp=_now(),
            analysis_time_ms=int((time.time() - start_time) * 1000),
        )

    def _failure(self, url: str, category: str, message: str, start_time: float) -> AuditFailure:
        return AuditFailure(
            url=url,
            category=category,
            message=message,
            timestamp=_now(),
            analysis_time_ms=int((time.time() - start_time) * 1000),
            hint=FAILURE_HINT,
        )

    async def handle_request(self, payload) -> tuple[int, dict]:
        """Serve an ``{"url": ...}`` request body; returns (HTTP status, JSON body)."""
        url = payload.get("url") if isinstance(payload, dict) else None
        try:
            result = await self.run_audit(url)
        except InvalidURLError as e:
            return 400, {"success": False, "error": str(e)}
        except AuditBusyError as e:
            return 503, {"success": False, "error": str(e)}

        if isinstance(result, AuditFailure):
            return 500, result.to_dict()
        return 200, result.to_dict()


def audit_url(url: str, config: Optional[AuditConfig] = None) -> Union[AuditResponse, AuditFailure]:
    """Run a complete accessibility audit on a URL.

    Args:
        url: The URL to audit
        config: Engine, limits and translation settings (defaults if omitted)

    Returns:
        AuditResponse, or AuditFailure if the engine could not audit the page
    """
    auditor = Auditor.from_config(config)
    return asyncio.run(auditor.run_audit(url))

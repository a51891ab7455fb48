"""Interface to the external accessibility-testing engine."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..config import DEFAULT_CHROME_ARGS, DEFAULT_USER_AGENT, EngineConfig
from ..errors import EngineError
from ..models import RawIssue


_ERROR_LINE = re.compile(r"\b((?:[A-Z][A-Za-z]*)?(?:Error|Exception)):\s*(.*)")


@dataclass(frozen=True)
class EngineOptions:
    """Fixed configuration passed to the engine for every audit."""
    standard: str = "WCAG2AA"
    include_warnings: bool = True
    include_notices: bool = True
    timeout_ms: int = 60000
    wait_ms: int = 1000
    user_agent: str = DEFAULT_USER_AGENT
    chrome_args: tuple[str, ...] = field(default_factory=lambda: tuple(DEFAULT_CHROME_ARGS))
    ignore_https_errors: bool = True

    @classmethod
    def from_config(cls, cfg: EngineConfig) -> "EngineOptions":
        return cls(
            standard=cfg.standard,
            timeout_ms=cfg.timeout_ms,
            wait_ms=cfg.wait_ms,
            user_agent=cfg.user_agent,
            chrome_args=tuple(cfg.chrome_args),
            ignore_https_errors=cfg.ignore_https_errors,
        )

    def to_dict(self) -> dict:
        return {
            "standard": self.standard,
            "includeWarnings": self.include_warnings,
            "includeNotices": self.include_notices,
            "timeout": self.timeout_ms,
            "wait": self.wait_ms,
            "chromeLaunchConfig": {
                "args": list(self.chrome_args),
                "ignoreHTTPSErrors": self.ignore_https_errors,
            },
            "headers": {"User-Agent": self.user_agent},
        }


class AuditEngine(ABC):
    """Base class for engine backends."""

    name: str

    @abstractmethod
    async def run(self, url: str, options: EngineOptions) -> list[RawIssue]:
        """Audit ``url`` and return the raw issues.

        Raises EngineError on any failure.
        """

    def is_configured(self) -> bool:
        return True


def parse_issues(data) -> list[RawIssue]:
    """Parse engine JSON output (a list of issues or ``{"issues": [...]}``)."""
    if isinstance(data, dict):
        data = data.get("issues")
    if not isinstance(data, list):
        raise EngineError("InvalidOutput", "engine output is not a list of issues")
    return [RawIssue.from_dict(item) for item in data if isinstance(item, dict)]


def categorize_failure(text: str, default: str = "EngineCrash") -> EngineError:
    """Build an EngineError from error text such as ``TimeoutError: ...``."""
    text = (text or "").strip()
    if not text:
        return EngineError(default, "engine failed without output")

    for line in text.splitlines():
        match = _ERROR_LINE.search(line)
        if match:
            category, message = match.group(1), match.group(2).strip() or line.strip()
            if category in ("Error", "Exception"):
                inner = _ERROR_LINE.search(message)
                if inner and inner.group(1) not in ("Error", "Exception"):
                    category, message = inner.group(1), inner.group(2).strip() or message
                elif "net::ERR_" in message:
                    category = "NavigationError"
                else:
                    category = default
            return EngineError(category, message)

    first = text.splitlines()[0].strip()
    if "net::ERR_" in text:
        return EngineError("NavigationError", first)
    return EngineError(default, first)

"""External testing engine backends."""

from ..config import EngineConfig
from .base import AuditEngine, EngineOptions, categorize_failure, parse_issues
from .pa11y import Pa11yEngine
from .remote import RemoteEngine


def get_engine(cfg: EngineConfig) -> AuditEngine:
    """Build the engine backend selected in the config."""
    if cfg.backend == "remote":
        return RemoteEngine(cfg.remote_url)
    return Pa11yEngine(cfg.command)


__all__ = [
    "AuditEngine",
    "EngineOptions",
    "Pa11yEngine",
    "RemoteEngine",
    "categorize_failure",
    "get_engine",
    "parse_issues",
]

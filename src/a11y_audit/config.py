from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field
import tomllib


CONFIG_ENV = "A11Y_AUDIT_CONFIG"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/116.0.0.0 Safari/537.36"
)

DEFAULT_CHROME_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]


class EngineConfig(BaseModel):
    backend: Literal["pa11y", "remote"] = "pa11y"
    command: List[str] = Field(default_factory=lambda: ["npx", "pa11y"])
    remote_url: Optional[str] = None
    standard: str = "WCAG2AA"
    standard_label: str = "WCAG 2.1 AA (pa11y: WCAG2AA)"
    timeout_ms: int = Field(default=60000, gt=0)
    wait_ms: int = Field(default=1000, ge=0)
    user_agent: str = DEFAULT_USER_AGENT
    chrome_args: List[str] = Field(default_factory=lambda: list(DEFAULT_CHROME_ARGS))
    ignore_https_errors: bool = True


class LimitsConfig(BaseModel):
    max_concurrent: int = Field(default=2, ge=1)
    max_queued: int = Field(default=8, ge=0)


class TranslationsConfig(BaseModel):
    dictionary_path: Optional[str] = None


class AuditConfig(BaseModel):
    engine: EngineConfig = Field(default_factory=EngineConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    translations: TranslationsConfig = Field(default_factory=TranslationsConfig)
    log_level: str = "INFO"


def default_config() -> AuditConfig:
    return AuditConfig()


def load_config(path: str | Path | None = None) -> AuditConfig:
    """Load configuration from TOML file.

    Falls back to the file named by ``A11Y_AUDIT_CONFIG`` and then to the
    built-in defaults.
    """
    path = path or os.getenv(CONFIG_ENV)
    if not path:
        return default_config()
    data = tomllib.loads(Path(path).read_text(encoding="utf-8"))
    return AuditConfig.model_validate(data)

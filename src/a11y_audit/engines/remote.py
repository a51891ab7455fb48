"""Backend that delegates audits to a sidecar service over HTTP."""

import logging
from typing import Optional

import httpx

from ..errors import EngineError
from ..models import RawIssue
from .base import AuditEngine, EngineOptions, categorize_failure, parse_issues


logger = logging.getLogger(__name__)

# Extra time on top of the engine's navigation timeout for the round-trip.
GRACE_SECONDS = 30.0


class RemoteEngine(AuditEngine):
    """Posts ``{url, options}`` to ``<base_url>/run`` and reads the issues back.

    The service is expected to answer with ``{"issues": [...]}`` or a bare
    list in pa11y's JSON format.
    """

    name = "remote"

    def __init__(self, base_url: Optional[str], transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = (base_url or "").rstrip("/")
        self.transport = transport

    def is_configured(self) -> bool:
        return bool(self.base_url)

    async def run(self, url: str, options: EngineOptions) -> list[RawIssue]:
        if not self.is_configured():
            raise EngineError("EngineNotFound", "engine.remote_url not set")

        timeout = options.timeout_ms / 1000 + GRACE_SECONDS
        payload = {"url": url, "options": options.to_dict()}
        logger.debug("Posting audit for %s to %s", url, self.base_url)

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                response = await client.post(f"{self.base_url}/run", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise EngineError("TimeoutError", f"Timeout after {timeout:.0f}s") from e
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            if detail:
                raise categorize_failure(detail, default="HTTPError") from e
            raise EngineError("HTTPError", f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise EngineError("NetworkError", f"Request failed: {e}") from e
        except ValueError as e:
            raise EngineError("InvalidOutput", f"engine service returned non-JSON output: {e}") from e

        return parse_issues(data)


def _error_detail(response: httpx.Response) -> str:
    """Pull ``{"error": "..."}`` out of a failed service response, if present."""
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return ""

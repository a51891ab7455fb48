"""pa11y command-line backend."""

import asyncio
import json
import logging
import os
import tempfile
from typing import Sequence

from ..errors import EngineError
from ..models import RawIssue
from .base import AuditEngine, EngineOptions, categorize_failure, parse_issues


logger = logging.getLogger(__name__)

# Extra time on top of pa11y's own navigation timeout for browser start-up.
GRACE_SECONDS = 30.0

# 0: no issues, 2: issues found. Anything else is a failure.
SUCCESS_EXIT_CODES = (0, 2)


class Pa11yEngine(AuditEngine):
    """Runs ``pa11y --reporter json`` in a subprocess."""

    name = "pa11y"

    def __init__(self, command: Sequence[str] = ("npx", "pa11y"), grace_seconds: float = GRACE_SECONDS):
        self.command = list(command)
        self.grace_seconds = grace_seconds

    def build_args(self, url: str, options: EngineOptions, config_path: str) -> list[str]:
        args = self.command + [
            "--reporter", "json",
            "--standard", options.standard,
            "--timeout", str(options.timeout_ms),
            "--wait", str(options.wait_ms),
            "--config", config_path,
        ]
        if options.include_warnings:
            args.append("--include-warnings")
        if options.include_notices:
            args.append("--include-notices")
        args.append(url)
        return args

    @staticmethod
    def launch_config(options: EngineOptions) -> dict:
        """Settings the CLI only accepts through a config file."""
        return {
            "chromeLaunchConfig": {
                "args": list(options.chrome_args),
                "ignoreHTTPSErrors": options.ignore_https_errors,
            },
            "headers": {"User-Agent": options.user_agent},
        }

    async def run(self, url: str, options: EngineOptions) -> list[RawIssue]:
        fd, config_path = tempfile.mkstemp(prefix="pa11y-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self.launch_config(options), fh)
            args = self.build_args(url, options, config_path)
            stdout, stderr, returncode = await self._execute(args, options)
        finally:
            try:
                os.unlink(config_path)
            except OSError:
                logger.debug("Could not remove pa11y config %s", config_path)

        if returncode not in SUCCESS_EXIT_CODES:
            raise categorize_failure(stderr or stdout)

        try:
            data = json.loads(stdout) if stdout.strip() else []
        except json.JSONDecodeError as e:
            raise EngineError("InvalidOutput", f"pa11y returned non-JSON output: {e}") from e
        return parse_issues(data)

    async def _execute(self, args: list[str], options: EngineOptions) -> tuple[str, str, int]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise EngineError("EngineNotFound", f"{args[0]} not found") from e

        deadline = options.timeout_ms / 1000 + self.grace_seconds
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=deadline)
        except asyncio.TimeoutError as e:
            await _terminate(proc)
            raise EngineError("TimeoutError", f"pa11y did not finish within {deadline:.0f}s") from e
        except BaseException:
            # cancelled: the browser must not outlive the audit
            await _terminate(proc)
            raise

        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
            proc.returncode,
        )


async def _terminate(proc) -> None:
    """Kill a still-running pa11y process and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            logger.debug("pa11y process already exited")
    await asyncio.shield(proc.wait())

"""Lighthouse CLI runner.

Lighthouse is driven as a subprocess attached to an already-running
browser through ``--port``. Both report formats are written into a
scratch directory, read back, and returned as text; persistence is the
caller's job.
"""

import asyncio
import json
import logging
import re
import tempfile
from pathlib import Path
from typing import Any

from ..core.errors import LighthouseError
from ..core.types import EngineOutput, LighthouseSettings

logger = logging.getLogger(__name__)

_RUNTIME_ERROR_RE = re.compile(r"Runtime error encountered:\s*(.+)")
STDERR_TAIL_CHARS = 500


def build_lighthouse_config(settings: LighthouseSettings, timeout_seconds: int) -> dict[str, Any]:
    """Build the Lighthouse config document for one audit.

    Args:
        settings: Engine settings
        timeout_seconds: Page load budget

    Returns:
        Config suitable for ``--config-path``
    """
    emulation = settings.screen_emulation
    throttling = settings.throttling
    return {
        "extends": "lighthouse:default",
        "settings": {
            "onlyCategories": [c.lighthouse_id for c in settings.categories],
            "formFactor": settings.form_factor,
            "screenEmulation": {
                "mobile": emulation.mobile,
                "width": emulation.width,
                "height": emulation.height,
                "deviceScaleFactor": emulation.device_scale_factor,
                "disabled": emulation.disabled,
            },
            "locale": settings.locale,
            "throttlingMethod": settings.throttling_method,
            "throttling": {
                "rttMs": throttling.rtt_ms,
                "throughputKbps": throttling.throughput_kbps,
                "cpuSlowdownMultiplier": throttling.cpu_slowdown_multiplier,
            },
            "maxWaitForLoad": timeout_seconds * 1000,
            "disableStorageReset": settings.disable_storage_reset,
            "skipAboutBlank": settings.skip_about_blank,
        },
    }


def extract_category_scores(lhr: dict[str, Any]) -> dict[str, float | None]:
    """Pull ``{category_id: score}`` out of a Lighthouse result."""
    categories = lhr.get("categories") or {}
    scores: dict[str, float | None] = {}
    for category_id, category in categories.items():
        score = category.get("score") if isinstance(category, dict) else None
        scores[category_id] = float(score) if isinstance(score, (int, float)) else None
    return scores


class LighthouseRunner:
    """Runs the Lighthouse CLI against a browser's debugging port."""

    def __init__(self, settings: LighthouseSettings, grace_seconds: float = 30.0):
        """Initialize runner.

        Args:
            settings: Engine settings
            grace_seconds: Time allowed beyond the page load budget before the
                engine process is killed
        """
        self.settings = settings
        self.grace_seconds = grace_seconds

    def build_command(
        self,
        url: str,
        port: int,
        config_path: Path,
        output_base: Path,
        timeout_seconds: int,
    ) -> list[str]:
        command = [
            self.settings.binary,
            url,
            f"--port={port}",
            "--output=json",
            "--output=html",
            f"--output-path={output_base}",
            f"--config-path={config_path}",
            f"--max-wait-for-load={timeout_seconds * 1000}",
            f"--locale={self.settings.locale}",
        ]
        if self.settings.log_level in ("silent", "error"):
            command.append("--quiet")
        elif self.settings.log_level == "verbose":
            command.append("--verbose")
        return command

    async def audit(self, url: str, port: int, timeout_seconds: int) -> EngineOutput:
        """Audit ``url`` using the browser listening on ``port``.

        Args:
            url: Page to audit
            port: Browser remote debugging port
            timeout_seconds: Page load budget

        Returns:
            Both report documents and the category scores

        Raises:
            LighthouseError: Engine missing, failed, or produced no usable report
            TimeoutError: Engine exceeded ``timeout_seconds + grace_seconds``
        """
        with tempfile.TemporaryDirectory(prefix="lighthouse-batch-") as tmp:
            workdir = Path(tmp)
            config_path = workdir / "config.json"
            config_path.write_text(
                json.dumps(build_lighthouse_config(self.settings, timeout_seconds)),
                encoding="utf-8",
            )
            output_dir = workdir / "out"
            output_dir.mkdir()

            command = self.build_command(
                url, port, config_path, output_dir / "audit", timeout_seconds
            )
            logger.debug(f"Running: {' '.join(command)}")

            returncode, stderr = await self._run(command, timeout_seconds + self.grace_seconds)
            return self._collect(url, output_dir, returncode, stderr)

    async def _run(self, command: list[str], limit: float) -> tuple[int, str]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise LighthouseError(f"Lighthouse binary not found: {command[0]}") from e

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=limit)
        except asyncio.TimeoutError as e:
            await self._kill(proc)
            raise TimeoutError(f"Lighthouse did not finish within {limit:.0f}s") from e
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        return proc.returncode or 0, stderr.decode("utf-8", errors="replace")

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()

    def _collect(self, url: str, output_dir: Path, returncode: int, stderr: str) -> EngineOutput:
        json_files = sorted(output_dir.glob("*.json"))
        html_files = sorted(output_dir.glob("*.html"))

        lhr: dict[str, Any] | None = None
        structured_doc = ""
        if json_files:
            structured_doc = json_files[0].read_text(encoding="utf-8")
            try:
                lhr = json.loads(structured_doc)
            except json.JSONDecodeError as e:
                raise LighthouseError(f"Unreadable Lighthouse report for {url}: {e}") from e

        runtime_error = (lhr or {}).get("runtimeError") or {}
        if runtime_error.get("code") == "NO_ERROR":
            runtime_error = {}
        if runtime_error.get("code") or returncode != 0:
            raise LighthouseError(
                self._failure_message(returncode, stderr, runtime_error),
                code=runtime_error.get("code"),
            )

        if lhr is None or not html_files:
            raise LighthouseError(f"Lighthouse produced no report for {url}")

        return EngineOutput(
            structured_doc=structured_doc,
            rendered_doc=html_files[0].read_text(encoding="utf-8"),
            category_scores=extract_category_scores(lhr),
        )

    @staticmethod
    def _failure_message(returncode: int, stderr: str, runtime_error: dict[str, Any]) -> str:
        if runtime_error.get("message"):
            return str(runtime_error["message"])
        match = _RUNTIME_ERROR_RE.search(stderr)
        if match:
            return match.group(1).strip()
        tail = stderr.strip()[-STDERR_TAIL_CHARS:]
        return f"Lighthouse exited with code {returncode}" + (f": {tail}" if tail else "")

"""Shared test helpers."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any

from lighthouse_batch.core.types import AuditResult, Category, EngineOutput

DEFAULT_FRACTIONS = {
    "performance": 0.9,
    "accessibility": 0.95,
    "best-practices": 1.0,
    "seo": 0.88,
}


def make_engine_output(**overrides: Any) -> EngineOutput:
    """Create an EngineOutput; scores default to 90/95/100/88."""
    defaults: dict[str, Any] = {
        "structured_doc": '{"lighthouseVersion": "12.0.0"}',
        "rendered_doc": "<html><body>report</body></html>",
        "category_scores": dict(DEFAULT_FRACTIONS),
    }
    defaults.update(overrides)
    return EngineOutput(**defaults)


def make_success(url: str, scores: tuple[int, int, int, int] = (90, 95, 100, 88)) -> AuditResult:
    return AuditResult(url=url, scores=dict(zip(Category, scores)))


class FakeLauncher:
    """Stands in for ChromeLauncher and counts launches and kills."""

    def __init__(self, fail_with: Exception | None = None, port: int = 9222) -> None:
        self.fail_with = fail_with
        self.port = port
        self.launches = 0
        self.kills = 0

    @asynccontextmanager
    async def launch(self) -> AsyncIterator[SimpleNamespace]:
        if self.fail_with is not None:
            raise self.fail_with
        self.launches += 1
        try:
            yield SimpleNamespace(port=self.port)
        finally:
            self.kills += 1


class FakeRunner:
    """Stands in for LighthouseRunner.

    Each call consumes the next scripted outcome; the last one repeats.
    An outcome is an EngineOutput to return or an exception to raise.
    """

    def __init__(self, outcomes: list[EngineOutput | Exception] | None = None) -> None:
        self.outcomes = list(outcomes or [make_engine_output()])
        self.calls: list[tuple[str, int, int]] = []

    async def audit(self, url: str, port: int, timeout_seconds: int) -> EngineOutput:
        self.calls.append((url, port, timeout_seconds))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeAdapter:
    """Stands in for AuditEngineAdapter.

    ``scripts`` maps a URL to outcomes consumed one per attempt (last one
    repeats): an AuditResult to return or an exception to raise. Unscripted
    URLs succeed. ``delays`` maps a URL to seconds to sleep before answering.
    """

    def __init__(
        self,
        scripts: dict[str, list[AuditResult | Exception]] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.scripts = {url: list(items) for url, items in (scripts or {}).items()}
        self.delays = delays or {}
        self.calls: list[str] = []
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def run(self, url: str, timeout_seconds: int) -> AuditResult:
        self.calls.append(url)
        self.events.append(("start", url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if url in self.delays:
                await asyncio.sleep(self.delays[url])
            script = self.scripts.get(url)
            if not script:
                return make_success(url)
            outcome = script.pop(0) if len(script) > 1 else script[0]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1
            self.events.append(("end", url))

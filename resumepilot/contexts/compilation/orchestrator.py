"""
Compilation orchestration.

Sequences the compilation tiers for one markup source:

    Init -> ValidatingMarkup -> AttemptingOriginal -> AttemptingSimplified
         -> ParsingFallback -> RenderingFallback -> Done

Tiers run strictly one after another; within a tier the enabled engines are
tried in configured order, each racing its own deadline, until the tier
budget is spent. Worst-case latency is therefore the sum of the tier budgets
plus parse and render time.

CompilationPipeline.compile() never raises. It always returns a
CompilationResult carrying a document: the typeset PDF, the fallback preview,
or an error notice.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, List, Optional

import httpx
from loguru import logger

from resumepilot.contexts.compilation.logger import (
    _log_info,
    _log_warning,
    log_attempt_outcome,
    log_compilation_result,
    log_compilation_start,
    log_state,
    log_tier_attempt,
)
from resumepilot.contexts.compilation.simplifier import simplify
from resumepilot.contexts.compilation.typesetting_client import EngineAttempt, TypesettingClient
from resumepilot.contexts.compilation.validator import validate
from resumepilot.contexts.parsing.parser import parse
from resumepilot.contexts.rendering.fallback_renderer import render, render_notice
from resumepilot.utils.pdf_processing import page_count
from resumepilot.utils.settings import PipelineSettings, load_pipeline_settings

FALLBACK_WARNING = "Remote typesetting unavailable; showing an approximate preview"


class CompilationState(str, Enum):
    INIT = "init"
    VALIDATING_MARKUP = "validating_markup"
    ATTEMPTING_ORIGINAL = "attempting_original"
    ATTEMPTING_SIMPLIFIED = "attempting_simplified"
    PARSING_FALLBACK = "parsing_fallback"
    RENDERING_FALLBACK = "rendering_fallback"
    DONE = "done"


@dataclass
class CompilationResult:
    """
    Result of one pipeline run.

    Attributes:
        success: Whether a usable document was produced (typeset or fallback preview)
        document: PDF bytes; always set (error notice when success is False)
        errors: Validation or internal errors
        warnings: Fallback, remote and truncation warnings
        logs: State transitions and attempt outcomes, in order
        tier: "original", "simplified", "fallback" or "notice"
        engine_id: Engine that produced the document (typeset tiers only)
        page_count: Pages in the document (None if unreadable)
        elapsed_s: Wall time of the run
    """

    success: bool
    document: Optional[bytes] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)
    tier: Optional[str] = None
    engine_id: Optional[str] = None
    page_count: Optional[int] = None
    elapsed_s: float = 0.0


class CompilationPipeline:
    """
    Tiered compilation of resume markup.

    One pipeline may serve many concurrent compile() calls; each call keeps
    its own state and the only shared object is the HTTP connection pool.

    Args:
        settings: Loaded pipeline settings
        client: Typesetting client (owned by the caller)
    """

    def __init__(self, settings: PipelineSettings, client: TypesettingClient):
        self.settings = settings
        self.client = client

    async def compile(self, source: str) -> CompilationResult:
        """
        Compile markup to a document.

        Args:
            source: Markup text

        Returns:
            CompilationResult (never raises)
        """
        start_time = time.monotonic()
        logs: List[str] = []
        self._transition(CompilationState.INIT, logs)
        log_compilation_start(len(source), [engine.id for engine in self.settings.enabled_engines])

        try:
            result = await self._run(source, logs)
        except Exception as e:
            logger.exception("[compile] Unexpected failure, returning error notice")
            errors = [f"Internal error: {type(e).__name__}: {e}"]
            result = CompilationResult(
                success=False, document=render_notice(errors), errors=errors, tier="notice"
            )

        self._transition(CompilationState.DONE, logs)
        result.logs = logs
        result.elapsed_s = time.monotonic() - start_time
        result.page_count = page_count(result.document) if result.document else None
        log_compilation_result(result)
        return result

    async def _run(self, source: str, logs: List[str]) -> CompilationResult:
        self._transition(CompilationState.VALIDATING_MARKUP, logs)
        outcome = validate(source)
        if not outcome.ok:
            for error in outcome.errors:
                _log_warning(f"Validation: {error}")
            return CompilationResult(
                success=False,
                document=render_notice(outcome.errors),
                errors=outcome.errors,
                tier="notice",
            )

        attempts: List[EngineAttempt] = []

        self._transition(CompilationState.ATTEMPTING_ORIGINAL, logs)
        success = await self._run_tier(
            "original", source, self.settings.original_deadline_s, logs, attempts
        )
        if success:
            return self._typeset_result("original", success)

        self._transition(CompilationState.ATTEMPTING_SIMPLIFIED, logs)
        simplified = simplify(source)
        if simplified != source:
            success = await self._run_tier(
                "simplified", simplified, self.settings.simplified_deadline_s, logs, attempts
            )
            if success:
                return self._typeset_result("simplified", success)
        else:
            logs.append("simplified: no changes, tier skipped")
            _log_info("Simplification made no changes, skipping simplified tier")

        self._transition(CompilationState.PARSING_FALLBACK, logs)
        model = parse(source)

        self._transition(CompilationState.RENDERING_FALLBACK, logs)
        rendered = render(model, self.settings.fallback)

        warnings = [FALLBACK_WARNING]
        for attempt in attempts:
            warnings.extend(f"{attempt.engine_id}: {err}" for err in attempt.remote_errors)
        warnings.extend(rendered.warnings)

        return CompilationResult(
            success=True, document=rendered.document, warnings=warnings, tier="fallback"
        )

    async def _run_tier(
        self,
        tier: str,
        source: str,
        budget_s: float,
        logs: List[str],
        attempts: List[EngineAttempt],
    ) -> Optional[EngineAttempt]:
        """
        Try enabled engines in order until one succeeds or the budget is spent.

        Returns:
            The successful EngineAttempt, or None
        """
        tier_deadline = time.monotonic() + budget_s
        for engine in self.settings.enabled_engines:
            remaining = tier_deadline - time.monotonic()
            if remaining <= 0:
                logs.append(f"{tier}: budget of {budget_s:.1f}s exhausted")
                _log_warning(f"[{tier}] Budget of {budget_s:.1f}s exhausted")
                break

            deadline_s = remaining
            if engine.attempt_timeout_s is not None:
                deadline_s = min(remaining, engine.attempt_timeout_s)

            log_tier_attempt(tier, engine.id, deadline_s)
            attempt = await self.client.attempt_with_diagnostics(source, engine, deadline_s)
            attempts.append(attempt)
            log_attempt_outcome(tier, attempt)

            if attempt.succeeded:
                logs.append(f"{tier}: {engine.id} succeeded ({attempt.elapsed_s:.2f}s)")
                return attempt
            logs.append(f"{tier}: {engine.id} failed: {attempt.reason}")

        return None

    @staticmethod
    def _typeset_result(tier: str, attempt: EngineAttempt) -> CompilationResult:
        return CompilationResult(
            success=True, document=attempt.document, tier=tier, engine_id=attempt.engine_id
        )

    @staticmethod
    def _transition(state: CompilationState, logs: List[str]) -> None:
        logs.append(f"state: {state.value}")
        log_state(state)


@asynccontextmanager
async def open_pipeline(
    settings: PipelineSettings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> AsyncIterator[CompilationPipeline]:
    """
    Open a pipeline together with the typesetting client it owns.

    Example:
        settings = load_pipeline_settings()
        async with open_pipeline(settings) as pipeline:
            result = await pipeline.compile(markup)
    """
    async with TypesettingClient(settings, transport=transport) as client:
        yield CompilationPipeline(settings, client)


def compile_markup(source: str, settings: Optional[PipelineSettings] = None) -> CompilationResult:
    """
    Synchronous entry point: compile markup in a fresh event loop.

    Args:
        source: Markup text
        settings: Pipeline settings (loaded from the default config if None)

    Returns:
        CompilationResult
    """
    if settings is None:
        settings = load_pipeline_settings()

    async def _compile() -> CompilationResult:
        async with open_pipeline(settings) as pipeline:
            return await pipeline.compile(source)

    return asyncio.run(_compile())

"""
Compilation context logger.

Provides logging interface for compilation context with automatic [compile] prefix.
All compilation modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from resumepilot.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[compile]"


def setup_compilation_logger(
    log_dir: Optional[Path] = None, engines: List[str] = None, console_level: str = "INFO"
) -> Optional[Path]:
    """
    Setup logger for compilation context.

    Configures loguru with provenance tracking and compilation-specific context.

    Args:
        log_dir: Directory for this compilation session (None for console only)
        engines: Enabled engine ids, recorded in the provenance header
        console_level: Minimum level shown on the console

    Returns:
        Path to log file, or None when logging to console only

    Example:
        from resumepilot.contexts.compilation.logger import setup_compilation_logger

        log_file = setup_compilation_logger(log_dir, engines=["latexonline-pdflatex"])
    """
    return _setup_logger(
        context_name="compile",
        log_dir=log_dir,
        extra_provenance={
            "Engines": ", ".join(engines or []) or "none",
            "LaTeX compiler": os.getenv("LATEX_COMPILER"),
        },
        console_level=console_level,
    )


# Wrapper functions with automatic [compile] prefix


def _log_info(message: str) -> None:
    """Log info message with [compile] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [compile] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [compile] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [compile] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [compile] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level compilation-specific logging helpers


def log_compilation_start(source_length: int, engines: List[str]) -> None:
    """Log start of a pipeline run."""
    _log_info(f"Starting compilation ({source_length} chars)")
    _log_debug(f"  Engines: {', '.join(engines) or 'none'}")


def log_state(state) -> None:
    """Log a state machine transition."""
    _log_debug(f"State -> {state.value}")


def log_tier_attempt(tier: str, engine_id: str, deadline_s: float) -> None:
    """Log one engine attempt inside a tier."""
    _log_info(f"[{tier}] Trying {engine_id} (deadline {deadline_s:.1f}s)")


def log_attempt_outcome(tier: str, attempt) -> None:
    """
    Log the outcome of one engine attempt.

    Args:
        tier: Tier name ("original" or "simplified")
        attempt: EngineAttempt from the typesetting client
    """
    if attempt.document is not None:
        _log_success(
            f"[{tier}] {attempt.engine_id} returned {len(attempt.document)} bytes "
            f"({attempt.elapsed_s:.2f}s)"
        )
        return

    _log_warning(f"[{tier}] {attempt.engine_id} failed: {attempt.reason} ({attempt.elapsed_s:.2f}s)")
    for i, err in enumerate(attempt.remote_errors[:5], 1):
        _log_debug(f"  Remote error {i}: {err}")


def log_remote_body(engine_id: str, body: str) -> None:
    """Dump a non-document response body at debug level."""
    # opt(raw=True) keeps multi-line service output readable
    logger.opt(raw=True).debug(
        f"\n{'=' * 80}\n{engine_id.upper()} RESPONSE:\n{'=' * 80}\n{body}\n"
    )


def log_compilation_result(result, verbose: bool = False) -> None:
    """
    Log compilation result with diagnostics.

    Args:
        result: CompilationResult from the pipeline
        verbose: Show every warning/error instead of the first few
    """
    if result.success:
        _log_success(
            f"Compilation succeeded via {result.tier}"
            + (f" ({result.engine_id})" if result.engine_id else "")
            + f": {len(result.document)} bytes, {result.page_count or '?'} page(s) "
            f"({result.elapsed_s:.2f}s)"
        )
    else:
        _log_error(f"Compilation failed: {len(result.errors)} errors ({result.elapsed_s:.2f}s)")
        error_limit = 10 if verbose else 5
        for i, err in enumerate(result.errors[:error_limit], 1):
            _log_error(f"  Error {i}: {err}")
        if len(result.errors) > error_limit:
            _log_error(f"  ... and {len(result.errors) - error_limit} more errors")

    if result.warnings:
        _log_warning(f"{len(result.warnings)} warnings")
        warning_limit = 10 if verbose else 3
        for i, warn in enumerate(result.warnings[:warning_limit], 1):
            _log_debug(f"  Warning {i}: {warn}")
        if len(result.warnings) > warning_limit:
            _log_debug(f"  ... and {len(result.warnings) - warning_limit} more warnings")

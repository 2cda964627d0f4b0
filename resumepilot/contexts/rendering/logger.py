"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
Sinks are configured by the process entry point (see utils.logger.setup_logger).
"""

from typing import Optional

from loguru import logger

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_truncation(message: str) -> None:
    """Log content dropped by the page budget."""
    _log_warning(f"Truncated: {message}")


def log_render_result(outcome, model_name: Optional[str]) -> None:
    """
    Log the outcome of a fallback render.

    Args:
        outcome: RenderOutcome from render()
        model_name: Name shown in the header (None when unknown)
    """
    _log_success(f"Rendered fallback preview for {model_name or 'unknown name'}")
    _log_debug(f"  {len(outcome.document)} bytes, {len(outcome.warnings)} truncation warnings")

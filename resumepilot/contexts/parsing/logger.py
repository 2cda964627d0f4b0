"""
Parsing context logger.

Provides logging interface for parsing context with automatic [parse] prefix.
All parsing modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from resumepilot.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[parse]"


def setup_parsing_logger(log_dir: Optional[Path] = None, console_level: str = "INFO") -> Optional[Path]:
    """Setup logger for parsing context (console only when log_dir is None)."""
    return _setup_logger(context_name="parse", log_dir=log_dir, console_level=console_level)


# Wrapper functions with automatic [parse] prefix


def _log_info(message: str) -> None:
    """Log info message with [parse] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [parse] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [parse] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [parse] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level parsing-specific logging helpers


def log_heuristic_fallback(section_title: str, category: str) -> None:
    """Log that no structured pattern matched a section (informational, not an error)."""
    _log_info(f"No structured {category} entries in '{section_title}', using line heuristics")


def log_parse_result(model) -> None:
    """
    Log a summary of what the parser recovered.

    Args:
        model: ResumeModel from parse()
    """
    if model.is_empty():
        _log_warning("Nothing recognisable found in markup")
        return

    _log_success(f"Parsed resume for {model.name or 'unknown name'}")
    _log_debug(
        f"  experience={len(model.experience)} education={len(model.education)} "
        f"skills={len(model.skills)} projects={len(model.projects)} "
        f"achievements={len(model.achievements)} other={len(model.other_sections)}"
    )
    contact_fields = [name for name, _ in model.contact.items()]
    _log_debug(f"  contact: {', '.join(contact_fields) or 'none'}")

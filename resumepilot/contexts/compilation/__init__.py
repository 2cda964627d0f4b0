"""
Compilation Context

Responsibilities:
- Validates markup structure before any network call
- Rewrites markup for wider engine compatibility (simplification)
- Attempts remote and local typesetting engines under per-tier deadlines
- Sequences the tiers and falls back to the parsed preview when every engine fails

Owns: Markup validation, engine communication, tier orchestration, CompilationResult
Never: Parses resume content itself (delegates to the parsing context)
"""

from resumepilot.contexts.compilation.exceptions import MarkupValidationError, TransientServiceError
from resumepilot.contexts.compilation.orchestrator import (
    CompilationPipeline,
    CompilationResult,
    CompilationState,
    compile_markup,
    open_pipeline,
)
from resumepilot.contexts.compilation.simplifier import simplify
from resumepilot.contexts.compilation.typesetting_client import EngineAttempt, TypesettingClient
from resumepilot.contexts.compilation.validator import ValidationOutcome, validate

__all__ = [
    # Validation and simplification
    "validate",
    "ValidationOutcome",
    "simplify",
    # Engines
    "TypesettingClient",
    "EngineAttempt",
    # Orchestration
    "CompilationPipeline",
    "CompilationResult",
    "CompilationState",
    "open_pipeline",
    "compile_markup",
    # Errors
    "MarkupValidationError",
    "TransientServiceError",
]

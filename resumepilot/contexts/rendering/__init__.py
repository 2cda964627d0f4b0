"""
Rendering Context

Responsibilities:
- Draws a one-page approximate preview of a parsed resume when no engine typeset it
- Enforces the fallback page budget and reports every truncation
- Produces error-notice documents for markup that failed validation

Owns: Local PDF construction (reportlab)
Never: Parses markup or contacts typesetting engines
"""

from resumepilot.contexts.rendering.fallback_renderer import RenderOutcome, render, render_notice

__all__ = ["render", "render_notice", "RenderOutcome"]

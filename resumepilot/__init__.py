"""
ResumePilot - resume document compilation pipeline

Turns resume markup into a PDF by trying remote typesetting services under
time budgets, and falls back to a locally rendered approximation built from
a parsed resume model when every service fails.

Architecture:
- Compilation Context: validation, simplification, typesetting engines, tier orchestration
- Parsing Context: dialect-agnostic extraction of a resume model from markup
- Rendering Context: fallback PDF construction from the resume model
"""

__version__ = "0.1.0"

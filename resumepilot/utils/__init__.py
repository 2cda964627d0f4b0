"""
Shared utilities for ResumePilot.

Common functionality used across contexts:
- Text processing
- LaTeX helpers
- Settings loading
- Logger setup
- PDF inspection
"""

from resumepilot.utils.settings import (
    EngineSpec,
    FallbackLimits,
    PipelineSettings,
    load_pipeline_settings,
)

__all__ = ["EngineSpec", "FallbackLimits", "PipelineSettings", "load_pipeline_settings"]

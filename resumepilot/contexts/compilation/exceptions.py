"""Custom exceptions for the compilation context."""

from typing import List, Optional


class MarkupValidationError(ValueError):
    """
    Exception raised when markup fails structural validation.

    Attributes:
        errors: Every violation found (all checks run, none short-circuit)
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Markup validation failed:\n" + "\n".join(f"  - {e}" for e in self.errors))


class TransientServiceError(Exception):
    """
    Exception raised when a typesetting engine fails to produce a document.

    Covers bad status, wrong content type, undersized body and transport
    failures. Never leaves the typesetting client: attempts convert it into a
    None document plus a diagnostic record.

    Attributes:
        engine_id: Engine that failed
        reason: Short description of the failure
        remote_errors: LaTeX errors recovered from the response body, if any
    """

    def __init__(self, engine_id: str, reason: str, remote_errors: Optional[List[str]] = None):
        self.engine_id = engine_id
        self.reason = reason
        self.remote_errors = remote_errors or []
        super().__init__(f"{engine_id}: {reason}")

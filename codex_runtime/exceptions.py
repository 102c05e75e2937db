"""
Exception types for the codex runtime.

Decision functions never raise; these are reserved for the caller-facing
edges (loading a document, opting into strict validation).
"""

from typing import List, Optional


class CodexError(Exception):
    """Base class for codex runtime errors."""


class CodexValidationError(CodexError):
    """Raised when a codex document fails validation and the caller asked to abort."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class CodexLoadError(CodexError):
    """Raised when a codex document cannot be read or decoded."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not load codex from {path}: {reason}")
        self.path = path
        self.reason = reason

"""
Validation module for the codex runtime.

Provides schema and invariant validation for codex documents.
"""

from .codex_validator import (
    CodexValidationResult,
    CodexValidator,
    validate_codex,
    validate_codex_or_raise,
)

__all__ = [
    "CodexValidationResult",
    "CodexValidator",
    "validate_codex",
    "validate_codex_or_raise",
]

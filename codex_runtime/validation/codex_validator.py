"""
Codex Validator - Validates codex documents before a session uses them.

Structural problems (wrong types, malformed sections) are caught by the
pydantic models; semantic invariants (complete enumerations, version
agreement, required sections) are checked here. Failures are reported as
a list of strings and never raised: the caller decides whether to abort
or continue with best-effort defaults.
"""

import re
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from codex_runtime.exceptions import CodexValidationError
from codex_runtime.schemas.codex import Codex, Mode, ReflexProfileName, Stakes

SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+$")

REQUIRED_MODES = [Mode.DIRECT, Mode.CAREFUL, Mode.RECAP]
REQUIRED_STAKES = [Stakes.LOW, Stakes.MEDIUM, Stakes.HIGH]


class CodexValidationResult(BaseModel):
    """Result of validating a codex document."""

    ok: bool
    errors: List[str] = Field(default_factory=list)
    codex: Optional[Codex] = Field(
        None,
        description="Parsed document, present whenever parsing succeeded"
    )


def _format_pydantic_errors(exc: ValidationError) -> List[str]:
    """Flatten pydantic errors into "loc: message" strings."""
    messages = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        messages.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return messages


class CodexValidator:
    """Validates codex documents against the schema and its invariants."""

    def validate(self, document: Union[Codex, Mapping[str, Any]]) -> CodexValidationResult:
        """
        Validate a codex document.

        Args:
            document: Raw JSON mapping or an already-parsed Codex

        Returns:
            CodexValidationResult with ok flag, error strings and the parsed codex
        """
        if isinstance(document, Codex):
            codex = document
        else:
            if not isinstance(document, Mapping):
                return CodexValidationResult(
                    ok=False,
                    errors=[f"codex must be an object, got '{type(document).__name__}'"]
                )
            try:
                codex = Codex.model_validate(dict(document))
            except ValidationError as exc:
                return CodexValidationResult(ok=False, errors=_format_pydantic_errors(exc))

        errors = self.check_invariants(codex)
        return CodexValidationResult(ok=not errors, errors=errors, codex=codex)

    def check_invariants(self, codex: Codex) -> List[str]:
        """
        Check the semantic invariants of a parsed codex.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not SEMVER_RE.match(codex.codex_version):
            errors.append(f'codex_version must be semver (got "{codex.codex_version}")')

        required = codex.handshake_required_fields
        if required is None:
            errors.append("missing handshake_required_fields")
        else:
            for mode in REQUIRED_MODES:
                if mode not in required.mode:
                    errors.append(f'handshake.mode missing "{mode.value}"')
            for stakes in REQUIRED_STAKES:
                if stakes not in required.stakes:
                    errors.append(f'handshake.stakes missing "{stakes.value}"')
            if required.min_confidence.type != "number":
                errors.append("handshake.min_confidence.type must be 'number'")
            if list(required.min_confidence.range) != [0, 1]:
                errors.append("handshake.min_confidence.range must be [0,1]")
            if required.codex_version != codex.codex_version:
                errors.append(
                    f"handshake.codex_version ({required.codex_version}) must match "
                    f"codex_version ({codex.codex_version})"
                )

        if codex.handshake_defaults is None:
            errors.append("missing handshake_defaults")

        errors.extend(codex.missing_policy_entries())

        default_profile = codex.reflex_profiles.get(ReflexProfileName.DEFAULT)
        if default_profile is None or not default_profile.prioritization_order:
            errors.append("reflex_profiles.default.prioritization_order must not be empty")

        if codex.failure_semantics is None:
            errors.append("missing failure_semantics")
        if codex.telemetry is None:
            errors.append("missing telemetry")

        return errors

    def validate_or_raise(self, document: Union[Codex, Mapping[str, Any]]) -> Codex:
        """
        Validate a codex, raising CodexValidationError if invalid.

        Returns:
            The parsed Codex

        Raises:
            CodexValidationError: If validation fails
        """
        result = self.validate(document)
        if not result.ok:
            raise CodexValidationError(
                f"Codex validation failed: {'; '.join(result.errors)}",
                errors=result.errors
            )
        return result.codex


def validate_codex(document: Union[Codex, Mapping[str, Any]]) -> CodexValidationResult:
    """Convenience function to validate a codex document."""
    return CodexValidator().validate(document)


def validate_codex_or_raise(document: Union[Codex, Mapping[str, Any]]) -> Codex:
    """Convenience function to validate a codex document, raising on failure."""
    return CodexValidator().validate_or_raise(document)

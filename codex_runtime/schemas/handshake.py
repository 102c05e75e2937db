"""
Handshake Schemas - The effective policy in force for a session.

A handshake is derived from the codex and updated only through
validate_handshake, so every instance is fully valid.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .codex import CitePolicy, Mode, OmissionScan, ReflexProfileName, Stakes, normalize_mode


class HandshakeOptions(BaseModel):
    """Per-call overrides for build_handshake. Unset fields fall back to the codex."""

    mode: Optional[Mode] = None
    stakes: Optional[Stakes] = None
    min_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    cite_policy: Optional[CitePolicy] = None
    omission_scan: Optional[OmissionScan] = None
    reflex_profile: Optional[ReflexProfileName] = None

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_override_mode(cls, v: Any) -> Any:
        return normalize_mode(v)


class Handshake(BaseModel):
    """Concrete, resolved policy for the current session."""

    mode: Mode
    stakes: Stakes
    min_confidence: float = Field(..., ge=0.0, le=1.0)
    cite_policy: CitePolicy
    omission_scan: OmissionScan
    reflex_profile: ReflexProfileName
    codex_version: str

    def header(self) -> Dict[str, Any]:
        """JSON-shaped handshake header for logs, operators and downstream calls."""
        return self.model_dump(mode="json")

    def as_options(self) -> HandshakeOptions:
        """Re-express this handshake as build overrides."""
        return HandshakeOptions(**self.model_dump(exclude={"codex_version"}))


class HandshakeUpdateResult(BaseModel):
    """
    Outcome of validating a partial handshake update.

    Invalid values never fail the update: they are replaced by the previous
    valid value and reported in ignored_fields (field name -> rejected value).
    """

    ok: bool = True
    errors: List[str] = Field(default_factory=list)
    normalized: Handshake
    ignored_fields: Dict[str, Any] = Field(default_factory=dict)

    @property
    def has_ignored_fields(self) -> bool:
        return bool(self.ignored_fields)

"""
Codex Runtime Schemas - Data models for the codex document, handshakes and telemetry.

All policy documents are schema-validated before use.
"""

from .codex import (
    CitePolicy,
    Codex,
    ContextDecay,
    FailureSemantics,
    Mode,
    OmissionScan,
    ReflexProfileName,
    ReflexThreshold,
    Stakes,
    STAKES_RANK,
    TelemetrySettings,
)
from .handshake import Handshake, HandshakeOptions, HandshakeUpdateResult
from .telemetry import REDACTED_MARKER, TelemetryEvent, TelemetrySink

__all__ = [
    "CitePolicy",
    "Codex",
    "ContextDecay",
    "FailureSemantics",
    "Mode",
    "OmissionScan",
    "ReflexProfileName",
    "ReflexThreshold",
    "Stakes",
    "STAKES_RANK",
    "TelemetrySettings",
    "Handshake",
    "HandshakeOptions",
    "HandshakeUpdateResult",
    "REDACTED_MARKER",
    "TelemetryEvent",
    "TelemetrySink",
]

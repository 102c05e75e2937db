"""
Core services for the codex runtime.

These services hold the stateful edges around the pure rules:
- build_handshake / validate_handshake: effective policy resolution
- TelemetryEmitter / emit_telemetry_explicit: redacted event emission
- CodexSession: per-conversation context (codex, handshake, emitter)
"""

from codex_runtime.services.handshake_builder import build_handshake, validate_handshake
from codex_runtime.services.telemetry import (
    TelemetryEmitter,
    emit_telemetry_explicit,
    redact_payload,
    telemetry_active,
)
from codex_runtime.services.session import CodexSession

__all__ = [
    "build_handshake",
    "validate_handshake",
    "TelemetryEmitter",
    "emit_telemetry_explicit",
    "redact_payload",
    "telemetry_active",
    "CodexSession",
]

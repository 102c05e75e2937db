"""
Codex Runtime - configuration-driven policy engine for AI-assisted responses.

The codex document declares confidence floors, citation and omission-scan
defaults, reflex orderings and thresholds, context decay limits, failure
semantics and telemetry settings. The runtime resolves those into a
per-session handshake and answers small policy questions about each
request. It performs no text analysis and calls no model.
"""

from codex_runtime.domain import (
    ContextAge,
    FailureKind,
    classify_failure,
    context_expired,
    decide_citation,
    enforce_confidence,
    failure_text,
    gate_reflex_scores,
    get_reflex_order,
    should_run_omission_scan,
    should_trigger_reflex,
)
from codex_runtime.exceptions import CodexError, CodexLoadError, CodexValidationError
from codex_runtime.loader import load_codex, load_codex_document
from codex_runtime.schemas import Codex, Handshake, TelemetryEvent
from codex_runtime.services import (
    CodexSession,
    TelemetryEmitter,
    build_handshake,
    emit_telemetry_explicit,
    validate_handshake,
)
from codex_runtime.validation import validate_codex

__version__ = "0.9.0"

__all__ = [
    "ContextAge",
    "FailureKind",
    "classify_failure",
    "context_expired",
    "decide_citation",
    "enforce_confidence",
    "failure_text",
    "gate_reflex_scores",
    "get_reflex_order",
    "should_run_omission_scan",
    "should_trigger_reflex",
    "CodexError",
    "CodexLoadError",
    "CodexValidationError",
    "load_codex",
    "load_codex_document",
    "Codex",
    "Handshake",
    "TelemetryEvent",
    "CodexSession",
    "TelemetryEmitter",
    "build_handshake",
    "emit_telemetry_explicit",
    "validate_handshake",
    "validate_codex",
]

"""
Shared pytest fixtures for codex runtime tests.
"""

import json
import pytest
from datetime import datetime, timezone
from typing import Any, Dict, List

from codex_runtime.loader import bundled_codex_path
from codex_runtime.schemas.codex import Codex
from codex_runtime.schemas.telemetry import TelemetryEvent


# ============================================================================
# CODEX FIXTURES
# ============================================================================

@pytest.fixture
def codex_document() -> Dict[str, Any]:
    """Fresh raw copy of the bundled reference codex (safe to mutate)."""
    return json.loads(bundled_codex_path().read_text(encoding="utf-8"))


@pytest.fixture
def codex(codex_document) -> Codex:
    """Parsed reference codex.

    Floors: low 0.45, medium 0.60, high 0.75. Mode defaults: direct 0.55,
    careful 0.70, recap 0.60. Failure thresholds: hedge 0.4, refuse 0.2.
    """
    return Codex.model_validate(codex_document)


@pytest.fixture
def minimal_codex_document() -> Dict[str, Any]:
    """Smallest valid codex: no optional sections."""
    return {
        "codex_version": "1.2.3",
        "handshake_required_fields": {
            "mode": ["direct", "careful", "recap"],
            "stakes": ["low", "medium", "high"],
            "min_confidence": {"type": "number", "range": [0, 1]},
            "codex_version": "1.2.3",
        },
        "handshake_defaults": {},
        "modes": {
            "direct": {"min_confidence_default": 0.5},
            "careful": {"min_confidence_default": 0.7},
            "recap": {"min_confidence_default": 0.6},
        },
        "stakes_policy": {
            "low": {"cite_policy_default": "off", "omission_scan_default": False, "min_confidence_floor": 0.3},
            "medium": {"cite_policy_default": "auto", "omission_scan_default": "auto", "min_confidence_floor": 0.5},
            "high": {"cite_policy_default": "force", "omission_scan_default": True, "min_confidence_floor": 0.8},
        },
        "context_decay": {
            "max_turns_without_recap": 5,
            "max_tokens_since_recap": 1000,
            "on_expire": "recap",
        },
        "reflex_profiles": {
            "default": {"prioritization_order": ["hallucination"]},
        },
        "reflex_thresholds": {
            "hallucination": {"trigger_at": 0.5},
        },
        "failure_semantics": {
            "refuse": {"ui_failover_text": "Cannot answer.", "action": "offer_alternatives"},
            "hedge": {"ui_failover_text": "Not sure.", "action": "show_confidence_and_next_steps"},
            "ask_clarify": {"ui_failover_text": "Clarify?", "action": "prompt_for_disambiguation"},
        },
        "telemetry": {"emit_events": True},
    }


@pytest.fixture
def minimal_codex(minimal_codex_document) -> Codex:
    """Parsed minimal codex."""
    return Codex.model_validate(minimal_codex_document)


# ============================================================================
# TELEMETRY FIXTURES
# ============================================================================

@pytest.fixture
def fixed_clock():
    """Clock returning a constant UTC timestamp."""
    moment = datetime(2025, 1, 15, 10, 0, 0, tzinfo=timezone.utc)
    return lambda: moment


@pytest.fixture
def captured_events() -> List[TelemetryEvent]:
    """List that a sink can append events to."""
    return []

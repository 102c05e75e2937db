"""
Pure decision rules for the codex runtime.

- policy_rules: citation, omission scan, confidence floor
- reflex_rules: reflex ordering and score gating
- context_decay: recap thresholds
- failure_semantics: ok / hedge / refuse classification
"""

from .context_decay import ContextAge, context_expired, mode_after_decay
from .failure_semantics import FailureKind, FailureText, FailureTextKind, classify_failure, failure_text
from .policy_rules import (
    decide_citation,
    enforce_confidence,
    should_require_citations,
    should_run_omission_scan,
)
from .reflex_rules import (
    ReflexDecision,
    ReflexGateResult,
    gate_reflex_scores,
    get_reflex_order,
    rank_stakes,
    should_trigger_reflex,
)

__all__ = [
    "ContextAge",
    "context_expired",
    "mode_after_decay",
    "FailureKind",
    "FailureText",
    "FailureTextKind",
    "classify_failure",
    "failure_text",
    "decide_citation",
    "enforce_confidence",
    "should_require_citations",
    "should_run_omission_scan",
    "ReflexDecision",
    "ReflexGateResult",
    "gate_reflex_scores",
    "get_reflex_order",
    "rank_stakes",
    "should_trigger_reflex",
]

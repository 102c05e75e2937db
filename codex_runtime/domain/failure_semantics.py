"""
Failure semantics.

Maps a final confidence onto ok / hedge / refuse and looks up the
user-facing text for each failure kind. Boundary values resolve to the
more cautious category.
"""

from enum import Enum
from typing import Union

from pydantic import BaseModel

from codex_runtime.schemas.codex import Codex

DEFAULT_HEDGE_THRESHOLD = 0.4
DEFAULT_REFUSE_THRESHOLD = 0.2

# Used when the codex declares no failure_semantics
DEFAULT_FAILURE_TEXTS = {
    "refuse": ("I can't answer this reliably.", "offer_alternatives"),
    "hedge": ("I'm not fully confident in this answer.", "show_confidence_and_next_steps"),
    "ask_clarify": ("Could you clarify what you mean?", "prompt_for_disambiguation"),
}


class FailureKind(str, Enum):
    """Outcome of classify_failure."""
    OK = "ok"
    HEDGE = "hedge"
    REFUSE = "refuse"


class FailureTextKind(str, Enum):
    """Kinds with user-facing text. ASK_CLARIFY is raised by the caller, never classified."""
    REFUSE = "refuse"
    HEDGE = "hedge"
    ASK_CLARIFY = "ask_clarify"


class FailureText(BaseModel):
    """Text and follow-up action shown for a failure kind."""

    text: str
    action: str


def classify_failure(codex: Codex, confidence: float) -> FailureKind:
    """
    Classify a confidence value.

    Example:
        >>> classify_failure(codex, 0.33)
        <FailureKind.HEDGE: 'hedge'>
    """
    semantics = codex.failure_semantics
    hedge_threshold = DEFAULT_HEDGE_THRESHOLD
    refuse_threshold = DEFAULT_REFUSE_THRESHOLD
    if semantics is not None:
        if semantics.hedge_threshold is not None:
            hedge_threshold = semantics.hedge_threshold
        if semantics.refuse_threshold is not None:
            refuse_threshold = semantics.refuse_threshold

    if confidence <= refuse_threshold:
        return FailureKind.REFUSE
    if confidence <= hedge_threshold:
        return FailureKind.HEDGE
    return FailureKind.OK


def failure_text(codex: Codex, kind: Union[FailureTextKind, str]) -> FailureText:
    """User-facing text and action for refuse, hedge or ask_clarify."""
    kind = FailureTextKind(kind).value
    if codex.failure_semantics is None:
        text, action = DEFAULT_FAILURE_TEXTS[kind]
        return FailureText(text=text, action=action)

    message = getattr(codex.failure_semantics, kind)
    return FailureText(text=message.ui_failover_text, action=message.action)

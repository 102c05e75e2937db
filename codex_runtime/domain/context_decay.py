"""
Context decay rules.

Threshold checks on the caller-maintained counters of turns and tokens
since the last recap.
"""

from typing import Union

from pydantic import BaseModel, Field

from codex_runtime.schemas.codex import Codex, Mode


class ContextAge(BaseModel):
    """Counters owned and incremented by the caller."""

    turns_since_recap: int = Field(0, ge=0)
    tokens_since_recap: int = Field(0, ge=0)


def context_expired(codex: Codex, age: ContextAge) -> bool:
    """True once either counter meets or exceeds its configured limit."""
    decay = codex.context_decay
    return (
        age.turns_since_recap >= decay.turn_limit
        or age.tokens_since_recap >= decay.token_limit
    )


def mode_after_decay(codex: Codex, age: ContextAge, current_mode: Union[Mode, str]) -> Mode:
    """Mode to use next: the codex fallback once context expired, else unchanged."""
    if context_expired(codex, age):
        return codex.context_decay.on_expire
    return Mode(current_mode)

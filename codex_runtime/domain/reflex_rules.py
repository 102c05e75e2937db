"""
Reflex scheduling rules.

Orders named safety checks by profile priority and gates externally
supplied scores against the codex thresholds. Cooldowns declared in the
codex are advisory data for the caller; nothing here tracks time.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

from codex_runtime.schemas.codex import Codex, ReflexProfileName, Stakes, STAKES_RANK

ScoreFeed = Union[Mapping[str, float], Iterable[Tuple[str, float]]]


class ReflexDecision(BaseModel):
    """Trigger/block outcome for one reflex score."""

    trigger: bool = False
    block: bool = False


class ReflexGateResult(BaseModel):
    """Outcome of gating a whole score feed."""

    triggered: List[str] = Field(default_factory=list, description="Triggered ids in profile order")
    blocked_by: Optional[str] = Field(None, description="First reflex over its block threshold")
    blocked_score: Optional[float] = None
    decisions: Dict[str, ReflexDecision] = Field(default_factory=dict)

    @property
    def is_blocked(self) -> bool:
        return self.blocked_by is not None


def rank_stakes(stakes: Union[Stakes, str]) -> int:
    """Numeric rank of a stakes tier (low=0, medium=1, high=2)."""
    return STAKES_RANK[Stakes(stakes)]


def get_reflex_order(codex: Codex, profile: Union[ReflexProfileName, str]) -> List[str]:
    """
    Reflex ids in the profile's declared order, keeping only ids with thresholds.

    Example:
        >>> get_reflex_order(codex, "lenient")
        ['hallucination', 'omission', 'vagueness']
    """
    try:
        declared = codex.reflex_profiles.get(ReflexProfileName(profile))
    except ValueError:
        return []
    if declared is None:
        return []
    return [rid for rid in declared.prioritization_order if rid in codex.reflex_thresholds]


def should_trigger_reflex(
    codex: Codex,
    reflex_id: str,
    score: float,
    stakes: Union[Stakes, str]
) -> ReflexDecision:
    """
    Decide whether a reflex triggers and whether it blocks output.

    Unknown reflexes never trigger. A reflex suppressed below a stakes tier
    is silent while the current stakes ranks strictly below that tier.
    """
    threshold = codex.reflex_thresholds.get(reflex_id)
    if threshold is None:
        return ReflexDecision()

    if (
        threshold.suppress_below_stakes is not None
        and rank_stakes(stakes) < rank_stakes(threshold.suppress_below_stakes)
    ):
        return ReflexDecision()

    trigger = score >= threshold.trigger_at
    block = threshold.block_if_over is not None and score >= threshold.block_if_over
    return ReflexDecision(trigger=trigger, block=block)


def gate_reflex_scores(
    codex: Codex,
    scores: ScoreFeed,
    stakes: Union[Stakes, str],
    profile: Union[ReflexProfileName, str] = ReflexProfileName.DEFAULT
) -> ReflexGateResult:
    """
    Gate a feed of (reflex_id, score) pairs from external detectors.

    The first pair (feed order) over its block threshold is reported as
    blocked_by. Triggered reflexes are ordered by profile position, then by
    score descending; ids absent from the profile sort last.

    Args:
        codex: Codex document
        scores: Mapping or iterable of (reflex_id, score) pairs
        stakes: Current stakes tier
        profile: Reflex profile to order by

    Returns:
        ReflexGateResult
    """
    pairs = list(scores.items()) if isinstance(scores, Mapping) else list(scores)

    result = ReflexGateResult()
    triggered_scores: Dict[str, float] = {}

    for reflex_id, score in pairs:
        decision = should_trigger_reflex(codex, reflex_id, score, stakes)
        result.decisions[reflex_id] = decision
        if decision.block and result.blocked_by is None:
            result.blocked_by = reflex_id
            result.blocked_score = score
        if decision.trigger:
            triggered_scores[reflex_id] = max(score, triggered_scores.get(reflex_id, score))

    order = get_reflex_order(codex, profile)
    position = {rid: i for i, rid in enumerate(order)}
    unranked = len(order)

    result.triggered = sorted(
        triggered_scores,
        key=lambda rid: (position.get(rid, unranked), -triggered_scores[rid])
    )
    return result

"""
Policy decision rules.

Small pure predicates consulted per request: whether citations are
mandatory, whether an omission scan must run, and the effective
confidence floor.

CRITICAL: All decision logic must be deterministic and total over a valid codex.
"""

from typing import Optional, Union

from codex_runtime.schemas.codex import CitePolicy, Codex, Mode, OmissionScan, Stakes
from codex_runtime.schemas.handshake import Handshake

# Under "auto", medium/high stakes answers below this confidence must cite
AUTO_CITE_CONFIDENCE = 0.85


def decide_citation(
    codex: Codex,
    stakes: Union[Stakes, str],
    confidence: float,
    external_claim: bool,
    cite_policy: Union[CitePolicy, str]
) -> bool:
    """
    Decide whether a response must carry citations.

    Args:
        codex: Codex document
        stakes: Current stakes tier
        confidence: Confidence of the response (0.0-1.0)
        external_claim: Whether the response asserts facts from outside the conversation
        cite_policy: Handshake cite policy

    Returns:
        True if citations are required

    Example:
        >>> decide_citation(codex, "high", 0.82, True, "auto")
        True
    """
    stakes = Stakes(stakes)
    cite_policy = CitePolicy(cite_policy)

    if cite_policy == CitePolicy.FORCE:
        return True
    if cite_policy == CitePolicy.OFF:
        # "off" only fully suppresses citation at low stakes
        return stakes != Stakes.LOW

    if external_claim:
        return True
    hooks = codex.citation_hooks
    if hooks is not None and stakes in hooks.require_for_stakes:
        return True
    if stakes in (Stakes.MEDIUM, Stakes.HIGH) and confidence < AUTO_CITE_CONFIDENCE:
        return True

    return False


def should_require_citations(codex: Codex, handshake: Handshake) -> bool:
    """
    Session-level citation check from the handshake alone.

    Unlike decide_citation this has no per-response inputs: "auto" only
    requires citations when the stakes tier is hooked.
    """
    if handshake.cite_policy == CitePolicy.FORCE:
        return True
    if handshake.cite_policy == CitePolicy.OFF:
        return False
    hooks = codex.citation_hooks
    if hooks is None:
        return False
    return Stakes(handshake.stakes) in hooks.require_for_stakes


def should_run_omission_scan(
    codex: Codex,
    stakes: Union[Stakes, str],
    omission_scan: OmissionScan
) -> bool:
    """
    Decide whether the omission scan must run.

    An explicit boolean passes through. "auto" resolves per stakes tier and
    currently resolves to True for every tier, low included.
    """
    if isinstance(omission_scan, bool):
        return omission_scan
    stakes = Stakes(stakes)
    return stakes in (Stakes.HIGH, Stakes.MEDIUM, Stakes.LOW)


def enforce_confidence(
    codex: Codex,
    stakes: Union[Stakes, str],
    requested_min: Optional[float],
    mode: Union[Mode, str]
) -> float:
    """
    Resolve the effective minimum confidence.

    The stakes floor always wins over a lower requested value; an unset
    request falls back to the mode default.

    Returns:
        max(stakes floor, requested_min or mode default)
    """
    floor = codex.stakes_entry(stakes).min_confidence_floor
    if requested_min is None:
        requested_min = codex.mode_policy(mode).min_confidence_default
    return max(floor, requested_min)

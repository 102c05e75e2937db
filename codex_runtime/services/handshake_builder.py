"""
Handshake Builder Service.

Resolves per-call overrides against the codex into one concrete
handshake, and normalizes partial updates so the current handshake is
never left half-applied.

Resolution order per field: explicit override -> codex handshake_defaults
-> hard-coded fallback (or stakes-tier default for cite_policy and
omission_scan).
"""

from typing import Any, Dict, Mapping, Optional, Union

from codex_runtime.domain.policy_rules import enforce_confidence
from codex_runtime.schemas.codex import (
    CitePolicy,
    Codex,
    HandshakeDefaults,
    Mode,
    ReflexProfileName,
    Stakes,
    normalize_mode,
)
from codex_runtime.schemas.handshake import Handshake, HandshakeOptions, HandshakeUpdateResult

FALLBACK_MODE = Mode.CAREFUL
FALLBACK_STAKES = Stakes.MEDIUM
FALLBACK_REFLEX_PROFILE = ReflexProfileName.DEFAULT

# Handshake fields with an enumerated domain
ENUM_FIELDS = {
    "mode": Mode,
    "stakes": Stakes,
    "cite_policy": CitePolicy,
    "reflex_profile": ReflexProfileName,
}


def build_handshake(
    codex: Codex,
    overrides: Optional[Union[HandshakeOptions, Mapping[str, Any]]] = None
) -> Handshake:
    """
    Build a handshake from codex policies and optional overrides.

    The stakes floor always wins over a lower requested min_confidence.

    Args:
        codex: Codex document
        overrides: HandshakeOptions or a mapping of its fields

    Returns:
        Fully resolved Handshake

    Raises:
        pydantic.ValidationError: If a mapping override holds an out-of-domain value.
            Use validate_handshake for untrusted input.

    Example:
        >>> build_handshake(codex, {"stakes": "high"}).min_confidence
        0.75
    """
    if overrides is None:
        overrides = HandshakeOptions()
    elif not isinstance(overrides, HandshakeOptions):
        overrides = HandshakeOptions.model_validate(dict(overrides))

    defaults = codex.handshake_defaults or HandshakeDefaults()

    mode = overrides.mode or defaults.mode or FALLBACK_MODE
    stakes = overrides.stakes or defaults.stakes or FALLBACK_STAKES
    stakes_policy = codex.stakes_entry(stakes)

    requested = overrides.min_confidence
    if requested is None:
        requested = defaults.min_confidence
    min_confidence = enforce_confidence(codex, stakes, requested, mode)

    cite_policy = overrides.cite_policy or defaults.cite_policy or stakes_policy.cite_policy_default

    omission_scan = overrides.omission_scan
    if omission_scan is None:
        omission_scan = defaults.omission_scan
    if omission_scan is None:
        omission_scan = stakes_policy.omission_scan_default

    reflex_profile = overrides.reflex_profile or defaults.reflex_profile or FALLBACK_REFLEX_PROFILE

    return Handshake(
        mode=mode,
        stakes=stakes,
        min_confidence=min_confidence,
        cite_policy=cite_policy,
        omission_scan=omission_scan,
        reflex_profile=reflex_profile,
        codex_version=codex.codex_version,
    )


def _coerce_enum(enum_cls, value: Any) -> Optional[Any]:
    """Return the enum member for value, or None when outside the domain."""
    if enum_cls is Mode:
        value = normalize_mode(value)
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _is_valid_confidence(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and 0.0 <= value <= 1.0
    )


def validate_handshake(
    codex: Codex,
    partial: Mapping[str, Any],
    current: Optional[Handshake] = None
) -> HandshakeUpdateResult:
    """
    Validate and normalize a partial handshake update.

    Any value outside its domain is replaced by the previous valid value
    and listed in ignored_fields. Fields not named in the update keep the
    previous value; min_confidence is re-enforced against the resolved
    stakes floor. Unknown keys are ignored and reported.

    Args:
        codex: Codex document
        partial: Raw update (e.g., from a UI control or request header)
        current: Handshake in force; the codex defaults when None

    Returns:
        HandshakeUpdateResult with the normalized handshake
    """
    base = build_handshake(
        codex,
        current.as_options() if current is not None else None
    )
    ignored: Dict[str, Any] = {}
    resolved: Dict[str, Any] = {}

    for field, enum_cls in ENUM_FIELDS.items():
        value = base_value = getattr(base, field)
        if partial.get(field) is not None:
            value = _coerce_enum(enum_cls, partial[field])
            if value is None:
                ignored[field] = partial[field]
                value = base_value
        resolved[field] = value

    omission_scan = base.omission_scan
    if "omission_scan" in partial and partial["omission_scan"] is not None:
        candidate = partial["omission_scan"]
        if isinstance(candidate, bool) or candidate == "auto":
            omission_scan = candidate
        else:
            ignored["omission_scan"] = candidate

    requested = base.min_confidence
    if partial.get("min_confidence") is not None:
        if _is_valid_confidence(partial["min_confidence"]):
            requested = float(partial["min_confidence"])
        else:
            ignored["min_confidence"] = partial["min_confidence"]

    for key in partial:
        if key not in ENUM_FIELDS and key not in ("omission_scan", "min_confidence", "codex_version"):
            ignored[key] = partial[key]

    normalized = Handshake(
        mode=resolved["mode"],
        stakes=resolved["stakes"],
        min_confidence=enforce_confidence(codex, resolved["stakes"], requested, resolved["mode"]),
        cite_policy=resolved["cite_policy"],
        omission_scan=omission_scan,
        reflex_profile=resolved["reflex_profile"],
        codex_version=codex.codex_version,
    )

    return HandshakeUpdateResult(ok=True, errors=[], normalized=normalized, ignored_fields=ignored)

"""
Codex Schemas - Typed model of the codex configuration document.

The codex is the versioned policy document that declares every default and
threshold the runtime consults. It is loaded once per session and treated
as immutable (models are frozen).

Sections whose absence is a validation finding (required-fields, defaults,
per-mode and per-stakes entries, reflex profiles, failure semantics,
telemetry) are optional here so an incomplete document still parses and
the validator can report everything wrong with it at once.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator


class Mode(str, Enum):
    """Response modes."""
    DIRECT = "direct"
    CAREFUL = "careful"
    RECAP = "recap"


class Stakes(str, Enum):
    """Stakes tiers, ordered low < medium < high."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CitePolicy(str, Enum):
    """Citation policies."""
    AUTO = "auto"
    FORCE = "force"
    OFF = "off"


class ReflexProfileName(str, Enum):
    """Named reflex orderings."""
    DEFAULT = "default"
    STRICT = "strict"
    LENIENT = "lenient"


# Explicit on/off, or "auto" to resolve per stakes tier
OmissionScan = Union[StrictBool, Literal["auto"]]

STAKES_RANK: Dict[Stakes, int] = {
    Stakes.LOW: 0,
    Stakes.MEDIUM: 1,
    Stakes.HIGH: 2,
}


def normalize_mode(value: Any) -> Any:
    """Accept flag-style mode names ("--careful") as bare names ("careful")."""
    if isinstance(value, str) and value.startswith("--"):
        return value[2:]
    return value


class CodexModel(BaseModel):
    """Base for codex sections: immutable once parsed."""

    model_config = ConfigDict(frozen=True)


# ============================================================================
# COMPATIBILITY
# ============================================================================

class LLMTarget(CodexModel):
    """A model family the codex was written against."""

    name: str
    min_version: str
    notes: Optional[str] = None


class CompatMatrix(CodexModel):
    """Informational compatibility matrix. Not enforced."""

    min_app_semver: str
    min_node: str
    min_typescript: Optional[str] = None
    supported_ui_layers: List[str] = Field(default_factory=list)
    ui_components: List[str] = Field(default_factory=list)
    llm_targets: List[LLMTarget] = Field(default_factory=list)


# ============================================================================
# HANDSHAKE CONTRACT
# ============================================================================

class ConfidenceRange(CodexModel):
    """Declared numeric domain of min_confidence."""

    type: str = "number"
    range: List[float] = Field(default_factory=lambda: [0.0, 1.0])


class HandshakeRequiredFields(CodexModel):
    """Enumerated domains every handshake field must fall within."""

    mode: List[Mode] = Field(default_factory=list)
    stakes: List[Stakes] = Field(default_factory=list)
    min_confidence: ConfidenceRange = Field(default_factory=ConfidenceRange)
    cite_policy: List[CitePolicy] = Field(default_factory=lambda: list(CitePolicy))
    omission_scan: List[OmissionScan] = Field(default_factory=lambda: ["auto", True, False])
    reflex_profile: List[ReflexProfileName] = Field(default_factory=lambda: list(ReflexProfileName))
    codex_version: str

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_modes(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [normalize_mode(m) for m in v]
        return v


class HandshakeDefaults(CodexModel):
    """Values a session boots with. Any field may be left to policy fallbacks."""

    mode: Optional[Mode] = None
    stakes: Optional[Stakes] = None
    min_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    cite_policy: Optional[CitePolicy] = None
    omission_scan: Optional[OmissionScan] = None
    reflex_profile: Optional[ReflexProfileName] = None

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_default_mode(cls, v: Any) -> Any:
        return normalize_mode(v)


# ============================================================================
# MODE AND STAKES POLICY
# ============================================================================

class ModePolicy(CodexModel):
    """Per-mode behaviour."""

    description: str = ""
    qualifier_frequency: Literal["low", "medium", "high"] = "medium"
    min_confidence_default: float = Field(..., ge=0.0, le=1.0)
    drift_alerts: Literal["minimal", "normal", "eager"] = "normal"


class StakesPolicy(CodexModel):
    """Per-stakes defaults and the confidence floor for the tier."""

    cite_policy_default: CitePolicy
    omission_scan_default: OmissionScan
    min_confidence_floor: float = Field(..., ge=0.0, le=1.0)


# ============================================================================
# CITATIONS AND CONTEXT
# ============================================================================

class CitationPolicy(CodexModel):
    """Free-form rule descriptions. Documentation only."""

    auto_rules: List[Any] = Field(default_factory=list)
    force_rules: List[Any] = Field(default_factory=list)
    off_rules: List[Any] = Field(default_factory=list)


class CitationHooks(CodexModel):
    """Fast-path citation rules consulted by the decision functions."""

    require_for_stakes: List[Stakes] = Field(default_factory=list)
    anchor_required: bool = False
    log_missing_context: bool = False


class ContextDecay(CodexModel):
    """Limits after which accumulated conversation state must be summarized."""

    max_turns_without_recap: int = Field(..., ge=0)
    max_tokens_since_recap: int = Field(..., ge=0)
    on_expire: Mode

    # Mirrors kept for older documents; take precedence when present
    force_recap_after_turns: Optional[int] = Field(None, ge=0)
    force_recap_after_tokens: Optional[int] = Field(None, ge=0)

    @field_validator("on_expire", mode="before")
    @classmethod
    def normalize_on_expire(cls, v: Any) -> Any:
        return normalize_mode(v)

    @property
    def turn_limit(self) -> int:
        if self.force_recap_after_turns is not None:
            return self.force_recap_after_turns
        return self.max_turns_without_recap

    @property
    def token_limit(self) -> int:
        if self.force_recap_after_tokens is not None:
            return self.force_recap_after_tokens
        return self.max_tokens_since_recap


# ============================================================================
# REFLEXES
# ============================================================================

class ReflexCooldowns(CodexModel):
    """Advisory cooldowns. The runtime performs no timing."""

    global_ms: int = Field(0, ge=0)
    per_reflex_ms: int = Field(0, ge=0)


class ReflexProfile(CodexModel):
    """A named priority ordering of reflex ids."""

    prioritization_order: List[str] = Field(default_factory=list)
    cooldowns: ReflexCooldowns = Field(default_factory=ReflexCooldowns)


class ReflexPrioritization(CodexModel):
    """Optional co-fire and tie-breaking hints for callers."""

    cofire_allowed: List[str] = Field(default_factory=list)
    cooldowns: Dict[str, int] = Field(default_factory=dict)
    tiebreakers: List[Literal["confidence", "priority", "recency"]] = Field(default_factory=list)


class ReflexThreshold(CodexModel):
    """Trigger/block thresholds for one reflex."""

    trigger_at: float = Field(..., ge=0.0, le=1.0)
    block_if_over: Optional[float] = Field(None, ge=0.0, le=1.0)
    suppress_below_stakes: Optional[Stakes] = None


# ============================================================================
# FAILURE SEMANTICS AND TELEMETRY
# ============================================================================

class FailureMessage(CodexModel):
    """User-facing text and follow-up action for one failure kind."""

    ui_failover_text: str
    action: str


class FailureSemantics(CodexModel):
    """Confidence thresholds plus the text shown for each failure kind."""

    hedge_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    refuse_threshold: Optional[float] = Field(None, ge=0.0, le=1.0)
    ui_component: Optional[str] = None

    refuse: FailureMessage
    hedge: FailureMessage
    ask_clarify: FailureMessage


class TelemetrySettings(CodexModel):
    """Telemetry gate and redaction list."""

    enabled: Optional[bool] = None
    emit_events: bool
    redact_fields: List[str] = Field(default_factory=list)
    fields: List[str] = Field(default_factory=list)

    @property
    def active(self) -> bool:
        """Events flow only when not disabled and emission is switched on."""
        return self.enabled is not False and self.emit_events


# ============================================================================
# DOCUMENT
# ============================================================================

class Codex(CodexModel):
    """
    The codex configuration document.

    Example:
        >>> codex = Codex.model_validate(json.loads(path.read_text()))
        >>> codex.stakes_policy[Stakes.HIGH].min_confidence_floor
        0.75
    """

    codex_version: str
    codex_date: Optional[str] = None
    description: str = ""

    compat_matrix: Optional[CompatMatrix] = None

    handshake_required_fields: Optional[HandshakeRequiredFields] = None
    handshake_defaults: Optional[HandshakeDefaults] = None

    modes: Dict[Mode, ModePolicy] = Field(default_factory=dict)
    stakes_policy: Dict[Stakes, StakesPolicy] = Field(default_factory=dict)

    citation_policy: Optional[CitationPolicy] = None
    citation_hooks: Optional[CitationHooks] = None

    context_decay: ContextDecay

    reflex_profiles: Dict[ReflexProfileName, ReflexProfile] = Field(default_factory=dict)
    reflex_prioritization: Optional[ReflexPrioritization] = None
    reflex_thresholds: Dict[str, ReflexThreshold] = Field(default_factory=dict)

    failure_semantics: Optional[FailureSemantics] = None
    telemetry: Optional[TelemetrySettings] = None

    @field_validator("modes", mode="before")
    @classmethod
    def normalize_mode_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {normalize_mode(k): policy for k, policy in v.items()}
        return v

    def mode_policy(self, mode: Union[Mode, str]) -> ModePolicy:
        """Policy entry for a mode."""
        return self.modes[Mode(normalize_mode(mode))]

    def stakes_entry(self, stakes: Union[Stakes, str]) -> StakesPolicy:
        """Policy entry for a stakes tier."""
        return self.stakes_policy[Stakes(stakes)]

    def missing_policy_entries(self) -> List[str]:
        """Mode and stakes tiers with no policy entry; a handshake cannot be resolved without them."""
        missing = [f'modes missing "{mode.value}"' for mode in Mode if mode not in self.modes]
        missing.extend(
            f'stakes_policy missing "{stakes.value}"'
            for stakes in Stakes
            if stakes not in self.stakes_policy
        )
        return missing

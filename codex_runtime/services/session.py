"""
Codex Session Service.

Holds the codex, the current handshake and the telemetry emitter for one
conversation. Every call site receives its session explicitly; there is
no module-level codex or handshake, so independent sessions can run
concurrently. Handshake commits are serialized by a per-session lock.
"""

import threading
from typing import Any, Mapping, Optional, Union

from codex_runtime.config import settings
from codex_runtime.domain.context_decay import ContextAge, context_expired, mode_after_decay
from codex_runtime.domain.policy_rules import should_require_citations
from codex_runtime.domain.reflex_rules import ReflexGateResult, ScoreFeed, gate_reflex_scores
from codex_runtime.exceptions import CodexValidationError
from codex_runtime.logging import get_logger
from codex_runtime.schemas.codex import Codex
from codex_runtime.schemas.handshake import Handshake, HandshakeOptions, HandshakeUpdateResult
from codex_runtime.schemas.telemetry import TelemetrySink
from codex_runtime.services.handshake_builder import build_handshake, validate_handshake
from codex_runtime.services.telemetry import TelemetryEmitter
from codex_runtime.validation.codex_validator import validate_codex

logger = get_logger(__name__)

HANDSHAKE_UPDATE_EVENT = "handshake.update"


class CodexSession:
    """
    Per-conversation runtime context.

    Example:
        >>> session = CodexSession.open(load_codex_document())
        >>> session.set_handshake({"cite_policy": "force", "min_confidence": 0.75})
        >>> session.handshake.header()["cite_policy"]
        'force'
    """

    def __init__(
        self,
        codex: Codex,
        handshake: Optional[Handshake] = None,
        emitter: Optional[TelemetryEmitter] = None
    ):
        """
        Initialize a session around an already-parsed codex.

        Args:
            codex: Codex document
            handshake: Starting handshake; built from codex defaults when None
            emitter: Telemetry emitter; one bound to the codex when None
        """
        self.codex = codex
        self.emitter = emitter or TelemetryEmitter(codex)
        self._lock = threading.Lock()
        self._handshake = handshake or build_handshake(codex)
        logger.handshake_built(self._handshake.header())

    @classmethod
    def open(
        cls,
        document: Union[Codex, Mapping[str, Any]],
        sink: Optional[TelemetrySink] = None,
        strict: Optional[bool] = None
    ) -> "CodexSession":
        """
        Validate a codex document and open a session on it.

        Validation errors are logged and the session proceeds best-effort,
        unless strict (default: settings.strict_validation) is set.

        Raises:
            CodexValidationError: If strict and the document is invalid, if
                the document could not be parsed at all, or if a mode or
                stakes tier has no policy entry
        """
        if strict is None:
            strict = settings.strict_validation

        result = validate_codex(document)
        if not result.ok:
            version = result.codex.codex_version if result.codex is not None else None
            logger.codex_invalid(result.errors, codex_version=version)
            if strict or result.codex is None:
                raise CodexValidationError(
                    f"Codex validation failed: {'; '.join(result.errors)}",
                    errors=result.errors
                )
            missing = result.codex.missing_policy_entries()
            if missing:
                raise CodexValidationError(
                    f"Codex cannot resolve a handshake: {'; '.join(missing)}",
                    errors=missing
                )

        return cls(result.codex, emitter=TelemetryEmitter(result.codex, sink=sink))

    @property
    def handshake(self) -> Handshake:
        """The handshake currently in force."""
        return self._handshake

    def build(self, overrides: Optional[Union[HandshakeOptions, Mapping[str, Any]]] = None) -> Handshake:
        """Build a handshake against this session's codex without committing it."""
        return build_handshake(self.codex, overrides)

    def validate_update(self, partial: Mapping[str, Any]) -> HandshakeUpdateResult:
        """Normalize a partial update against the current handshake without committing it."""
        return validate_handshake(self.codex, partial, current=self._handshake)

    def set_handshake(self, partial: Mapping[str, Any]) -> HandshakeUpdateResult:
        """
        Commit a partial handshake update.

        Emits a handshake.update telemetry event with the new header.

        Returns:
            HandshakeUpdateResult; ignored_fields lists coerced values
        """
        with self._lock:
            result = validate_handshake(self.codex, partial, current=self._handshake)
            self._handshake = result.normalized

        header = result.normalized.header()
        if result.ignored_fields:
            logger.handshake_fields_ignored(result.ignored_fields)
        logger.handshake_updated(header)
        self.emitter.emit(HANDSHAKE_UPDATE_EVENT, {"handshake": header})
        return result

    def should_require_citations(self) -> bool:
        """Session-level citation requirement from the current handshake."""
        return should_require_citations(self.codex, self._handshake)

    def gate_reflexes(self, scores: ScoreFeed) -> ReflexGateResult:
        """Gate an external score feed under the current stakes and reflex profile."""
        handshake = self._handshake
        result = gate_reflex_scores(self.codex, scores, handshake.stakes, handshake.reflex_profile)
        if result.blocked_by is not None:
            logger.reflex_blocked(result.blocked_by, result.blocked_score, handshake.stakes.value)
        return result

    def check_context(self, age: ContextAge) -> bool:
        """
        Check context decay; on expiry switch the handshake to the fallback mode.

        Returns:
            True if the context expired
        """
        if not context_expired(self.codex, age):
            return False

        fallback = mode_after_decay(self.codex, age, self._handshake.mode)
        logger.context_expired(age.turns_since_recap, age.tokens_since_recap, fallback.value)
        if fallback != self._handshake.mode:
            self.set_handshake({"mode": fallback})
        return True

    def emit(self, name: str, payload: Optional[Mapping[str, Any]] = None):
        """Emit a telemetry event through this session's emitter."""
        return self.emitter.emit(name, payload)

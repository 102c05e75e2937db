"""
Telemetry Emitter Service.

Two distinct emission paths:
- TelemetryEmitter.emit: bound to a session's codex; writes to the default
  log sink, an optional registered sink, and any subscribed listeners.
- emit_telemetry_explicit: no bound state at all; the caller passes the
  codex and a publish callable. Intended for isolated and test use.

Both are gated by the codex telemetry flags and redact top-level payload
keys listed in telemetry.redact_fields. Nested objects are not scanned.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from codex_runtime.logging import get_logger
from codex_runtime.schemas.codex import Codex
from codex_runtime.schemas.telemetry import REDACTED_MARKER, TelemetryEvent, TelemetrySink

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def telemetry_active(codex: Optional[Codex]) -> bool:
    """Whether the codex lets telemetry events flow."""
    return codex is not None and codex.telemetry is not None and codex.telemetry.active


def redact_payload(codex: Codex, payload: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Replace the value of every top-level key listed in redact_fields.

    The value is replaced regardless of what it is (0, False and "" included).
    """
    redact = set(codex.telemetry.redact_fields) if codex.telemetry is not None else set()
    return {
        key: REDACTED_MARKER if key in redact else value
        for key, value in (payload or {}).items()
    }


class TelemetryEmitter:
    """
    Telemetry emitter bound to one codex.

    Example:
        >>> emitter = TelemetryEmitter(codex)
        >>> emitter.set_sink(events.append)
        >>> emitter.emit("analysis.complete", {"count": 7})
    """

    def __init__(
        self,
        codex: Codex,
        sink: Optional[TelemetrySink] = None,
        clock: Callable[[], datetime] = _utcnow
    ):
        """
        Initialize the emitter.

        Args:
            codex: Codex whose telemetry settings gate and redact events
            sink: Optional custom sink, called after the default log sink
            clock: Timestamp source
        """
        self.codex = codex
        self._sink = sink
        self._listeners: List[TelemetrySink] = []
        self._clock = clock

    def set_sink(self, sink: Optional[TelemetrySink]) -> None:
        """Register (or clear, with None) the custom sink."""
        self._sink = sink

    def subscribe(self, listener: TelemetrySink) -> None:
        """Add a passive listener for broadcast events."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: TelemetrySink) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, name: str, payload: Optional[Mapping[str, Any]] = None) -> Optional[TelemetryEvent]:
        """
        Emit a telemetry event.

        Args:
            name: Event name (e.g., "handshake.update")
            payload: Top-level event data; redacted before any sink sees it

        Returns:
            The emitted event, or None when telemetry is disabled
        """
        if not telemetry_active(self.codex):
            return None

        event = TelemetryEvent(
            name=name,
            data=redact_payload(self.codex, payload),
            timestamp=self._clock(),
        )

        logger.telemetry_event(event.name, event.data)

        if self._sink is not None:
            self._sink(event)

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as exc:
                logger.telemetry_listener_failed(event.name, str(exc))

        return event


def emit_telemetry_explicit(
    codex: Codex,
    event: TelemetryEvent,
    publish: TelemetrySink,
    clock: Callable[[], datetime] = _utcnow
) -> Optional[TelemetryEvent]:
    """
    Emit one event through an explicit publisher, bypassing any session state.

    Stamps a timestamp when the event has none and redacts listed fields.

    Returns:
        The published event, or None when telemetry is disabled
    """
    if not telemetry_active(codex):
        return None

    published = event.model_copy(update={
        "data": redact_payload(codex, event.data),
        "timestamp": event.timestamp or clock(),
    })
    publish(published)
    return published

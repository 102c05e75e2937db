"""
Structured Logging Module for the codex runtime.

Provides JSON-formatted structured logging for observability.
Key events: codex loading/validation, handshake changes, reflex blocks,
context expiry, and the default telemetry sink.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from codex_runtime.config import settings


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    All logs are emitted as single-line JSON objects for easy parsing
    by log aggregation tools.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class StructuredLogger:
    """
    Structured logger wrapper with domain-specific methods.

    Provides type-safe logging for codex runtime events.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        message: str,
        **kwargs: Any
    ) -> None:
        """Internal log method with extra fields."""
        extra = {"extra_fields": kwargs}
        self.logger.log(level, message, extra=extra)

    # ===== Codex Events =====

    def codex_loaded(
        self,
        source: str,
        codex_version: str
    ) -> None:
        """Log codex document loaded."""
        self._log(
            logging.INFO,
            f"Codex {codex_version} loaded from {source}",
            event="codex.loaded",
            source=source,
            codex_version=codex_version
        )

    def codex_invalid(
        self,
        errors: List[str],
        codex_version: Optional[str] = None
    ) -> None:
        """Log codex validation failure."""
        self._log(
            logging.ERROR,
            f"Codex invalid: {len(errors)} error(s)",
            event="codex.invalid",
            codex_version=codex_version,
            errors=errors
        )

    # ===== Handshake Events =====

    def handshake_built(
        self,
        header: Dict[str, Any]
    ) -> None:
        """Log initial handshake built from codex defaults."""
        self._log(
            logging.DEBUG,
            f"Handshake built: mode={header.get('mode')} stakes={header.get('stakes')}",
            event="handshake.built",
            handshake=header
        )

    def handshake_updated(
        self,
        header: Dict[str, Any]
    ) -> None:
        """Log handshake committed."""
        self._log(
            logging.INFO,
            f"Handshake updated: mode={header.get('mode')} stakes={header.get('stakes')}",
            event="handshake.updated",
            handshake=header
        )

    def handshake_fields_ignored(
        self,
        ignored_fields: Dict[str, Any]
    ) -> None:
        """Log invalid handshake values that were replaced by previous values."""
        self._log(
            logging.WARNING,
            f"Handshake update ignored invalid values for: {', '.join(sorted(ignored_fields))}",
            event="handshake.fields_ignored",
            ignored_fields=ignored_fields
        )

    # ===== Reflex Events =====

    def reflex_blocked(
        self,
        reflex_id: str,
        score: float,
        stakes: str
    ) -> None:
        """Log reflex exceeding its block threshold."""
        self._log(
            logging.WARNING,
            f"Reflex {reflex_id} blocked output (score={score}, stakes={stakes})",
            event="reflex.blocked",
            reflex_id=reflex_id,
            score=score,
            stakes=stakes
        )

    # ===== Context Events =====

    def context_expired(
        self,
        turns_since_recap: int,
        tokens_since_recap: int,
        fallback_mode: str
    ) -> None:
        """Log conversation context expiry."""
        self._log(
            logging.INFO,
            f"Context expired after {turns_since_recap} turns / {tokens_since_recap} tokens",
            event="context.expired",
            turns_since_recap=turns_since_recap,
            tokens_since_recap=tokens_since_recap,
            fallback_mode=fallback_mode
        )

    # ===== Telemetry Events =====

    def telemetry_event(
        self,
        name: str,
        data: Dict[str, Any]
    ) -> None:
        """Default telemetry sink."""
        self._log(
            logging.INFO,
            f"[telemetry] {name}",
            event="telemetry",
            telemetry_name=name,
            data=data
        )

    def telemetry_listener_failed(
        self,
        name: str,
        error: str
    ) -> None:
        """Log a telemetry listener that raised during broadcast."""
        self._log(
            logging.WARNING,
            f"Telemetry listener failed for {name}: {error}",
            event="telemetry.listener_failed",
            telemetry_name=name,
            error=error
        )


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Safe to call more than once: a JSON handler installed by an earlier
    call is replaced, handlers installed by the embedding application stay.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))

    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, JSONFormatter):
            root_logger.removeHandler(existing)

    # Add JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        StructuredLogger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.reflex_blocked("hallucination", 0.81, "high")
    """
    return StructuredLogger(name)

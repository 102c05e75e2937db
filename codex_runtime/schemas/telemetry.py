"""
Telemetry Schemas - Events handed to telemetry sinks.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field

REDACTED_MARKER = "[redacted]"


class TelemetryEvent(BaseModel):
    """A structured telemetry event."""

    name: str = Field(..., min_length=1, description="Event name (e.g., 'handshake.update')")
    data: Dict[str, Any] = Field(default_factory=dict, description="Event payload")
    timestamp: Optional[datetime] = Field(None, description="UTC emission time")


TelemetrySink = Callable[[TelemetryEvent], None]

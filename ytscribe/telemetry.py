from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import structlog

TelemetryValue = str | int | None

# Attribute keys that may carry watch-page secrets or transcript content.
_REDACTED_KEY_FRAGMENTS: tuple[str, ...] = (
    "api_key",
    "visitor",
    "session",
    "click_tracking",
    "share_entity",
    "nonce",
    "transcript",
    "summary",
    "text",
)
_MAX_VALUE_LENGTH = 160


class TelemetrySink(Protocol):
    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        ...


class NullTelemetrySink:
    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        return None


class StructlogTelemetrySink:
    """Writes each event as one `telemetry` record on the `ytscribe.telemetry` logger."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger("ytscribe.telemetry")

    def emit(self, *, event_name: str, attributes: Mapping[str, TelemetryValue]) -> None:
        self._logger.info("telemetry", telemetry_event=event_name, **attributes)


@dataclass(frozen=True)
class TelemetryClient:
    """
    Emits `transcript.fetch.*` and `http.request.*` events.

    Attributes are flattened to short strings and integers before they reach
    the sink; keys naming page secrets or transcript content are redacted.
    """

    enabled: bool
    sink: TelemetrySink

    @classmethod
    def disabled(cls) -> TelemetryClient:
        return cls(enabled=False, sink=NullTelemetrySink())

    def emit(self, event_name: str, **attributes: Any) -> None:
        if self.enabled:
            self.sink.emit(event_name=event_name, attributes=_clean_attributes(attributes))


def build_telemetry_client(*, enabled: bool, sink: Literal["none", "log"]) -> TelemetryClient:
    if enabled and sink == "log":
        return TelemetryClient(enabled=True, sink=StructlogTelemetrySink())
    return TelemetryClient.disabled()


def _clean_attributes(attributes: Mapping[str, Any]) -> dict[str, TelemetryValue]:
    cleaned: dict[str, TelemetryValue] = {}
    for key, value in attributes.items():
        if any(fragment in key for fragment in _REDACTED_KEY_FRAGMENTS):
            cleaned[key] = "[redacted]"
        elif value is None or (isinstance(value, int) and not isinstance(value, bool)):
            cleaned[key] = value
        else:
            cleaned[key] = _shorten(str(value))
    return cleaned


def _shorten(value: str) -> str:
    compact = " ".join(value.split())
    if len(compact) <= _MAX_VALUE_LENGTH:
        return compact
    return f"{compact[:_MAX_VALUE_LENGTH]}..."

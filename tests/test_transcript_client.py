from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

import pytest

from ytscribe.services.transcripts import (
    EmptyTranscriptResponseError,
    FetchStage,
    MalformedTranscriptResponseError,
    MalformedVideoReferenceError,
    MissingApiKeyError,
    TranscriptClient,
    TranscriptConfig,
    TranscriptFetchError,
    TranscriptHttpError,
    TranscriptSegment,
    join_segment_text,
)
from ytscribe.services.transcripts import client as client_module
from ytscribe.telemetry import TelemetryClient

PayloadBuilder = Callable[[list[tuple[str, str, str]]], dict[str, Any]]
TransportFactory = Callable[..., Any]


class _CaptureSink:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, *, event_name: str, attributes: Mapping[str, Any]) -> None:
        self.events.append((event_name, dict(attributes)))


class _FailingTransport:
    def __init__(self, page: str) -> None:
        self.page = page

    def get_text(self, url: str, *, timeout_seconds: float) -> str:
        return self.page

    def post_json(self, url: str, body: str, *, timeout_seconds: float) -> str | None:
        raise TranscriptHttpError("YouTube request failed with status 429", url=url, status_code=429)


class _StepClock:
    def __init__(self, *readings: float) -> None:
        self._readings = list(readings)

    def __call__(self) -> float:
        if len(self._readings) > 1:
            return self._readings.pop(0)
        return self._readings[0]


def _client(transport: Any, **kwargs: Any) -> TranscriptClient:
    return TranscriptClient(transport=transport, nonce_factory=lambda: "NONCE", **kwargs)


def test_fetch_transcript_end_to_end(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page("KEY1"),
        transcript_body=json.dumps(transcript_payload([("hello", "1000", "0")])),
    )
    client = _client(transport)

    segments = client.fetch_transcript("dQw4w9WgXcQ")

    assert segments == [TranscriptSegment(text="hello", duration_ms=1000, offset_ms=0)]
    assert join_segment_text(segments) == "hello"

    get_url, _ = transport.get_calls[0]
    assert get_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    post_url, body, _ = transport.post_calls[0]
    assert post_url == "https://www.youtube.com/youtubei/v1/get_transcript?key=KEY1"
    assert body["params"] == "share-entity-xyz"
    assert body["context"]["client"]["hl"] == "en"
    assert body["context"]["client"]["gl"] == "US"
    assert body["context"]["client"]["visitorData"] == "visitor-123"
    assert body["context"]["clientScreenNonce"] == "NONCE"


def test_fetch_transcript_accepts_urls_and_config(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps(transcript_payload([("hallo", "500", "0")])),
    )
    client = _client(transport)

    client.fetch_transcript(
        "https://youtu.be/dQw4w9WgXcQ?t=42",
        TranscriptConfig(language="de", country="DE"),
    )

    assert transport.get_calls[0][0].endswith("v=dQw4w9WgXcQ")
    client_context = transport.post_calls[0][1]["context"]["client"]
    assert (client_context["hl"], client_context["gl"]) == ("de", "DE")


def test_fetch_transcript_text_joins_segments(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps(
            transcript_payload([("never gonna", "1000", "0"), ("give you up", "1000", "1000")])
        ),
    )

    text = _client(transport).fetch_transcript_text("dQw4w9WgXcQ")

    assert text == "never gonna give you up"


def test_module_level_fetch_uses_given_client(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps(transcript_payload([("a", "1", "0"), ("b", "1", "1")])),
    )
    client = _client(transport)

    assert client_module.fetch_transcript_text("dQw4w9WgXcQ", client=client) == "a b"
    assert len(client_module.fetch_transcript("dQw4w9WgXcQ", client=client)) == 2


def test_empty_actions_is_an_empty_transcript(
    watch_page: Callable[..., str],
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps({"actions": []}),
    )
    client = _client(transport)

    assert client.fetch_transcript("dQw4w9WgXcQ") == []
    assert client.fetch_transcript_text("dQw4w9WgXcQ") == ""


def test_malformed_video_reference_is_not_wrapped(fake_transport_factory: TransportFactory) -> None:
    transport = fake_transport_factory(page="", transcript_body=None)

    with pytest.raises(MalformedVideoReferenceError):
        _client(transport).fetch_transcript("https://example.com/not-youtube")

    assert transport.get_calls == []


def test_missing_api_key_is_wrapped(fake_transport_factory: TransportFactory) -> None:
    transport = fake_transport_factory(
        page="<html>no config here</html>",
        transcript_body=None,
    )

    with pytest.raises(TranscriptFetchError) as excinfo:
        _client(transport).fetch_transcript("dQw4w9WgXcQ")

    error = excinfo.value
    assert isinstance(error.cause, MissingApiKeyError)
    assert error.__cause__ is error.cause
    assert error.stage == FetchStage.EXTRACTING_SECRETS
    assert "INNERTUBE_API_KEY" in str(error)
    assert transport.post_calls == []


def test_empty_transcript_body_is_wrapped(
    watch_page: Callable[..., str],
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(page=watch_page(), transcript_body=None)

    with pytest.raises(TranscriptFetchError) as excinfo:
        _client(transport).fetch_transcript("dQw4w9WgXcQ")

    assert isinstance(excinfo.value.cause, EmptyTranscriptResponseError)
    assert excinfo.value.stage == "posting_request"


def test_invalid_json_body_is_wrapped(
    watch_page: Callable[..., str],
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body="<html>consent</html>",
    )

    with pytest.raises(TranscriptFetchError) as excinfo:
        _client(transport).fetch_transcript("dQw4w9WgXcQ")

    assert isinstance(excinfo.value.cause, json.JSONDecodeError)
    assert excinfo.value.stage == "parsing_response"


def test_unexpected_response_shape_is_wrapped(
    watch_page: Callable[..., str],
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps({"actions": [{"somethingElse": {}}]}),
    )

    with pytest.raises(TranscriptFetchError) as excinfo:
        _client(transport).fetch_transcript("dQw4w9WgXcQ")

    cause = excinfo.value.cause
    assert isinstance(cause, MalformedTranscriptResponseError)
    assert cause.path == "actions[0].updateEngagementPanelAction"


def test_transport_failure_is_wrapped(watch_page: Callable[..., str]) -> None:
    transport = _FailingTransport(watch_page())

    with pytest.raises(TranscriptFetchError) as excinfo:
        _client(transport).fetch_transcript("dQw4w9WgXcQ")

    cause = excinfo.value.cause
    assert isinstance(cause, TranscriptHttpError)
    assert cause.status_code == 429
    assert excinfo.value.stage == "posting_request"


def test_deadline_covers_the_whole_fetch(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps(transcript_payload([("x", "1", "0")])),
    )
    clock = _StepClock(100.0, 100.0, 104.0)
    client = _client(transport, timeout_seconds=10.0, clock=clock)

    client.fetch_transcript("dQw4w9WgXcQ")

    assert transport.get_calls[0][1] == pytest.approx(10.0)
    assert transport.post_calls[0][2] == pytest.approx(6.0)


def test_exhausted_deadline_fails_before_posting(
    watch_page: Callable[..., str],
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(page=watch_page(), transcript_body="{}")
    clock = _StepClock(0.0, 1.0, 5.0)
    client = _client(transport, timeout_seconds=2.0, clock=clock)

    with pytest.raises(TranscriptFetchError) as excinfo:
        client.fetch_transcript("dQw4w9WgXcQ")

    assert isinstance(excinfo.value.cause, TimeoutError)
    assert excinfo.value.stage == "posting_request"
    assert transport.post_calls == []


def test_per_call_timeout_overrides_client_default(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps(transcript_payload([("x", "1", "0")])),
    )
    client = _client(transport, timeout_seconds=30.0, clock=lambda: 0.0)

    client.fetch_transcript("dQw4w9WgXcQ", timeout_seconds=3.0)

    assert transport.get_calls[0][1] == pytest.approx(3.0)


def test_fetch_emits_start_and_finish_telemetry(
    watch_page: Callable[..., str],
    transcript_payload: PayloadBuilder,
    fake_transport_factory: TransportFactory,
) -> None:
    sink = _CaptureSink()
    transport = fake_transport_factory(
        page=watch_page(),
        transcript_body=json.dumps(transcript_payload([("a", "1", "0"), ("b", "1", "1")])),
    )
    client = _client(transport, telemetry=TelemetryClient(enabled=True, sink=sink))

    client.fetch_transcript("dQw4w9WgXcQ")

    names = [name for name, _ in sink.events]
    assert names == ["transcript.fetch.start", "transcript.fetch.finish"]
    start, finish = (attributes for _, attributes in sink.events)
    assert start["video_id"] == "dQw4w9WgXcQ"
    assert start["language"] == "en"
    assert finish["segment_count"] == 2
    assert isinstance(finish["duration_ms"], int)


def test_fetch_failure_emits_error_telemetry(fake_transport_factory: TransportFactory) -> None:
    sink = _CaptureSink()
    transport = fake_transport_factory(page="<html></html>", transcript_body=None)
    client = _client(transport, telemetry=TelemetryClient(enabled=True, sink=sink))

    with pytest.raises(TranscriptFetchError):
        client.fetch_transcript("dQw4w9WgXcQ")

    name, attributes = sink.events[-1]
    assert name == "transcript.fetch.error"
    assert attributes["stage"] == "extracting_secrets"
    assert attributes["error_type"] == "MissingApiKeyError"


def test_empty_api_key_is_wrapped(
    watch_page: Callable[..., str],
    fake_transport_factory: TransportFactory,
) -> None:
    transport = fake_transport_factory(page=watch_page(api_key=""), transcript_body="{}")

    with pytest.raises(TranscriptFetchError) as excinfo:
        _client(transport).fetch_transcript("dQw4w9WgXcQ")

    assert isinstance(excinfo.value.cause, MissingApiKeyError)
    assert excinfo.value.stage == "extracting_secrets"
    assert len(transport.get_calls) == 1
    assert transport.post_calls == []

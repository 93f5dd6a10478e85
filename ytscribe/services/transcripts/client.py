from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from enum import StrEnum
from time import perf_counter

from ytscribe.services.transcripts.errors import (
    EmptyTranscriptResponseError,
    MissingApiKeyError,
    TranscriptFetchError,
)
from ytscribe.services.transcripts.nonce import generate_client_screen_nonce
from ytscribe.services.transcripts.page_secrets import API_KEY_MARKER, extract_page_secrets
from ytscribe.services.transcripts.parser import TranscriptSegment, parse_transcript_response
from ytscribe.services.transcripts.request_builder import (
    TranscriptConfig,
    build_transcript_request,
)
from ytscribe.services.transcripts.transport import TranscriptTransport, UrllibTransport
from ytscribe.services.transcripts.video_id import normalize_video_id
from ytscribe.telemetry import TelemetryClient

LOGGER = logging.getLogger("ytscribe.transcripts")

WATCH_PAGE_URL = "https://www.youtube.com/watch?v={video_id}"
TRANSCRIPT_ENDPOINT_URL = "https://www.youtube.com/youtubei/v1/get_transcript?key={api_key}"
DEFAULT_TIMEOUT_SECONDS = 30.0


class FetchStage(StrEnum):
    IDLE = "idle"
    FETCHING_PAGE = "fetching_page"
    EXTRACTING_SECRETS = "extracting_secrets"
    POSTING_REQUEST = "posting_request"
    PARSING_RESPONSE = "parsing_response"
    DONE = "done"
    FAILED = "failed"


class _Deadline:
    def __init__(self, timeout_seconds: float, clock: Callable[[], float]) -> None:
        self._clock = clock
        self._expires_at = clock() + timeout_seconds

    def remaining(self) -> float:
        left = self._expires_at - self._clock()
        if left <= 0:
            raise TimeoutError("Transcript fetch deadline exceeded")
        return left


class TranscriptClient:
    """
    Fetches caption segments through the web client's internal transcript API.

    One call walks page fetch, secret extraction, request post and response
    parsing in order, without retries. Everything after the video id has been
    resolved fails as TranscriptFetchError.
    """

    def __init__(
        self,
        *,
        transport: TranscriptTransport | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        nonce_factory: Callable[[], str] = generate_client_screen_nonce,
        telemetry: TelemetryClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport: TranscriptTransport = (
            transport if transport is not None else UrllibTransport()
        )
        self._timeout_seconds = max(0.1, float(timeout_seconds))
        self._nonce_factory = nonce_factory
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()
        self._clock = clock

    def fetch_transcript(
        self,
        video_ref: str,
        config: TranscriptConfig | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> list[TranscriptSegment]:
        video_id = normalize_video_id(video_ref)
        resolved_config = config if config is not None else TranscriptConfig()
        deadline = _Deadline(
            timeout_seconds if timeout_seconds is not None else self._timeout_seconds,
            self._clock,
        )
        started_at = perf_counter()
        stage = FetchStage.IDLE
        LOGGER.info(
            "youtube transcript fetch start video_id=%s language=%s country=%s",
            video_id,
            resolved_config.language,
            resolved_config.country,
        )
        self._telemetry.emit(
            "transcript.fetch.start",
            video_id=video_id,
            language=resolved_config.language,
            country=resolved_config.country,
        )

        try:
            stage = FetchStage.FETCHING_PAGE
            page = self._transport.get_text(
                WATCH_PAGE_URL.format(video_id=video_id),
                timeout_seconds=deadline.remaining(),
            )
            LOGGER.debug(
                "youtube transcript watch page fetched video_id=%s bytes=%s",
                video_id,
                len(page),
            )

            stage = FetchStage.EXTRACTING_SECRETS
            secrets = extract_page_secrets(page)
            if not secrets.api_key:
                raise MissingApiKeyError(f"Failed to extract {API_KEY_MARKER} from watch page")
            LOGGER.debug(
                "youtube transcript secrets extracted video_id=%s visitor_data=%s "
                "session_id=%s click_tracking=%s share_entity=%s",
                video_id,
                secrets.visitor_data is not None,
                secrets.session_id is not None,
                secrets.click_tracking_params is not None,
                secrets.share_entity is not None,
            )

            stage = FetchStage.POSTING_REQUEST
            request = build_transcript_request(
                secrets,
                resolved_config,
                nonce_factory=self._nonce_factory,
            )
            raw_body = self._transport.post_json(
                TRANSCRIPT_ENDPOINT_URL.format(api_key=secrets.api_key),
                request.to_json(),
                timeout_seconds=deadline.remaining(),
            )
            if raw_body is None:
                raise EmptyTranscriptResponseError("Empty response from transcript endpoint")

            stage = FetchStage.PARSING_RESPONSE
            segments = parse_transcript_response(json.loads(raw_body))
        except Exception as exc:
            duration_ms = int((perf_counter() - started_at) * 1000)
            LOGGER.warning(
                "youtube transcript fetch failed video_id=%s stage=%s error_type=%s error=%s",
                video_id,
                stage,
                type(exc).__name__,
                _summarize_exception_message(exc),
            )
            self._telemetry.emit(
                "transcript.fetch.error",
                video_id=video_id,
                stage=str(stage),
                error_type=type(exc).__name__,
                duration_ms=duration_ms,
            )
            raise TranscriptFetchError(
                f"Could not fetch transcript for video {video_id} "
                f"({stage}): {_summarize_exception_message(exc)}",
                stage=str(stage),
                cause=exc,
            ) from exc

        duration_ms = int((perf_counter() - started_at) * 1000)
        LOGGER.info(
            "youtube transcript fetch done video_id=%s segments=%s duration_ms=%s",
            video_id,
            len(segments),
            duration_ms,
        )
        self._telemetry.emit(
            "transcript.fetch.finish",
            video_id=video_id,
            segment_count=len(segments),
            duration_ms=duration_ms,
        )
        return segments

    def fetch_transcript_text(
        self,
        video_ref: str,
        config: TranscriptConfig | None = None,
        *,
        timeout_seconds: float | None = None,
    ) -> str:
        segments = self.fetch_transcript(video_ref, config, timeout_seconds=timeout_seconds)
        return join_segment_text(segments)


def join_segment_text(segments: list[TranscriptSegment]) -> str:
    return "".join(f"{segment.text} " for segment in segments).rstrip()


def fetch_transcript(
    video_ref: str,
    config: TranscriptConfig | None = None,
    *,
    client: TranscriptClient | None = None,
) -> list[TranscriptSegment]:
    active_client = client if client is not None else TranscriptClient()
    return active_client.fetch_transcript(video_ref, config)


def fetch_transcript_text(
    video_ref: str,
    config: TranscriptConfig | None = None,
    *,
    client: TranscriptClient | None = None,
) -> str:
    active_client = client if client is not None else TranscriptClient()
    return active_client.fetch_transcript_text(video_ref, config)


def _summarize_exception_message(exc: BaseException, *, max_length: int = 400) -> str:
    raw = str(exc).strip()
    if not raw:
        raw = repr(exc)
    if len(raw) <= max_length:
        return raw
    return f"{raw[: max_length - 3]}..."

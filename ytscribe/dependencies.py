from __future__ import annotations

from functools import lru_cache

from ytscribe.config import AppSettings, load_settings
from ytscribe.services.summarizer import TranscriptSummarizer, build_openai_client
from ytscribe.services.tokenizer import TokenCounter
from ytscribe.services.transcripts import TranscriptClient
from ytscribe.telemetry import TelemetryClient, build_telemetry_client


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()


@lru_cache(maxsize=1)
def get_telemetry() -> TelemetryClient:
    settings = get_settings()
    return build_telemetry_client(
        enabled=settings.telemetry_enabled,
        sink=settings.telemetry_sink,
    )


@lru_cache(maxsize=1)
def get_transcript_client() -> TranscriptClient:
    settings = get_settings()
    return TranscriptClient(
        timeout_seconds=settings.http_timeout_seconds,
        telemetry=get_telemetry(),
    )


@lru_cache(maxsize=1)
def get_token_counter() -> TokenCounter:
    return TokenCounter(get_settings().tokenizer_model)


def get_summarizer() -> TranscriptSummarizer | None:
    settings = get_settings()
    if settings.openai_api_key is None:
        return None
    return _build_summarizer()


@lru_cache(maxsize=1)
def _build_summarizer() -> TranscriptSummarizer:
    settings = get_settings()
    return TranscriptSummarizer(
        client=build_openai_client(settings),
        model=settings.summary_model,
        token_counter=get_token_counter(),
        chunk_tokens=settings.summary_chunk_tokens,
    )


def reset_cached_dependencies() -> None:
    _build_summarizer.cache_clear()
    get_token_counter.cache_clear()
    get_transcript_client.cache_clear()
    get_telemetry.cache_clear()
    get_settings.cache_clear()

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from structlog.contextvars import bind_contextvars, reset_contextvars

from ytscribe.config import AppSettings
from ytscribe.dependencies import (
    get_settings,
    get_summarizer,
    get_token_counter,
    get_transcript_client,
)
from ytscribe.models.transcript_contracts import (
    TranscriptResponse,
    TranscriptSegmentModel,
    TranscriptSummaryRequest,
    TranscriptSummaryResponse,
)
from ytscribe.services.summarizer import SummarizerError, TranscriptSummarizer
from ytscribe.services.tokenizer import TokenCounter
from ytscribe.services.transcripts import (
    MalformedVideoReferenceError,
    TranscriptClient,
    TranscriptConfig,
    TranscriptFetchError,
    TranscriptSegment,
    VideoId,
    join_segment_text,
    normalize_video_id,
)

router = APIRouter()


def _resolve_video_id(video_ref: str) -> VideoId:
    try:
        return normalize_video_id(video_ref.strip())
    except MalformedVideoReferenceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _resolve_config(settings: AppSettings, lang: str | None, country: str | None) -> TranscriptConfig:
    return TranscriptConfig.from_options(
        language=lang or settings.default_language,
        country=country or settings.default_country,
    )


def _fetch_segments(
    client: TranscriptClient,
    video_id: VideoId,
    config: TranscriptConfig,
) -> list[TranscriptSegment]:
    context_tokens = bind_contextvars(video_id=video_id)
    try:
        return client.fetch_transcript(video_id, config)
    except TranscriptFetchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    finally:
        reset_contextvars(**context_tokens)


@router.get(
    "/transcript",
    response_model=TranscriptResponse,
    tags=["transcripts"],
    operation_id="get_transcript",
)
def get_transcript(
    video: Annotated[str, Query(min_length=1, description="Video URL or 11-character id.")],
    settings: Annotated[AppSettings, Depends(get_settings)],
    client: Annotated[TranscriptClient, Depends(get_transcript_client)],
    lang: str | None = None,
    country: str | None = None,
) -> TranscriptResponse:
    video_id = _resolve_video_id(video)
    config = _resolve_config(settings, lang, country)
    segments = _fetch_segments(client, video_id, config)
    return TranscriptResponse(
        video_id=video_id,
        language=config.language,
        country=config.country,
        segments=[TranscriptSegmentModel(**segment.to_dict()) for segment in segments],
        text=join_segment_text(segments),
    )


@router.post(
    "/transcript/summary",
    response_model=TranscriptSummaryResponse,
    tags=["transcripts"],
    operation_id="summarize_transcript",
)
def summarize_transcript(
    request: TranscriptSummaryRequest,
    settings: Annotated[AppSettings, Depends(get_settings)],
    client: Annotated[TranscriptClient, Depends(get_transcript_client)],
    summarizer: Annotated[TranscriptSummarizer | None, Depends(get_summarizer)],
    token_counter: Annotated[TokenCounter, Depends(get_token_counter)],
) -> TranscriptSummaryResponse:
    if summarizer is None:
        raise HTTPException(
            status_code=503,
            detail="Summaries are disabled. Set YTSCRIBE_OPENAI_API_KEY to enable them.",
        )

    video_id = _resolve_video_id(request.video)
    config = _resolve_config(settings, request.lang, request.country)
    text = join_segment_text(_fetch_segments(client, video_id, config))
    try:
        summary = summarizer.summarize(text, style=request.style)
    except SummarizerError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return TranscriptSummaryResponse(
        video_id=video_id,
        summary=summary,
        token_count=token_counter.count(text),
    )

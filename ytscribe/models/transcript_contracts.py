from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TranscriptSegmentModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    duration_ms: int
    offset_ms: int


class TranscriptResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    video_id: str
    language: str
    country: str
    segments: list[TranscriptSegmentModel]
    text: str


class TranscriptSummaryRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    video: str = Field(min_length=1, description="Video URL or 11-character id.")
    lang: str | None = None
    country: str | None = None
    style: str | None = Field(default=None, max_length=500)


class TranscriptSummaryResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    video_id: str
    summary: str
    token_count: int

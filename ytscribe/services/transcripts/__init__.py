from ytscribe.services.transcripts.client import (
    FetchStage,
    TranscriptClient,
    fetch_transcript,
    fetch_transcript_text,
    join_segment_text,
)
from ytscribe.services.transcripts.errors import (
    EmptyTranscriptResponseError,
    MalformedTranscriptResponseError,
    MalformedVideoReferenceError,
    MissingApiKeyError,
    TranscriptError,
    TranscriptFetchError,
    TranscriptHttpError,
)
from ytscribe.services.transcripts.parser import TranscriptSegment, parse_transcript_response
from ytscribe.services.transcripts.request_builder import TranscriptConfig
from ytscribe.services.transcripts.transport import TranscriptTransport, UrllibTransport
from ytscribe.services.transcripts.video_id import VideoId, normalize_video_id

__all__ = [
    "EmptyTranscriptResponseError",
    "FetchStage",
    "MalformedTranscriptResponseError",
    "MalformedVideoReferenceError",
    "MissingApiKeyError",
    "TranscriptClient",
    "TranscriptConfig",
    "TranscriptError",
    "TranscriptFetchError",
    "TranscriptHttpError",
    "TranscriptSegment",
    "TranscriptTransport",
    "UrllibTransport",
    "VideoId",
    "fetch_transcript",
    "fetch_transcript_text",
    "join_segment_text",
    "normalize_video_id",
    "parse_transcript_response",
]

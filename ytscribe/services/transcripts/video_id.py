from __future__ import annotations

import re
from typing import NewType

from ytscribe.services.transcripts.errors import MalformedVideoReferenceError

VideoId = NewType("VideoId", str)

VIDEO_ID_LENGTH = 11
YOUTUBE_URL_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)"
    r"([^\"&?/\s]{11})",
    re.IGNORECASE,
)


def normalize_video_id(video_ref: str) -> VideoId:
    """
    Resolve a watch/short/embed URL or a bare id into the 11-character video id.

    Bare 11-character input is returned as-is, without checking its characters.
    """
    if len(video_ref) == VIDEO_ID_LENGTH:
        return VideoId(video_ref)

    match = YOUTUBE_URL_PATTERN.search(video_ref)
    if match is None:
        raise MalformedVideoReferenceError(video_ref)
    return VideoId(match.group(1))

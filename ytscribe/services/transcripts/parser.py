from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, cast

from ytscribe.services.transcripts.errors import MalformedTranscriptResponseError

_LEADING_INTEGER_PATTERN = re.compile(r"^\s*([+-]?\d+)")
_CUE_GROUPS_PATH: tuple[str | int, ...] = (
    "actions",
    0,
    "updateEngagementPanelAction",
    "content",
    "transcriptRenderer",
    "body",
    "transcriptBodyRenderer",
    "cueGroups",
)


@dataclass(frozen=True)
class TranscriptSegment:
    text: str
    duration_ms: int
    offset_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "duration_ms": self.duration_ms,
            "offset_ms": self.offset_ms,
        }


def parse_transcript_response(payload: Any) -> list[TranscriptSegment]:
    """
    Flatten a `get_transcript` response into segments, in response order.

    Only the first cue of each cue group is kept. A response without actions
    is an empty transcript; any other gap in the expected shape raises
    MalformedTranscriptResponseError naming the missing path.
    """
    if not isinstance(payload, dict):
        raise MalformedTranscriptResponseError(
            "Transcript response is not a JSON object",
            path="$",
        )
    root = cast(dict[str, Any], payload)
    actions = root.get("actions")
    if actions is None or actions == []:
        return []

    cue_groups = _as_path_list(_descend(root, _CUE_GROUPS_PATH), _CUE_GROUPS_PATH)
    segments: list[TranscriptSegment] = []
    for index, cue_group in enumerate(cue_groups):
        group_path = (*_CUE_GROUPS_PATH, index)
        renderer_path = ("transcriptCueGroupRenderer", "cues", 0, "transcriptCueRenderer")
        renderer = _descend(cue_group, renderer_path, prefix=group_path)
        segments.append(_segment_from_renderer(renderer, (*group_path, *renderer_path)))
    return segments


def _segment_from_renderer(renderer: Any, path: tuple[str | int, ...]) -> TranscriptSegment:
    text = _descend(renderer, ("cue", "simpleText"), prefix=path)
    if not isinstance(text, str):
        raise MalformedTranscriptResponseError(
            "Cue text is not a string",
            path=_render_path((*path, "cue", "simpleText")),
        )
    return TranscriptSegment(
        text=text,
        duration_ms=_parse_milliseconds(
            _descend(renderer, ("durationMs",), prefix=path),
            (*path, "durationMs"),
        ),
        offset_ms=_parse_milliseconds(
            _descend(renderer, ("startOffsetMs",), prefix=path),
            (*path, "startOffsetMs"),
        ),
    )


def _descend(
    node: Any,
    path: tuple[str | int, ...],
    *,
    prefix: tuple[str | int, ...] = (),
) -> Any:
    current = node
    walked: list[str | int] = list(prefix)
    for step in path:
        walked.append(step)
        if isinstance(step, int):
            if not isinstance(current, list) or step >= len(cast(list[Any], current)):
                raise MalformedTranscriptResponseError(
                    "Transcript response is missing an expected entry",
                    path=_render_path(tuple(walked)),
                )
            current = cast(list[Any], current)[step]
            continue
        if not isinstance(current, dict) or step not in current:
            raise MalformedTranscriptResponseError(
                "Transcript response is missing an expected field",
                path=_render_path(tuple(walked)),
            )
        current = cast(dict[str, Any], current)[step]
    return current


def _as_path_list(value: Any, path: tuple[str | int, ...]) -> list[Any]:
    if not isinstance(value, list):
        raise MalformedTranscriptResponseError(
            "Transcript response field is not a list",
            path=_render_path(path),
        )
    return list(cast(list[Any], value))


def _parse_milliseconds(raw_value: Any, path: tuple[str | int, ...]) -> int:
    if isinstance(raw_value, bool):
        raw_value = None
    if isinstance(raw_value, int):
        return raw_value
    if isinstance(raw_value, float) and math.isfinite(raw_value):
        return int(raw_value)
    if isinstance(raw_value, str):
        match = _LEADING_INTEGER_PATTERN.match(raw_value)
        if match is not None:
            return int(match.group(1))
    raise MalformedTranscriptResponseError(
        f"Cue timing is not an integer: {raw_value!r}",
        path=_render_path(path),
    )


def _render_path(path: tuple[str | int, ...]) -> str:
    rendered = ""
    for step in path:
        if isinstance(step, int):
            rendered += f"[{step}]"
        elif rendered:
            rendered += f".{step}"
        else:
            rendered = step
    return rendered

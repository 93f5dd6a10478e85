from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from ytscribe.dependencies import reset_cached_dependencies

WATCH_PAGE_TEMPLATE = (
    "<html><script>ytcfg.set({{\"INNERTUBE_API_KEY\":\"{api_key}\","
    "\"VISITOR_DATA\":\"visitor-123\"}});</script>"
    "<script>var ytInitialData = {{\"responseContext\":{{\"sessionId\":\"session-9\"}},"
    "\"clickTrackingParams\":\"click-abc\","
    "\"serializedShareEntity\":\"share-entity-xyz\"}};</script></html>"
)


class FakeTransport:
    def __init__(self, *, page: str, transcript_body: str | None) -> None:
        self.page = page
        self.transcript_body = transcript_body
        self.get_calls: list[tuple[str, float]] = []
        self.post_calls: list[tuple[str, dict[str, Any], float]] = []

    def get_text(self, url: str, *, timeout_seconds: float) -> str:
        self.get_calls.append((url, timeout_seconds))
        return self.page

    def post_json(self, url: str, body: str, *, timeout_seconds: float) -> str | None:
        self.post_calls.append((url, json.loads(body), timeout_seconds))
        return self.transcript_body


def build_watch_page(api_key: str = "KEY1") -> str:
    return WATCH_PAGE_TEMPLATE.format(api_key=api_key)


def build_transcript_payload(cues: list[tuple[str, str, str]]) -> dict[str, Any]:
    cue_groups = [
        {
            "transcriptCueGroupRenderer": {
                "formattedStartOffset": {"simpleText": "0:00"},
                "cues": [
                    {
                        "transcriptCueRenderer": {
                            "cue": {"simpleText": text},
                            "startOffsetMs": start_offset_ms,
                            "durationMs": duration_ms,
                        }
                    }
                ],
            }
        }
        for text, duration_ms, start_offset_ms in cues
    ]
    return {
        "responseContext": {"mainAppWebResponseContext": {"loggedOut": True}},
        "actions": [
            {
                "clickTrackingParams": "click-abc",
                "updateEngagementPanelAction": {
                    "targetId": "engagement-panel-searchable-transcript",
                    "content": {
                        "transcriptRenderer": {
                            "body": {"transcriptBodyRenderer": {"cueGroups": cue_groups}}
                        }
                    },
                },
            }
        ],
    }


@pytest.fixture
def watch_page() -> Callable[..., str]:
    return build_watch_page


@pytest.fixture
def transcript_payload() -> Callable[[list[tuple[str, str, str]]], dict[str, Any]]:
    return build_transcript_payload


@pytest.fixture
def fake_transport_factory() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def runtime_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    data_dir = tmp_path / "runtime-data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("YTSCRIBE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("YTSCRIBE_TELEMETRY_SINK", "none")
    monkeypatch.delenv("YTSCRIBE_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("YTSCRIBE_LOG_DIR", raising=False)
    reset_cached_dependencies()
    yield data_dir
    reset_cached_dependencies()

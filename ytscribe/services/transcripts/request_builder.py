from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ytscribe.services.transcripts.nonce import generate_client_screen_nonce
from ytscribe.services.transcripts.page_secrets import PageSecrets

DEFAULT_LANGUAGE = "en"
DEFAULT_COUNTRY = "US"

# Fingerprint of the desktop web client the endpoint expects.
WEB_CLIENT_FINGERPRINT: dict[str, Any] = {
    "userAgent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_4) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/85.0.4183.83 Safari/537.36,gzip(gfe)"
    ),
    "clientName": "WEB",
    "clientVersion": "2.20200925.01.00",
    "osName": "Macintosh",
    "osVersion": "10_15_4",
    "browserName": "Chrome",
    "browserVersion": "85.0f.4183.83",
    "screenWidthPoints": 1440,
    "screenHeightPoints": 770,
    "screenPixelDensity": 2,
    "utcOffsetMinutes": 120,
    "userInterfaceTheme": "USER_INTERFACE_THEME_LIGHT",
    "connectionType": "CONN_CELLULAR_3G",
}


@dataclass(frozen=True)
class TranscriptConfig:
    language: str = DEFAULT_LANGUAGE
    country: str = DEFAULT_COUNTRY

    @classmethod
    def from_options(
        cls,
        *,
        language: str | None = None,
        country: str | None = None,
    ) -> TranscriptConfig:
        return cls(
            language=language or DEFAULT_LANGUAGE,
            country=country or DEFAULT_COUNTRY,
        )


@dataclass(frozen=True)
class TranscriptRequest:
    payload: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(self.payload)


def build_transcript_request(
    secrets: PageSecrets,
    config: TranscriptConfig,
    *,
    nonce_factory: Callable[[], str] = generate_client_screen_nonce,
) -> TranscriptRequest:
    """
    Assemble the `get_transcript` body the web client would send.

    Secrets that were not found on the page are left out of the body rather
    than sent as null. The two request arrays are always present.
    """
    client: dict[str, Any] = {
        "hl": config.language or DEFAULT_LANGUAGE,
        "gl": config.country or DEFAULT_COUNTRY,
    }
    if secrets.visitor_data is not None:
        client["visitorData"] = secrets.visitor_data
    client.update(WEB_CLIENT_FINGERPRINT)

    request: dict[str, Any] = {}
    if secrets.session_id is not None:
        request["sessionId"] = secrets.session_id
    request["internalExperimentFlags"] = []
    request["consistencyTokenJars"] = []

    click_tracking: dict[str, Any] = {}
    if secrets.click_tracking_params is not None:
        click_tracking["clickTrackingParams"] = secrets.click_tracking_params

    payload: dict[str, Any] = {
        "context": {
            "client": client,
            "request": request,
            "user": {},
            "clientScreenNonce": nonce_factory(),
            "clickTracking": click_tracking,
        },
    }
    if secrets.share_entity is not None:
        payload["params"] = secrets.share_entity
    return TranscriptRequest(payload=payload)

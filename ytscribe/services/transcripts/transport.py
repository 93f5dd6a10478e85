from __future__ import annotations

from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ytscribe.services.transcripts.errors import TranscriptHttpError

BROWSER_HEADERS: dict[str, str] = {
    "user-agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_4) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/85.0.4183.83 Safari/537.36"
    ),
    "accept-language": "en-US,en;q=0.9",
}


class TranscriptTransport(Protocol):
    def get_text(self, url: str, *, timeout_seconds: float) -> str:
        ...

    def post_json(self, url: str, body: str, *, timeout_seconds: float) -> str | None:
        ...


class UrllibTransport:
    def __init__(self, *, headers: dict[str, str] | None = None) -> None:
        self._headers = dict(BROWSER_HEADERS if headers is None else headers)

    def get_text(self, url: str, *, timeout_seconds: float) -> str:
        request = Request(url, headers=dict(self._headers), method="GET")
        return self._send(request, timeout_seconds=timeout_seconds)

    def post_json(self, url: str, body: str, *, timeout_seconds: float) -> str | None:
        headers = dict(self._headers)
        headers["content-type"] = "application/json"
        request = Request(
            url,
            data=body.encode("utf-8"),
            headers=headers,
            method="POST",
        )
        raw_body = self._send(request, timeout_seconds=timeout_seconds)
        if not raw_body.strip():
            return None
        return raw_body

    def _send(self, request: Request, *, timeout_seconds: float) -> str:
        url = request.full_url
        try:
            with urlopen(request, timeout=timeout_seconds) as response:
                return response.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            raise TranscriptHttpError(
                f"YouTube request failed with status {exc.code}: {_redact_key(url)}",
                url=_redact_key(url),
                status_code=int(exc.code),
            ) from exc
        except (URLError, TimeoutError, OSError) as exc:
            raise TranscriptHttpError(
                f"YouTube request failed: {exc}",
                url=_redact_key(url),
            ) from exc


def _redact_key(url: str) -> str:
    marker = "key="
    index = url.find(marker)
    if index < 0:
        return url
    return f"{url[: index + len(marker)]}[redacted]"

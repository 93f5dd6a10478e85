from __future__ import annotations

from dataclasses import dataclass

API_KEY_MARKER = "INNERTUBE_API_KEY"
SHARE_ENTITY_MARKER = "serializedShareEntity"
VISITOR_DATA_MARKER = "VISITOR_DATA"
SESSION_ID_MARKER = "sessionId"
CLICK_TRACKING_PARAMS_MARKER = "clickTrackingParams"


@dataclass(frozen=True)
class PageSecrets:
    api_key: str | None
    share_entity: str | None = None
    visitor_data: str | None = None
    session_id: str | None = None
    click_tracking_params: str | None = None


def extract_page_value(page: str, key: str) -> str | None:
    """
    Return the string value serialized as `"<key>":"<value>"` in the watch page.

    Plain substring search on the first occurrence. Returns None when the
    marker is not in the page.
    """
    marker = f'"{key}":"'
    start = page.find(marker)
    if start < 0:
        return None
    start += len(marker)
    end = page.find('"', start)
    if end < 0:
        return page[start:]
    return page[start:end]


def extract_page_secrets(page: str) -> PageSecrets:
    return PageSecrets(
        api_key=extract_page_value(page, API_KEY_MARKER),
        share_entity=extract_page_value(page, SHARE_ENTITY_MARKER),
        visitor_data=extract_page_value(page, VISITOR_DATA_MARKER),
        session_id=extract_page_value(page, SESSION_ID_MARKER),
        click_tracking_params=extract_page_value(page, CLICK_TRACKING_PARAMS_MARKER),
    )

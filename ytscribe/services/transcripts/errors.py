from __future__ import annotations


class TranscriptError(Exception):
    pass


class MalformedVideoReferenceError(TranscriptError):
    def __init__(self, video_ref: str) -> None:
        super().__init__(f"Malformed YouTube video url or ID: {video_ref!r}")
        self.video_ref = video_ref


class MissingApiKeyError(TranscriptError):
    pass


class EmptyTranscriptResponseError(TranscriptError):
    pass


class MalformedTranscriptResponseError(TranscriptError):
    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(f"{message} (path={path})")
        self.path = path


class TranscriptHttpError(TranscriptError):
    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class TranscriptFetchError(TranscriptError):
    """
    Single failure surfaced by the transcript client.

    Whatever went wrong after the video id was resolved (transport, a missing
    page secret, an unexpected response shape) ends up here. The underlying
    exception stays available as `cause` and `__cause__`.
    """

    def __init__(self, message: str, *, stage: str, cause: BaseException) -> None:
        super().__init__(message)
        self.stage = stage
        self.cause = cause

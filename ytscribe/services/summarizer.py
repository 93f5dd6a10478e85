from __future__ import annotations

import logging
from typing import Any

from openai import APIConnectionError, APIError, OpenAI, RateLimitError

from ytscribe.config import AppSettings
from ytscribe.services.tokenizer import TokenCounter

LOGGER = logging.getLogger("ytscribe.summarizer")

SUMMARY_SYSTEM_PROMPT = (
    "You summarize YouTube video transcripts. Transcripts are raw captions without "
    "punctuation or speaker labels. Write a faithful, concise summary of what is said. "
    "Do not add information that is not in the transcript."
)
COMBINE_SYSTEM_PROMPT = (
    "You are given partial summaries of consecutive parts of one YouTube video transcript. "
    "Merge them into a single coherent summary without repeating points."
)


class SummarizerError(RuntimeError):
    pass


class TranscriptSummarizer:
    def __init__(
        self,
        *,
        client: Any,
        model: str,
        token_counter: TokenCounter,
        chunk_tokens: int = 3_000,
    ) -> None:
        self._client = client
        self._model = model
        self._token_counter = token_counter
        self._chunk_tokens = max(1, chunk_tokens)

    def summarize(self, text: str, style: str | None = None) -> str:
        """
        Summarize transcript text, splitting it first when it is too long.

        Each chunk is summarized on its own and the partial summaries are
        merged in one final request.
        """
        if not text.strip():
            raise SummarizerError("Cannot summarize an empty transcript.")

        system_prompt = _with_style(SUMMARY_SYSTEM_PROMPT, style)
        if self._token_counter.count(text) <= self._chunk_tokens:
            return self._complete(system_prompt, text)

        chunks = self._token_counter.chunk_text(text, self._chunk_tokens)
        LOGGER.info(
            "transcript summary chunked model=%s chunks=%s chunk_tokens=%s",
            self._model,
            len(chunks),
            self._chunk_tokens,
        )
        partials = [self._complete(system_prompt, chunk) for chunk in chunks]
        return self._complete(
            _with_style(COMBINE_SYSTEM_PROMPT, style),
            "\n\n".join(partials),
        )

    def _complete(self, system_prompt: str, user_message: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
            )
        except RateLimitError as exc:
            raise SummarizerError(f"Summarizer rate limited: {exc}") from exc
        except APIConnectionError as exc:
            raise SummarizerError(f"Summarizer connection failed: {exc}") from exc
        except APIError as exc:
            raise SummarizerError(f"Summarizer API error: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        if not choices:
            raise SummarizerError("Summarizer returned no choices.")
        content = getattr(choices[0].message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise SummarizerError("Summarizer returned an empty completion.")
        return content.strip()


def build_openai_client(settings: AppSettings) -> OpenAI:
    if settings.openai_api_key is None:
        raise SummarizerError("YTSCRIBE_OPENAI_API_KEY is required for summaries.")
    return OpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=300.0,
    )


def _with_style(prompt: str, style: str | None) -> str:
    if style is None or not style.strip():
        return prompt
    return f"{prompt}\n\nStyle: {style.strip()}"

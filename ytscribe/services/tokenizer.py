from __future__ import annotations

import string
from collections.abc import Sequence
from typing import Any, Protocol

import tiktoken

DEFAULT_TOKENIZER_MODEL = "gpt-3.5-turbo"

# Words a chunk prefers to start with when it has to be cut.
BREAK_WORDS: frozenset[str] = frozenset({"and", "but", "however", "also", "so", "then"})


class TokenEncoding(Protocol):
    def encode(self, text: str, **kwargs: Any) -> list[int]:
        ...


class TokenCounter:
    """
    Token counts and token-bounded chunks for transcript text.

    The tiktoken encoding is built once per counter; pass `encoding` to
    reuse one or to substitute another encoder.
    """

    def __init__(
        self,
        model: str = DEFAULT_TOKENIZER_MODEL,
        *,
        encoding: TokenEncoding | None = None,
    ) -> None:
        self.model = model
        self._encoding: TokenEncoding = (
            encoding if encoding is not None else tiktoken.encoding_for_model(model)
        )

    def encode(self, text: str) -> list[int]:
        return list(self._encoding.encode(text, disallowed_special=()))

    def count(self, text: str) -> int:
        return len(self.encode(text))

    def chunk_text(self, text: str, max_tokens: int) -> list[str]:
        if max_tokens < 1:
            raise ValueError("max_tokens must be at least 1.")

        chunks: list[str] = []
        current: list[str] = []
        current_tokens = 0
        for word in text.split():
            word_tokens = self.count(word)
            while current and current_tokens + word_tokens > max_tokens:
                emitted, current = _split_at_last_break(current)
                chunks.append(" ".join(emitted))
                current_tokens = sum(self.count(item) for item in current)
            current.append(word)
            current_tokens += word_tokens

        if current:
            chunks.append(" ".join(current))
        return chunks


def is_break_word(word: str) -> bool:
    return word.strip(string.punctuation).lower() in BREAK_WORDS


def _split_at_last_break(words: Sequence[str]) -> tuple[list[str], list[str]]:
    for index in range(len(words) - 1, 0, -1):
        if is_break_word(words[index]):
            return list(words[:index]), list(words[index:])
    return list(words), []

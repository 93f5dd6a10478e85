from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

_NONCE_BASE_ALPHABET = "ABCDEFGHIJKLMOPQRSTUVWXYZabcdefghjijklmnopqrstuvwxyz0123456789"
NONCE_ALPHABETS: tuple[str, ...] = (
    _NONCE_BASE_ALPHABET + "+/=",
    _NONCE_BASE_ALPHABET + "+/",
    _NONCE_BASE_ALPHABET + "-_=",
    _NONCE_BASE_ALPHABET + "-_.",
    _NONCE_BASE_ALPHABET + "-_",
)
# Index 64 is the padding symbol.
NONCE_ALPHABET = NONCE_ALPHABETS[3]
NONCE_PADDING_INDEX = 64


class RandomSource(Protocol):
    def random(self) -> float:
        ...


def generate_client_screen_nonce(rng: RandomSource | None = None) -> str:
    """
    Build a `clientScreenNonce` the way the YouTube web client does.

    The character codes are read at the character's position inside a
    one-character string, so only the first character yields a real code
    and every later one collapses to 0. The web client behaves the same way.
    """
    source: RandomSource = rng if rng is not None else random
    rendered = str(source.random())
    data = [_char_code_at(rendered[index], index) for index in range(len(rendered) - 1)]
    return encode_nonce_bytes(data)


def encode_nonce_bytes(data: Sequence[int], alphabet: str = NONCE_ALPHABET) -> str:
    """Encode bytes three at a time into four symbols, base64 style."""
    output: list[str] = []
    index = 0
    length = len(data)
    while index < length:
        first = data[index]
        second = data[index + 1] if index + 1 < length else 0
        has_third = index + 2 < length
        third = data[index + 2] if has_third else 0

        top = first >> 2
        upper_middle = ((first & 3) << 4) | (second >> 4)
        lower_middle = ((second & 15) << 2) | (third >> 6)
        bottom = third & 63
        if not has_third:
            bottom = NONCE_PADDING_INDEX

        output.append(
            alphabet[top] + alphabet[upper_middle] + alphabet[lower_middle] + alphabet[bottom]
        )
        index += 3
    return "".join(output)


def _char_code_at(text: str, position: int) -> int:
    # Out-of-range reads are NaN in the web client, which bit operations turn into 0.
    if 0 <= position < len(text):
        return ord(text[position])
    return 0

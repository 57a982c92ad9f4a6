"""Username normalization and validation helpers for room membership."""

from __future__ import annotations

import unicodedata

import regex

from wordgrid.errors import GameValidationError

MIN_USERNAME_GRAPHEMES = 1
MAX_USERNAME_GRAPHEMES = 20
_GRAPHEME_PATTERN = regex.compile(r"\X")


def normalize_username(raw_username: str) -> str:
    """Trim and normalize username to NFC form."""
    return unicodedata.normalize("NFC", raw_username.strip())


def count_graphemes(value: str) -> int:
    """Count user-visible characters using grapheme clusters."""
    return len(_GRAPHEME_PATTERN.findall(value))


def normalize_and_validate_username(raw_username: object) -> str:
    """Apply trim + NFC and validate presence and length.

    Case is preserved: "Alice" and "alice" are different players.
    """
    if raw_username is None:
        raise GameValidationError("username is required", field="username")
    if not isinstance(raw_username, str):
        raise GameValidationError("username must be a string", field="username")
    normalized = normalize_username(raw_username)
    if not normalized:
        raise GameValidationError("username is required", field="username")
    grapheme_count = count_graphemes(normalized)
    if grapheme_count < MIN_USERNAME_GRAPHEMES or grapheme_count > MAX_USERNAME_GRAPHEMES:
        raise GameValidationError(
            f"username length must be {MIN_USERNAME_GRAPHEMES}-{MAX_USERNAME_GRAPHEMES} graphemes",
            field="username",
        )
    return normalized

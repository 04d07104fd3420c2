"""Name rule shared by provider and patient validation."""

from __future__ import annotations

MIN_WORDS = 2
MIN_LETTERS = 5
ALLOWED_PUNCTUATION = frozenset(" '-")


def is_valid_name(name: str) -> bool:
    """Return ``True`` for names like ``"O'Brien Lee"``.

    A valid name has at least two space-separated words, at least five letters
    in total, and nothing but letters, spaces, apostrophes and hyphens.
    """

    if not isinstance(name, str) or not name.strip():
        return False
    if len(name.split()) < MIN_WORDS:
        return False
    if sum(1 for char in name if char.isalpha()) < MIN_LETTERS:
        return False
    return all(char.isalpha() or char in ALLOWED_PUNCTUATION for char in name)


__all__ = ["is_valid_name"]

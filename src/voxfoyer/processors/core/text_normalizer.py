"""Text normalization helpers shared by the French processors."""

import re
import unicodedata

APOSTROPHES = {
    "’": "'",  # right single quotation mark
    "‘": "'",  # left single quotation mark
    "ʼ": "'",  # modifier letter apostrophe
    "`": "'",
    "´": "'",  # acute accent
}

_WHITESPACE_RE = re.compile(r"\s+")


def fold_char(char: str) -> str:
    """Lowercase a character and strip its diacritics, keeping length 1."""
    if char in APOSTROPHES:
        return APOSTROPHES[char]
    decomposed = unicodedata.normalize("NFD", char.lower())
    return decomposed[0] if decomposed else char


def fold_text(text: str) -> str:
    """Lowercase and strip diacritics character by character.

    The result has the same length as ``text`` so match offsets found in the
    folded text can be applied to the original.
    """
    return "".join(fold_char(char) for char in text)


def normalize_text(text: str) -> str:
    """Fold ``text`` and collapse whitespace runs into single spaces."""
    return _WHITESPACE_RE.sub(" ", fold_text(text)).strip()

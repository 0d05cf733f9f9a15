"""
Text Helpers - Input normalization and pronoun reflection
=========================================================

Normalization prepares raw user text for pattern matching; reflection
swaps first and second person in fragments echoed back to the user
("my job" becomes "your job").
"""

import re
from types import MappingProxyType


REFLECTIONS = MappingProxyType({
    "am": "are",
    "are": "am",
    "i": "you",
    "you": "I",
    "me": "you",
    "my": "your",
    "your": "my",
    "mine": "yours",
    "yours": "mine",
})

# Alternating runs of word and non-word characters
_TOKEN_RE = re.compile(r"\w+|\W+", re.ASCII)

_STRIP_RE = re.compile(r"[^a-z0-9\s]")


def normalize(text: str) -> str:
    """
    Lower-case text, drop everything but letters, digits and whitespace,
    then trim.

    Args:
        text: Raw user input

    Returns:
        Normalized text, possibly empty
    """
    return _STRIP_RE.sub("", text.lower()).strip()


def reflect(text: str) -> str:
    """
    Swap pronouns and verb forms between first and second person.

    Tokens are lower-cased; separators and unmapped words pass through
    unchanged and no characters are added or removed between tokens.

    Args:
        text: Fragment to reflect

    Returns:
        Reflected fragment
    """
    tokens = _TOKEN_RE.findall(text.lower())
    return "".join(REFLECTIONS.get(token, token) for token in tokens)

"""Text helpers for product titles and fuzzy matching.

``clean_title`` strips size, pack and unit noise from catalogue titles so
colour/material variants of the same product share one base name.
``dice_coefficient`` is the bigram similarity used to rank candidates.
"""

import re
from collections import Counter
from typing import Counter as CounterType

_UNIT = r"(?:mm|cm|m²|m2|m³|m3|sqm|m|kg|g|ltr|litres?|l|inch|ft|\")"

# Order matters: pack phrases and dimensions before single measurements.
_TITLE_NOISE = [
    # "Pack of 10", "pack of 6 x"
    re.compile(r"\bpack\s+of\s+\d+(?:\.\d+)?\b", re.IGNORECASE),
    # "600x600mm", "600 x 300 x 22mm", "4x3m"
    re.compile(
        r"\b\d+(?:\.\d+)?\s*(?:x\s*\d+(?:\.\d+)?\s*)+" + _UNIT + r"?(?![\w²³])",
        re.IGNORECASE,
    ),
    # "22mm", "25kg", "0.85 sqm", "10m²"
    re.compile(r"\b\d+(?:\.\d+)?\s*" + _UNIT + r"(?![\w²³])", re.IGNORECASE),
    re.compile(r"\b(?:bulk|single|each)\b", re.IGNORECASE),
    re.compile(r"\([^()]*\)"),
    # Everything after a dash or bullet separator
    re.compile(r"\s+[-–—•|]\s+.*$"),
]
_RE_WHITESPACE = re.compile(r"\s+")
_RE_EDGE_PUNCT = re.compile(r"^[\s,;:/\-–—•|]+|[\s,;:/\-–—•|]+$")
_RE_NON_WORD = re.compile(r"[^a-z0-9]+")


def _clean_once(title: str) -> str:
    for pattern in _TITLE_NOISE:
        title = pattern.sub(" ", title)
    title = _RE_WHITESPACE.sub(" ", title)
    return _RE_EDGE_PUNCT.sub("", title)


def clean_title(raw_title: str) -> str:
    """Return the comparable base name of a product title.

    e.g. "Sandstone Paving Slabs (22mm) - Pack of 20" -> "Sandstone Paving Slabs"

    Cleaning repeats until nothing changes, so the result is a fixed point
    and calling it twice gives the same answer. Every pass only removes or
    collapses characters, so the result is never longer than the input.
    If nothing descriptive survives, the stripped input is returned.
    """
    if not raw_title:
        return ""

    original = _RE_WHITESPACE.sub(" ", raw_title).strip()

    current = original
    while True:
        cleaned = _clean_once(current)
        if cleaned == current:
            break
        current = cleaned

    return current or original


def matching_key(text: str) -> str:
    """Lowercase, alphanumeric-only form of a cleaned title."""
    return _RE_WHITESPACE.sub(" ", _RE_NON_WORD.sub(" ", clean_title(text).lower())).strip()


def slugify(text: str) -> str:
    """URL-safe slug, e.g. "Building Sand (bulk)" -> "building-sand-bulk"."""
    slug = _RE_NON_WORD.sub("-", (text or "").lower()).strip("-")
    return slug or "item"


def _bigrams(text: str) -> CounterType[str]:
    return Counter(text[i:i + 2] for i in range(len(text) - 1))


def dice_coefficient(first: str, second: str) -> float:
    """Sørensen-Dice similarity over character bigrams (whitespace ignored).

    Returns a score between 0 and 1, where 1.0 means identical strings.
    """
    a = _RE_WHITESPACE.sub("", (first or "").lower())
    b = _RE_WHITESPACE.sub("", (second or "").lower())

    if a == b:
        return 1.0 if a else 0.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    a_bigrams = _bigrams(a)
    b_bigrams = _bigrams(b)
    overlap = sum((a_bigrams & b_bigrams).values())

    return (2.0 * overlap) / ((len(a) - 1) + (len(b) - 1))

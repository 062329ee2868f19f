"""String canonicalization for header and field name comparison."""

import re

from rapidfuzz.distance import Levenshtein

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize(value: str) -> str:
    """Lowercase and drop everything that is not a-z or 0-9.

    "Test Case Title" -> "testcasetitle", "area_path" -> "areapath".
    The result only contains [a-z0-9], so normalize is idempotent.
    """
    return _NON_ALNUM_RE.sub("", value.lower())


def singularize(value: str) -> str:
    """Naive English singular form of an already normalized string."""
    if value.endswith("ies"):
        return value[:-3] + "y"
    if value.endswith("s"):
        return value[:-1]
    return value


def edit_distance(a: str, b: str) -> int:
    """Classic Levenshtein distance with unit insert/delete/substitute costs."""
    return Levenshtein.distance(a, b)

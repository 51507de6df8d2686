"""Keyword matching shared by the classifier, reference table and briefing."""

import re
from functools import lru_cache

# Keywords this short are acronyms ("alt", "ast", "bun", "crp") that would
# otherwise match inside ordinary words such as "health" or "fasting".
_TOKEN_MATCH_MAX_LEN = 3


@lru_cache(maxsize=512)
def _token_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}s?(?![a-z0-9])")


def matches_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive substring match of ``keyword`` in ``text``.

    Keywords of three characters or fewer must appear as a whole token,
    optionally pluralised ("LDLs").
    """
    haystack = text.lower()
    needle = keyword.lower()
    if len(needle) <= _TOKEN_MATCH_MAX_LEN:
        return _token_pattern(needle).search(haystack) is not None
    return needle in haystack


def matches_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(matches_keyword(text, keyword) for keyword in keywords)

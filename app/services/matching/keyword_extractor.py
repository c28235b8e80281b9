import re
from typing import AbstractSet, List

from app.core.vocabulary import default_vocabulary

MIN_KEYWORD_LENGTH = 3

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def extract_keywords(text: str, stopwords: AbstractSet[str] = default_vocabulary.stopwords) -> List[str]:
    """Split free text into significant lowercase tokens.

    Tokens are stripped of every non-alphanumeric character; tokens shorter
    than MIN_KEYWORD_LENGTH and stopwords are dropped. Each token appears
    once, in order of first occurrence, so the result is both a set and a
    stable sequence for building match reasons.
    """
    keywords: List[str] = []
    seen = set()
    for raw in text.lower().split():
        word = _NON_ALNUM.sub("", raw)
        if len(word) < MIN_KEYWORD_LENGTH or word in stopwords or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
    return keywords

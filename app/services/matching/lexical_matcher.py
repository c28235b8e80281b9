from typing import Iterable, List

from app.services.matching.keyword_extractor import MIN_KEYWORD_LENGTH


def find_keyword_matches(keywords: Iterable[str], listing_text: str) -> List[str]:
    """Keywords contained in the listing text, in keyword order.

    listing_text is expected to be lowercased already. Containment is plain
    substring lookup, so "lamp" also hits "lamps" and "lampshade".
    """
    return [
        keyword
        for keyword in keywords
        if len(keyword) >= MIN_KEYWORD_LENGTH and keyword in listing_text
    ]

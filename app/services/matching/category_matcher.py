from typing import Iterable, Optional


def category_matches(category: Optional[str], listing_categories: Iterable[str]) -> bool:
    """True when the wishlist category is set and tagged on the listing"""
    if not category:
        return False
    return category in set(listing_categories)

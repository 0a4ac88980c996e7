from __future__ import annotations

import logging
import math

from ..errors import InvalidQuery
from .models import Shop
from .store import ShopPredicate, ShopStore, get_shop_store

logger = logging.getLogger(__name__)


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def category_filter(category: str) -> ShopPredicate:
    needle = category.strip().lower()
    return lambda shop: any(_contains(c, needle) for c in shop.categories)


def text_filter(text: str) -> ShopPredicate:
    needle = text.strip().lower()

    def _match(shop: Shop) -> bool:
        return (
            _contains(shop.name, needle)
            or _contains(shop.description, needle)
            or _contains(shop.address, needle)
            or any(_contains(c, needle) for c in shop.categories)
        )

    return _match


def _combine(category: str | None, text: str | None) -> ShopPredicate | None:
    predicates = []
    if category and category.strip():
        predicates.append(category_filter(category))
    if text and text.strip():
        predicates.append(text_filter(text))
    if not predicates:
        return None
    return lambda shop: all(p(shop) for p in predicates)


def validate_point(lat: float | None, lng: float | None) -> tuple[float, float]:
    if lat is None or lng is None:
        raise InvalidQuery("Latitude and longitude are required")
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise InvalidQuery("Invalid coordinates provided")
    return float(lat), float(lng)


def search_shops(
    lat: float | None,
    lng: float | None,
    radius_m: float,
    category: str | None = None,
    text: str | None = None,
    limit: int | None = None,
    store: ShopStore | None = None,
) -> list[Shop]:
    """
    Approved shops within ``radius_m`` metres of ``(lat, lng)``, nearest first.

    ``category`` and ``text`` are case-insensitive substring filters, ANDed
    with each other and with the proximity constraint.
    """
    lat, lng = validate_point(lat, lng)
    if radius_m is None or not math.isfinite(radius_m) or radius_m <= 0:
        raise InvalidQuery("Radius must be a finite number greater than zero")

    store = store or get_shop_store()
    shops = store.near(
        lng,
        lat,
        radius_m,
        approved_only=True,
        predicate=_combine(category, text),
        limit=limit,
    )
    logger.info("Found %d shops within %sm of (%s, %s)", len(shops), radius_m, lat, lng)
    return shops


def browse_shops(
    lat: float | None = None,
    lng: float | None = None,
    radius_m: float | None = None,
    category: str | None = None,
    text: str | None = None,
    page: int = 1,
    limit: int = 20,
    store: ShopStore | None = None,
) -> tuple[list[Shop], int]:
    """
    Paged listing of approved shops.

    With coordinates the results are a proximity search; without them every
    approved shop is eligible, in creation order. Returns the requested page
    and the total number of matches.
    """
    store = store or get_shop_store()
    if lat is not None or lng is not None:
        matches = search_shops(lat, lng, radius_m, category, text, store=store)
    else:
        predicate = _combine(category, text)
        matches = [
            s for s in store.all(approved_only=True)
            if predicate is None or predicate(s)
        ]

    start = (page - 1) * limit
    return matches[start:start + limit], len(matches)

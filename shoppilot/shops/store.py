from __future__ import annotations

import logging
from typing import Callable, Iterable, Protocol

import numpy as np

from .models import Shop

logger = logging.getLogger(__name__)

# Sphere radius used by MongoDB's 2dsphere index for $near distances.
EARTH_RADIUS_M = 6378100.0

ShopPredicate = Callable[[Shop], bool]


def haversine_m(
    lat: float,
    lng: float,
    lats: np.ndarray,
    lngs: np.ndarray,
) -> np.ndarray:
    """Great-circle distance in metres from one point to many."""
    lat1 = np.radians(lat)
    lat2 = np.radians(lats)
    dlat = lat2 - lat1
    dlng = np.radians(lngs) - np.radians(lng)
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


class ShopStore(Protocol):
    def add(self, shop: Shop) -> Shop: ...

    def get(self, shop_id: str) -> Shop | None: ...

    def update(self, shop_id: str, changes: dict) -> Shop | None: ...

    def delete(self, shop_id: str) -> Shop | None: ...

    def all(self, approved_only: bool = False) -> list[Shop]: ...

    def by_owner(self, owner_id: str) -> list[Shop]: ...

    def near(
        self,
        lng: float,
        lat: float,
        max_distance: float,
        approved_only: bool = True,
        predicate: ShopPredicate | None = None,
        limit: int | None = None,
    ) -> list[Shop]: ...

    def clear(self) -> None: ...


class InMemoryShopStore:
    """Process-local shop documents with a proximity query.

    Shops are kept in insertion order; ``near`` returns them nearest-first.
    """

    def __init__(self, shops: Iterable[Shop] = ()) -> None:
        self._shops: dict[str, Shop] = {}
        for shop in shops:
            self.add(shop)

    def add(self, shop: Shop) -> Shop:
        self._shops[shop.id] = shop
        return shop

    def get(self, shop_id: str) -> Shop | None:
        return self._shops.get(shop_id)

    def update(self, shop_id: str, changes: dict) -> Shop | None:
        current = self._shops.get(shop_id)
        if current is None:
            return None
        # model_validate re-runs the field validators on the merged record
        merged = current.model_dump()
        merged.update(changes)
        updated = Shop.model_validate(merged)
        self._shops[shop_id] = updated
        return updated

    def delete(self, shop_id: str) -> Shop | None:
        return self._shops.pop(shop_id, None)

    def all(self, approved_only: bool = False) -> list[Shop]:
        shops = list(self._shops.values())
        if approved_only:
            shops = [s for s in shops if s.approved]
        return shops

    def by_owner(self, owner_id: str) -> list[Shop]:
        return [s for s in self._shops.values() if s.owner_id == owner_id]

    def near(
        self,
        lng: float,
        lat: float,
        max_distance: float,
        approved_only: bool = True,
        predicate: ShopPredicate | None = None,
        limit: int | None = None,
    ) -> list[Shop]:
        shops = self.all(approved_only=approved_only)
        if not shops:
            return []

        lats = np.array([s.location.lat for s in shops], dtype=float)
        lngs = np.array([s.location.lng for s in shops], dtype=float)
        distances = haversine_m(lat, lng, lats, lngs)

        # Stable sort keeps insertion order among equidistant shops
        order = np.argsort(distances, kind="stable")
        results: list[Shop] = []
        for idx in order:
            if distances[idx] > max_distance:
                break
            shop = shops[int(idx)]
            if predicate is not None and not predicate(shop):
                continue
            results.append(shop)
            if limit is not None and len(results) >= limit:
                break

        logger.debug(
            "near(%s, %s, %sm) -> %d of %d shops",
            lat, lng, max_distance, len(results), len(shops),
        )
        return results

    def clear(self) -> None:
        self._shops.clear()


_store = InMemoryShopStore()


def get_shop_store() -> InMemoryShopStore:
    """Return the process-wide shop store."""
    return _store


def clear_shops() -> None:
    _store.clear()

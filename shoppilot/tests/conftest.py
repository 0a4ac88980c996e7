from __future__ import annotations

import uuid

import pytest

from shoppilot.analytics.store import clear_events
from shoppilot.auth.users import user_id_for
from shoppilot.reviews.store import clear_reviews
from shoppilot.settings.service import get_settings_service
from shoppilot.shops.models import Location, Shop
from shoppilot.shops.store import clear_shops, get_shop_store
from shoppilot.tests.helpers import LAGOS_LAT, LAGOS_LNG


@pytest.fixture(autouse=True)
def _reset_state():
    clear_shops()
    clear_reviews()
    clear_events()
    get_settings_service().reset()
    yield


@pytest.fixture
def make_shop():
    def _make(
        name: str = "Corner Shop",
        categories: tuple[str, ...] = ("General",),
        lat: float = LAGOS_LAT,
        lng: float = LAGOS_LNG,
        approved: bool = True,
        owner_email: str = "owner@example.com",
        **extra,
    ) -> Shop:
        shop = Shop(
            id=uuid.uuid4().hex,
            owner_id=user_id_for(owner_email),
            name=name,
            description=f"{name} description",
            address=f"1 {name} Street, Lagos",
            categories=list(categories),
            location=Location.at(lat=lat, lng=lng),
            approved=approved,
            **extra,
        )
        return get_shop_store().add(shop)

    return _make

from __future__ import annotations

from dataclasses import replace

import pytest

from shoppilot.auth.users import user_id_for
from shoppilot.data_ingestion.config import DEFAULT_SEED_CONFIG
from shoppilot.data_ingestion.ingest import load_sample_shops, read_sample_shops
from shoppilot.shops.search import search_shops
from shoppilot.shops.store import InMemoryShopStore, get_shop_store
from shoppilot.tests.helpers import LAGOS_LAT, LAGOS_LNG


def test_read_sample_shops_splits_categories():
    df = read_sample_shops()
    assert len(df) == 5
    first = df.iloc[0]
    assert first["name"] == "Tech World Electronics"
    assert first["categories_list"] == ["Electronics", "Technology"]


def test_load_sample_shops_adds_approved_owner_shops():
    added = load_sample_shops()
    assert added == 5

    shops = get_shop_store().all()
    owner_id = user_id_for("owner@example.com")
    assert all(s.approved and s.owner_id == owner_id for s in shops)
    assert {s.contact for s in shops} >= {"+234 123 456 7890"}


def test_sample_shops_are_searchable_around_lagos():
    load_sample_shops()
    names = [s.name for s in search_shops(LAGOS_LAT, LAGOS_LNG, 5000, category="restaurant")]
    assert names == ["Healthy Bites Restaurant"]


def test_load_into_explicit_store():
    store = InMemoryShopStore()
    load_sample_shops(store=store)
    assert len(store.all()) == 5
    assert get_shop_store().all() == []


def test_unknown_seed_owner_is_rejected():
    config = replace(DEFAULT_SEED_CONFIG, owner_email="ghost@example.com")
    with pytest.raises(ValueError):
        load_sample_shops(config)


def test_missing_columns_are_rejected(tmp_path):
    (tmp_path / "shops.csv").write_text("name,description\nA,B\n")
    config = replace(DEFAULT_SEED_CONFIG, data_dir=tmp_path, sample_filename="shops.csv")
    with pytest.raises(ValueError, match="missing columns"):
        read_sample_shops(config)

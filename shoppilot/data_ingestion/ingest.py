from __future__ import annotations

import logging
import uuid
from typing import List

import pandas as pd

from ..auth.users import user_id_for
from ..shops.models import Location, Shop
from ..shops.store import ShopStore, get_shop_store
from .config import DEFAULT_SEED_CONFIG, SeedConfig

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: List[str] = [
    "name",
    "description",
    "address",
    "categories",
    "lng",
    "lat",
]


def _split_categories(raw: str, separator: str) -> List[str]:
    categories = [c.strip() for c in str(raw).split(separator) if c.strip()]
    return categories or ["General"]


def read_sample_shops(config: SeedConfig = DEFAULT_SEED_CONFIG) -> pd.DataFrame:
    df = pd.read_csv(config.sample_path, dtype={"contact": str})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"sample shops file is missing columns: {missing}")

    df = df.dropna(subset=REQUIRED_COLUMNS)
    df["categories_list"] = df["categories"].apply(
        lambda s: _split_categories(s, config.category_separator)
    )
    return df


def load_sample_shops(
    config: SeedConfig = DEFAULT_SEED_CONFIG,
    store: ShopStore | None = None,
) -> int:
    """
    Insert the sample shops, approved and owned by the demo shop owner.

    Returns the number of shops added.
    """
    store = store or get_shop_store()
    owner_id = user_id_for(config.owner_email)
    if owner_id is None:
        raise ValueError(f"seed owner {config.owner_email!r} does not exist")

    df = read_sample_shops(config)
    for _, row in df.iterrows():
        contact = row.get("contact")
        store.add(Shop(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            name=row["name"],
            description=row["description"],
            address=row["address"],
            contact=str(contact).strip() if pd.notna(contact) else None,
            categories=row["categories_list"],
            location=Location.at(lat=float(row["lat"]), lng=float(row["lng"])),
            approved=True,
        ))
        logger.info("Added sample shop: %s", row["name"])

    return len(df)

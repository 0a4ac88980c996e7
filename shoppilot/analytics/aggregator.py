from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any

from ..auth.users import count_users
from ..reviews.store import count_reviews, reviews_for_shops
from ..shops.models import Shop
from ..shops.store import get_shop_store
from .store import count_events, get_events


def shop_totals(shop_id: str) -> dict[str, int]:
    ids = {shop_id}
    return {
        "total_views": count_events("view", ids),
        "total_clicks": count_events("click", ids),
        "total_reviews": len(reviews_for_shops(ids)),
    }


def dashboard_stats(owner_shops: list[Shop]) -> dict[str, Any]:
    """Today's traffic and review summary across one owner's shops."""
    shop_ids = {s.id for s in owner_shops}
    midnight = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0).timestamp()
    reviews = reviews_for_shops(shop_ids)

    return {
        "stats": {
            "daily_visits": count_events("view", shop_ids, since=midnight),
            "daily_clicks": count_events("click", shop_ids, since=midnight),
            "total_reviews": len(reviews),
            "total_shops": len(owner_shops),
        },
        "recent_reviews": reviews[:5],
    }


def shop_analytics(shop_id: str, period_days: int = 7) -> dict[str, Any]:
    """Per-day views/clicks over the last ``period_days`` days plus review stats."""
    since = (datetime.now() - timedelta(days=period_days)).timestamp()

    daily: dict[str, Counter[str]] = defaultdict(Counter)
    for e in get_events():
        if e["shop_id"] == shop_id and e["timestamp"] >= since:
            day = datetime.fromtimestamp(e["timestamp"]).strftime("%Y-%m-%d")
            daily[day][e["type"]] += 1

    reviews = reviews_for_shops({shop_id})
    avg_rating = sum(r.rating for r in reviews) / len(reviews) if reviews else 0.0
    totals = shop_totals(shop_id)

    return {
        "analytics": [
            {"date": day, "views": counts["view"], "clicks": counts["click"]}
            for day, counts in sorted(daily.items())
        ],
        "reviews": reviews,
        "avg_rating": round(avg_rating, 1),
        "total_reviews": len(reviews),
        "total_views": totals["total_views"],
        "total_clicks": totals["total_clicks"],
    }


def platform_analytics() -> dict[str, Any]:
    shops = get_shop_store().all()

    category_counter: Counter[str] = Counter()
    for shop in shops:
        for c in shop.categories:
            category_counter[c] += 1
    total_tagged = sum(category_counter.values())
    top_categories = [
        {
            "name": name,
            "count": count,
            "percentage": round(count / total_tagged * 100, 1) if total_tagged else 0.0,
        }
        for name, count in category_counter.most_common(10)
    ]

    return {
        "platform_stats": {
            "total_users": count_users(),
            "total_shops": len(shops),
            "approved_shops": sum(1 for s in shops if s.approved),
            "total_reviews": count_reviews(),
            "total_views": count_events("view"),
            "total_clicks": count_events("click"),
        },
        "top_categories": top_categories,
    }

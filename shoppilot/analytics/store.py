from __future__ import annotations

import time
from typing import Any, Iterable

EVENT_TYPES = ("view", "click")

# Append-only; timestamps are epoch seconds.
_events: list[dict[str, Any]] = []


def record_event(event_type: str, shop_id: str, user_id: str | None = None) -> None:
    """Record a shop page view or contact click."""
    if event_type not in EVENT_TYPES:
        raise ValueError(f"unknown analytics event {event_type!r}")
    _events.append({
        "type": event_type,
        "shop_id": shop_id,
        "user_id": user_id,
        "timestamp": time.time(),
    })


def count_events(
    event_type: str,
    shop_ids: Iterable[str] | None = None,
    since: float = 0.0,
) -> int:
    """Events of one type, optionally limited to some shops and a start time."""
    wanted = set(shop_ids) if shop_ids is not None else None
    return sum(
        1 for e in _events
        if e["type"] == event_type
        and (wanted is None or e["shop_id"] in wanted)
        and e["timestamp"] >= since
    )


def get_events() -> list[dict[str, Any]]:
    return _events


def clear_events() -> None:
    _events.clear()

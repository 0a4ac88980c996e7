from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from .models import DayHours, OpeningHours, ShopStatus, Weekday

HoursTable = OpeningHours | Mapping[str, DayHours | dict]


def _hours_for(opening_hours: HoursTable | None, day: Weekday) -> DayHours | None:
    if opening_hours is None:
        return None
    if isinstance(opening_hours, OpeningHours):
        return opening_hours.for_day(day)
    entry = opening_hours.get(day.value)
    if entry is None or isinstance(entry, DayHours):
        return entry
    return DayHours.model_validate(entry)


def evaluate_status(opening_hours: HoursTable | None, now: datetime | None = None) -> ShopStatus:
    """
    Decide whether a shop is open at ``now`` (server local time by default).

    ``open`` and ``close`` are zero-padded 24h strings, so plain string
    comparison orders them as times of day. Both bounds are inclusive.
    """
    now = now or datetime.now()
    current_day = Weekday.of(now)
    current_time = now.strftime("%H:%M")

    status = ShopStatus(
        is_open=False,
        message="Hours not available",
        current_time=current_time,
        current_day=current_day,
    )

    today = _hours_for(opening_hours, current_day)
    if today is None:
        return status

    if today.is_closed:
        status.message = "Closed today"
    elif today.open <= current_time <= today.close:
        status.is_open = True
        status.message = f"Open until {today.close}"
    elif current_time < today.open:
        status.message = f"Opens at {today.open}"
    else:
        status.message = "Closed - Opens tomorrow"

    return status

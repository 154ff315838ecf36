import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from .errors import Conflict
from .menu import filter_menu
from .models import Table

logger = logging.getLogger(__name__)

BOOKING_DURATION = timedelta(hours=2)


@dataclass
class TableAvailability:
    table: Table
    available: bool
    filtered_food_menu: list = field(default_factory=list)


def naive_local(value: Optional[datetime]) -> Optional[datetime]:
    """Bookings are stored as naive restaurant wall-clock times."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    # half-open intervals, touching endpoints do not overlap
    return start_a < end_b and end_a > start_b


def ensure_table_free(store, table_id: int, start: datetime, end: datetime,
                      exclude_booking_id: Optional[int] = None) -> None:
    clashing = store.find_active_bookings_overlapping(
        start, end, table_id=table_id, exclude_booking_id=exclude_booking_id
    )
    if clashing:
        logger.info(
            "Table %s busy for %s - %s (booking %s)",
            table_id, start.isoformat(), end.isoformat(), clashing[0].id,
        )
        raise Conflict("Table already booked for this time")


def sweep_expired_bookings(store, now: Optional[datetime] = None) -> int:
    completed = store.mark_expired_bookings_completed(now or datetime.now())
    if completed:
        logger.info("Marked %s expired bookings as completed", completed)
    return completed


def availability_snapshot(store, at: datetime, now: Optional[datetime] = None,
                          sweep: bool = True) -> list[TableAvailability]:
    """Every table, ordered by number, flagged free/busy for [at, at + 2h)."""
    if sweep:
        sweep_expired_bookings(store, now)

    tables = store.find_tables()
    active = store.find_active_bookings_overlapping(at, at + BOOKING_DURATION)
    booked_table_ids = {b.table_id for b in active}

    return [
        TableAvailability(table=t, available=t.id not in booked_table_ids)
        for t in tables
    ]


def list_tables(store, at: datetime, veg: Optional[bool] = None,
                food_time: Optional[datetime] = None,
                now: Optional[datetime] = None) -> list[TableAvailability]:
    with store.transaction():
        snapshot = availability_snapshot(store, at, now)
    menu_at = food_time or at
    for entry in snapshot:
        entry.filtered_food_menu = filter_menu(entry.table.food_menu, at=menu_at, veg=veg)
    return snapshot

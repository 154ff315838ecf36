from datetime import datetime
from typing import Optional, Sequence


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def _weekday(at: datetime) -> int:
    # 0=Sunday .. 6=Saturday, while Python's weekday() starts at Monday
    return (at.weekday() + 1) % 7


def is_menu_item_available_at(item, at: datetime) -> bool:
    if not item.is_available:
        return False

    if item.available_days and _weekday(at) not in item.available_days:
        return False

    if not item.available_times:
        return True

    now = at.hour * 60 + at.minute
    for window in item.available_times:
        start = _minutes(window["from"])
        end = _minutes(window["to"])
        if end > start:
            if start <= now < end:
                return True
        # window crosses midnight, e.g. 22:00-02:00
        elif now >= start or now < end:
            return True
    return False


def filter_menu(items: Sequence, at: Optional[datetime] = None, veg: Optional[bool] = None) -> list:
    filtered = list(items or [])
    if veg is True:
        filtered = [m for m in filtered if m.veg]
    elif veg is False:
        filtered = [m for m in filtered if not m.veg]
    if at is not None:
        filtered = [m for m in filtered if is_menu_item_available_at(m, at)]
    return filtered

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .availability import (
    BOOKING_DURATION, TableAvailability, availability_snapshot, ensure_table_free, naive_local,
    sweep_expired_bookings,
)
from .emails import render_cancellation_email, render_confirmation_email, render_update_email
from .errors import Forbidden, InvalidInput, NotFound
from .models import BOOKED, CANCELLED, COMPLETED, ROLE_ADMIN, Booking
from .notifications import notify
from .offers import quote_price

logger = logging.getLogger(__name__)


@dataclass
class BookingResult:
    booking: Booking
    tables: list[TableAvailability]


def create_booking(store, notifier, user_id: int, table_id: Optional[int],
                   start_time: Optional[datetime] = None,
                   end_time: Optional[datetime] = None,
                   now: Optional[datetime] = None) -> BookingResult:
    """Book a table for [start_time, end_time).

    start defaults to now and end to start + 2 hours. Returns the booking and
    the availability of every table at its start time.
    """
    if table_id is None:
        raise InvalidInput("Table is required")
    now = now or datetime.now()

    with store.transaction():
        user = store.find_user(user_id)
        if user is None:
            raise NotFound("User not found")

        table = store.lock_table(table_id)
        if table is None:
            raise NotFound("Table not found")

        start = naive_local(start_time) or now
        end = naive_local(end_time) or start + BOOKING_DURATION
        if start >= end:
            raise InvalidInput("Invalid time range")

        # expired bookings are settled before the new one exists
        sweep_expired_bookings(store, now)
        ensure_table_free(store, table.id, start, end)

        quote = quote_price(table.price, table.offers, start)
        booking = store.create_booking(
            user_id=user.id,
            table_id=table.id,
            start_time=start,
            end_time=end,
            status=BOOKED,
            price=quote.price,
            discount=quote.discount,
            final_price=quote.final_price,
            applied_offers=quote.applied_offers,
        )
        tables = availability_snapshot(store, start, sweep=False)

    logger.info("Booking %s created: table %s at %s", booking.id, table.table_number, start.isoformat())
    notify(notifier, user.email, "Booking Confirmed",
           render_confirmation_email(table.table_number, booking))
    return BookingResult(booking=booking, tables=tables)


def update_booking(store, notifier, booking_id: int, requester_id: int,
                   requester_role: Optional[str], new_start_time: Optional[datetime]) -> Booking:
    """Move a booking to a new 2-hour slot on the same table and re-price it."""
    if new_start_time is None:
        raise InvalidInput("Start time is required for update")

    with store.transaction():
        booking = store.find_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if booking.user_id != requester_id and requester_role != ROLE_ADMIN:
            raise Forbidden("Not authorized to update this booking")

        table = store.lock_table(booking.table_id)
        if table is None:
            raise NotFound("Table not found")
        store.refresh(booking)
        # completed and cancelled bookings are history and stay where they were
        if booking.status != BOOKED:
            raise InvalidInput(f"Cannot reschedule a {booking.status} booking")

        start = naive_local(new_start_time)
        end = start + BOOKING_DURATION
        if start >= end:
            raise InvalidInput("Invalid time range")

        ensure_table_free(store, table.id, start, end, exclude_booking_id=booking.id)

        old_start = booking.start_time
        quote = quote_price(table.price, table.offers, start)
        booking.price = quote.price
        booking.discount = quote.discount
        booking.final_price = quote.final_price
        booking.applied_offers = quote.applied_offers
        booking.start_time = start
        booking.end_time = end
        store.save_booking(booking)

    logger.info("Booking %s moved from %s to %s", booking.id, old_start.isoformat(), start.isoformat())
    notify(notifier, booking.user.email, "Your Booking Has Been Updated",
           render_update_email(table.table_number, booking, old_start))
    return booking


def cancel_booking(store, notifier, booking_id: int, requester_id: int,
                   now: Optional[datetime] = None) -> BookingResult:
    """Cancel an owned booking.

    Only the owner may cancel. Cancelling an already cancelled booking
    changes nothing and sends no email.
    """
    with store.transaction():
        booking = store.find_booking(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if booking.user_id != requester_id:
            raise Forbidden("Not allowed to cancel this booking")
        if booking.status == COMPLETED:
            raise InvalidInput("Completed bookings cannot be cancelled")

        changed = booking.status != CANCELLED
        if changed:
            booking.status = CANCELLED
            store.save_booking(booking)
        tables = availability_snapshot(store, booking.start_time, now)

    if changed:
        logger.info("Booking %s cancelled", booking.id)
        notify(notifier, booking.user.email, "Booking Cancelled",
               render_cancellation_email(booking.table.table_number, booking))
    return BookingResult(booking=booking, tables=tables)


def get_user_bookings(store, user_id: int) -> list[Booking]:
    return store.find_user_bookings(user_id)


def list_all_bookings(store) -> list[Booking]:
    return store.find_all_bookings()

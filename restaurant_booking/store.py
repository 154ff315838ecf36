import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from .errors import BookingError, Internal
from .models import BOOKED, COMPLETED, Booking, Table, User

logger = logging.getLogger(__name__)


class SqlStore:
    """Table/booking persistence over one SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    # ================== TABLES ==================
    def find_table(self, table_id: int) -> Optional[Table]:
        return self.session.get(Table, table_id)

    def lock_table(self, table_id: int) -> Optional[Table]:
        """Take the per-table write guard and return the table.

        The version bump is the first write of the transaction: PostgreSQL
        holds the row lock and SQLite the database write lock until commit,
        so overlap checks for the same table run one at a time.
        """
        result = self.session.execute(
            update(Table)
            .where(Table.id == table_id)
            .values(booking_version=Table.booking_version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        return self.session.get(Table, table_id, populate_existing=True)

    def find_tables(self) -> list[Table]:
        stmt = (
            select(Table)
            .options(selectinload(Table.offers), selectinload(Table.food_menu))
            .order_by(Table.table_number.asc())
        )
        return list(self.session.scalars(stmt))

    def find_table_by_number(self, table_number: int) -> Optional[Table]:
        return self.session.scalars(
            select(Table).where(Table.table_number == table_number)
        ).first()

    def save_table(self, table: Table) -> Table:
        self.session.add(table)
        self.session.flush()
        return table

    def delete_table(self, table: Table) -> None:
        self.session.delete(table)

    def count_table_bookings(self, table_id: int) -> int:
        return self.session.scalar(
            select(func.count(Booking.id)).where(Booking.table_id == table_id)
        )

    # ================== BOOKINGS ==================
    def find_booking(self, booking_id: int) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.table), joinedload(Booking.user))
            .where(Booking.id == booking_id)
        )
        return self.session.scalars(stmt).first()

    def find_active_bookings_overlapping(
        self,
        start: datetime,
        end: datetime,
        table_id: Optional[int] = None,
        exclude_booking_id: Optional[int] = None,
    ) -> list[Booking]:
        stmt = select(Booking).where(
            Booking.status == BOOKED,
            Booking.start_time < end,
            Booking.end_time > start,
        )
        if table_id is not None:
            stmt = stmt.where(Booking.table_id == table_id)
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)
        return list(self.session.scalars(stmt))

    def create_booking(self, **fields) -> Booking:
        booking = Booking(**fields)
        self.session.add(booking)
        self.session.flush()
        return booking

    def save_booking(self, booking: Booking) -> None:
        self.session.add(booking)
        self.session.flush()

    def mark_expired_bookings_completed(self, now: datetime) -> int:
        result = self.session.execute(
            update(Booking)
            .where(Booking.status == BOOKED, Booking.end_time < now)
            .values(status=COMPLETED)
        )
        return result.rowcount

    def find_user_bookings(self, user_id: int) -> list[Booking]:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.table))
            .where(Booking.user_id == user_id)
            .order_by(Booking.start_time.desc())
        )
        return list(self.session.scalars(stmt))

    def find_all_bookings(self) -> list[Booking]:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.table), joinedload(Booking.user))
            .order_by(Booking.start_time.desc())
        )
        return list(self.session.scalars(stmt))

    # ================== USERS ==================
    def find_user(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    # ================== TRANSACTION ==================
    @contextmanager
    def transaction(self):
        """Commit on success, roll back on any error.

        Business errors pass through unchanged; storage failures become
        ``Internal``.
        """
        try:
            yield self
            self.session.commit()
        except BookingError:
            self.session.rollback()
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Store operation failed")
            raise Internal("Database error") from e

    def refresh(self, instance) -> None:
        self.session.refresh(instance)

from datetime import datetime

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list

from .database import Base

BOOKED = "booked"
CANCELLED = "cancelled"
COMPLETED = "completed"
BOOKING_STATUSES = (BOOKED, CANCELLED, COMPLETED)

ROLE_USER = "user"
ROLE_ADMIN = "admin"

TABLE_CLASSES = ("1st-class", "2nd-class", "3rd-class", "general")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, default=ROLE_USER)

    bookings = relationship("Booking", back_populates="user")


class Table(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True)
    table_number = Column(Integer, unique=True, nullable=False)
    seats = Column(Integer, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    table_class = Column(String, nullable=False, default="general")
    class_features = Column(JSON, nullable=False, default=list)
    food_types = Column(JSON, nullable=False, default=list)
    price = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    # bumped by every booking write on this table, see SqlStore.lock_table
    booking_version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    offers = relationship(
        "Offer",
        order_by="Offer.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    food_menu = relationship(
        "MenuItem",
        order_by="MenuItem.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    bookings = relationship("Booking", back_populates="table")


class Offer(Base):
    __tablename__ = "offers"

    id = Column(Integer, primary_key=True)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    bank = Column(String, nullable=True)  # e.g. "HDFC 10% cashback"
    discount_percent = Column(Integer, nullable=True)
    valid_from = Column(DateTime, nullable=True)
    valid_to = Column(DateTime, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "discount_percent IS NULL OR (discount_percent >= 0 AND discount_percent <= 100)",
            name="check_offer_discount_percent_range",
        ),
    )


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # "Starter", "Main", "Dessert"
    veg = Column(Boolean, nullable=False, default=True)
    price = Column(Integer, nullable=False, default=0)
    description = Column(String, nullable=True)
    # [{"from": "HH:MM", "to": "HH:MM"}, ...]; empty means all day
    available_times = Column(JSON, nullable=False, default=list)
    # 0=Sunday .. 6=Saturday; empty means every day
    available_days = Column(JSON, nullable=False, default=list)
    is_available = Column(Boolean, nullable=False, default=True)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("tables.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False, index=True)
    status = Column(String, nullable=False, default=BOOKED, index=True)
    price = Column(Integer, nullable=False, default=0)
    discount = Column(Integer, nullable=False, default=0)
    final_price = Column(Integer, nullable=False, default=0)
    # copy of the offer terms at booking time, never a live reference
    applied_offers = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    user = relationship("User", back_populates="bookings")
    table = relationship("Table", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_booking_time_range"),
        CheckConstraint(
            "status IN ('booked', 'cancelled', 'completed')", name="check_booking_status"
        ),
    )

    def __repr__(self):
        return f"<Booking id={self.id} table={self.table_id} user={self.user_id} status={self.status}>"

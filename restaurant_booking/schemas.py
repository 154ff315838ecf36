from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import BOOKING_STATUSES, TABLE_CLASSES

TableClass = Literal[TABLE_CLASSES]
BookingStatus = Literal[BOOKING_STATUSES]


# ================== TABLES ==================
class TimeRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from", pattern=r"^\d{2}:\d{2}$")
    to: str = Field(pattern=r"^\d{2}:\d{2}$")


class MenuItemIn(BaseModel):
    name: str
    category: Optional[str] = None
    veg: bool = True
    price: int = Field(0, ge=0)
    description: Optional[str] = None
    available_times: list[TimeRange] = []
    available_days: list[int] = []
    is_available: bool = True

    def to_fields(self) -> dict:
        fields = self.model_dump()
        fields["available_times"] = [t.model_dump(by_alias=True) for t in self.available_times]
        return fields


class MenuItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    category: Optional[str] = None
    veg: bool
    price: int
    description: Optional[str] = None
    available_times: list[dict] = []
    available_days: list[int] = []
    is_available: bool


class OfferIn(BaseModel):
    title: str
    description: Optional[str] = None
    bank: Optional[str] = None
    discount_percent: Optional[int] = Field(None, ge=0, le=100)
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    active: bool = True


class OfferOut(OfferIn):
    model_config = ConfigDict(from_attributes=True)


class TableIn(BaseModel):
    table_number: Optional[int] = Field(None, ge=1)
    seats: Optional[int] = Field(None, ge=1)
    is_available: Optional[bool] = None
    table_class: Optional[TableClass] = None
    class_features: Optional[list[str]] = None
    food_types: Optional[list[str]] = None
    price: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    offers: Optional[list[OfferIn]] = None
    food_menu: Optional[list[MenuItemIn]] = None

    def to_fields(self) -> dict:
        fields = self.model_dump(exclude_unset=True, exclude={"offers", "food_menu"})
        if self.offers is not None:
            fields["offers"] = [o.model_dump() for o in self.offers]
        if self.food_menu is not None:
            fields["food_menu"] = [m.to_fields() for m in self.food_menu]
        return fields


class TableOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    table_number: int
    seats: int
    is_available: bool
    table_class: str
    class_features: list[str] = []
    food_types: list[str] = []
    price: int
    notes: Optional[str] = None
    offers: list[OfferOut] = []
    food_menu: list[MenuItemOut] = []


class TableWithAvailability(TableOut):
    available: bool
    filtered_food_menu: list[MenuItemOut] = []


# ================== BOOKINGS ==================
class BookingCreate(BaseModel):
    table: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class BookingUpdate(BaseModel):
    start_time: Optional[datetime] = None


class BookingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    table_id: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    price: int
    discount: int
    final_price: int
    applied_offers: list[dict] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingWithTable(BookingOut):
    table: TableOut


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AdminBookingOut(BookingWithTable):
    user: UserOut


class BookingCreated(BaseModel):
    message: str
    booking: BookingOut
    tables: list[TableWithAvailability]


class BookingCancelled(BaseModel):
    message: str
    tables: list[TableWithAvailability]


def table_with_availability(entry) -> TableWithAvailability:
    return TableWithAvailability(
        **TableOut.model_validate(entry.table).model_dump(),
        available=entry.available,
        filtered_food_menu=[MenuItemOut.model_validate(m) for m in entry.filtered_food_menu],
    )

import logging
from datetime import date as date_type, datetime, time
from typing import Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi_mail import FastMail
from sqlalchemy.orm import Session

from . import availability, bookings, tables
from .config import mail_config, settings
from .database import Base, engine, get_db
from .errors import BookingError
from .notifications import MailNotifier
from .schemas import (
    AdminBookingOut, BookingCancelled, BookingCreate, BookingCreated, BookingOut,
    BookingUpdate, BookingWithTable, TableIn, TableOut, TableWithAvailability,
    table_with_availability,
)
from .security import Principal, get_current_principal, require_admin
from .store import SqlStore

logging.basicConfig(level=settings.LOG_LEVEL)

# ================== DATABASE ==================
Base.metadata.create_all(engine)

# ================== APP ==================
app = FastAPI(title="Restaurant Table Booking API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

mail = FastMail(mail_config())


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ================== DEPENDENCIES ==================
def get_store(db: Session = Depends(get_db)) -> SqlStore:
    return SqlStore(db)


def get_notifier(background_tasks: BackgroundTasks) -> MailNotifier:
    return MailNotifier(mail, background_tasks)


def _parse_clock(value: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError:
        raise HTTPException(400, "Invalid date/time")


# ================== API ==================
@app.get("/", response_class=PlainTextResponse)
def index():
    return "Restaurant Table Booking API is running"


@app.get("/api/tables", response_model=list[TableWithAvailability])
def list_tables(
    date: Optional[date_type] = None,
    time_: Optional[str] = Query(None, alias="time"),
    veg: Optional[bool] = None,
    food_time: Optional[str] = Query(None, alias="foodTime"),
    store: SqlStore = Depends(get_store),
):
    if date is None or time_ is None:
        raise HTTPException(400, "Date and time are required")
    check_time = datetime.combine(date, _parse_clock(time_))
    food_at = datetime.combine(date, _parse_clock(food_time)) if food_time else None

    entries = availability.list_tables(store, check_time, veg=veg, food_time=food_at)
    return [table_with_availability(e) for e in entries]


@app.get("/api/tables/{table_id}", response_model=TableOut)
def get_table(table_id: int, store: SqlStore = Depends(get_store)):
    return tables.get_table(store, table_id)


@app.post("/api/tables", response_model=TableOut, status_code=201)
def create_table(
    data: TableIn,
    store: SqlStore = Depends(get_store),
    admin: Principal = Depends(require_admin),
):
    return tables.create_table(store, data.to_fields())


@app.put("/api/tables/{table_id}", response_model=TableOut)
def update_table(
    table_id: int,
    data: TableIn,
    store: SqlStore = Depends(get_store),
    admin: Principal = Depends(require_admin),
):
    return tables.update_table(store, table_id, data.to_fields())


@app.delete("/api/tables/{table_id}")
def delete_table(
    table_id: int,
    store: SqlStore = Depends(get_store),
    admin: Principal = Depends(require_admin),
):
    tables.delete_table(store, table_id)
    return {"message": "Table deleted successfully"}


@app.post("/api/bookings", response_model=BookingCreated, status_code=201)
def create_booking(
    data: BookingCreate,
    store: SqlStore = Depends(get_store),
    notifier: MailNotifier = Depends(get_notifier),
    principal: Principal = Depends(get_current_principal),
):
    result = bookings.create_booking(
        store, notifier, principal.id, data.table,
        start_time=data.start_time, end_time=data.end_time,
    )
    return BookingCreated(
        message="Booking created successfully",
        booking=BookingOut.model_validate(result.booking),
        tables=[table_with_availability(e) for e in result.tables],
    )


@app.get("/api/bookings/me", response_model=list[BookingWithTable])
def my_bookings(
    store: SqlStore = Depends(get_store),
    principal: Principal = Depends(get_current_principal),
):
    return bookings.get_user_bookings(store, principal.id)


@app.put("/api/bookings/{booking_id}", response_model=BookingOut)
def update_booking(
    booking_id: int,
    data: BookingUpdate,
    store: SqlStore = Depends(get_store),
    notifier: MailNotifier = Depends(get_notifier),
    principal: Principal = Depends(get_current_principal),
):
    return bookings.update_booking(
        store, notifier, booking_id, principal.id, principal.role, data.start_time
    )


@app.post("/api/bookings/{booking_id}/cancel", response_model=BookingCancelled)
def cancel_booking(
    booking_id: int,
    store: SqlStore = Depends(get_store),
    notifier: MailNotifier = Depends(get_notifier),
    principal: Principal = Depends(get_current_principal),
):
    result = bookings.cancel_booking(store, notifier, booking_id, principal.id)
    return BookingCancelled(
        message="Booking cancelled",
        tables=[table_with_availability(e) for e in result.tables],
    )


# ================== ADMIN ==================
@app.get("/api/admin/bookings", response_model=list[AdminBookingOut])
def admin_bookings(
    store: SqlStore = Depends(get_store),
    admin: Principal = Depends(require_admin),
):
    return bookings.list_all_bookings(store)

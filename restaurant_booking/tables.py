import logging

from sqlalchemy.exc import IntegrityError

from .errors import Conflict, InvalidInput, NotFound
from .models import MenuItem, Offer, Table

logger = logging.getLogger(__name__)

TABLE_FIELDS = (
    "table_number",
    "seats",
    "is_available",
    "table_class",
    "class_features",
    "food_types",
    "price",
    "notes",
)


def _apply_fields(table: Table, fields: dict) -> None:
    for name in TABLE_FIELDS:
        if fields.get(name) is not None:
            setattr(table, name, fields[name])
    if fields.get("offers") is not None:
        table.offers = [Offer(**o) for o in fields["offers"]]
    if fields.get("food_menu") is not None:
        table.food_menu = [MenuItem(**m) for m in fields["food_menu"]]


def _save(store, table: Table) -> None:
    # a concurrent write can take the number between the check and the flush
    try:
        store.save_table(table)
    except IntegrityError as e:
        if "table_number" in str(e.orig):
            raise Conflict("Table number already exists") from e
        raise


def get_table(store, table_id: int) -> Table:
    table = store.find_table(table_id)
    if table is None:
        raise NotFound("Table not found")
    return table


def create_table(store, fields: dict) -> Table:
    if not fields.get("table_number") or not fields.get("seats"):
        raise InvalidInput("Please provide table number & seats")

    with store.transaction():
        if store.find_table_by_number(fields["table_number"]) is not None:
            raise Conflict("Table number already exists")
        table = Table(is_available=True)
        _apply_fields(table, fields)
        _save(store, table)

    logger.info("Table %s created", table.table_number)
    return table


def update_table(store, table_id: int, fields: dict) -> Table:
    """Partial update; offers and food_menu, when given, replace the lists."""
    with store.transaction():
        table = get_table(store, table_id)
        number = fields.get("table_number")
        if number is not None and number != table.table_number:
            if store.find_table_by_number(number) is not None:
                raise Conflict("Table number already exists")
        _apply_fields(table, fields)
        _save(store, table)

    logger.info("Table %s updated", table.table_number)
    return table


def delete_table(store, table_id: int) -> None:
    with store.transaction():
        table = get_table(store, table_id)
        if store.count_table_bookings(table.id):
            raise Conflict("Table has bookings; mark it unavailable instead")
        number = table.table_number
        store.delete_table(table)

    logger.info("Table %s deleted", number)

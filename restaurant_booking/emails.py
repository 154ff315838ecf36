from datetime import datetime

CURRENCY = "₹"


def _when(value: datetime) -> str:
    return value.strftime("%d.%m.%Y %H:%M")


def _offer_line(applied_offers: list, label: str) -> str:
    if not applied_offers:
        return ""
    return f"<p><strong>{label}:</strong> {applied_offers[0]['title']}</p>"


def render_confirmation_email(table_number: int, booking) -> str:
    return f"""
    <html>
    <body>
        <h2>Booking Confirmed</h2>
        <p><strong>Table:</strong> {table_number}</p>
        <p><strong>From:</strong> {_when(booking.start_time)}</p>
        <p><strong>To:</strong> {_when(booking.end_time)}</p>
        <p><strong>Price:</strong> {CURRENCY}{booking.price}</p>
        <p><strong>Discount:</strong> {CURRENCY}{booking.discount}</p>
        <p><strong>Total:</strong> {CURRENCY}{booking.final_price}</p>
        {_offer_line(booking.applied_offers, "Offer")}
        <p>Thank you for booking with us!</p>
    </body>
    </html>
    """


def render_update_email(table_number: int, booking, old_start: datetime) -> str:
    return f"""
    <html>
    <body>
        <h2>Booking Updated</h2>
        <p>Your booking for <strong>Table {table_number}</strong> has been updated.</p>
        <p><strong>Old Time:</strong> {_when(old_start)}</p>
        <p><strong>New Time:</strong> {_when(booking.start_time)}</p>
        <p><strong>Price:</strong> {CURRENCY}{booking.price}</p>
        <p><strong>Discount:</strong> {CURRENCY}{booking.discount}</p>
        <p><strong>New Total:</strong> {CURRENCY}{booking.final_price}</p>
        {_offer_line(booking.applied_offers, "Offer Applied")}
        <p>We look forward to seeing you!</p>
    </body>
    </html>
    """


def render_cancellation_email(table_number: int, booking) -> str:
    return f"""
    <html>
    <body>
        <h2>Booking Cancelled</h2>
        <p><strong>Table:</strong> {table_number}</p>
        <p><strong>From:</strong> {_when(booking.start_time)}</p>
        <p><strong>To:</strong> {_when(booking.end_time)}</p>
        <p><strong>Amount:</strong> {CURRENCY}{booking.final_price}</p>
        <p>We hope to see you again soon.</p>
    </body>
    </html>
    """

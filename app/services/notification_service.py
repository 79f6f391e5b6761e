import html
import logging
import smtplib
from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from email.message import EmailMessage
from anyio import to_thread
from fastapi import BackgroundTasks
from app.core.config import Settings

logger = logging.getLogger(__name__)

SUBJECT = "Your Seat Booking Confirmation"


@dataclass(frozen=True)
class BookingConfirmation:
    to: str
    name: str
    seat_code: str
    booking_date: date
    price: Decimal
    event_name: str
    event_time: time
    venue: str


def render_booking_confirmation(c: BookingConfirmation) -> tuple[str, str]:
    when = f"{c.booking_date.isoformat()} {c.event_time.strftime('%H:%M')}"
    text = (
        f"Dear {c.name},\n\n"
        f"Your booking is confirmed.\n\n"
        f"Event: {c.event_name}\n"
        f"Venue: {c.venue}\n"
        f"Seat: {c.seat_code}\n"
        f"Date: {when}\n"
        f"Total Price: ₹{c.price}\n"
    )
    body = (
        "<html><body>"
        f"<h1>Your Booking Confirmation</h1>"
        f"<p>Dear {html.escape(c.name)},</p>"
        "<p>Thank you for choosing our seat booking service. Your booking is confirmed:</p>"
        "<ul>"
        f"<li><strong>Event:</strong> {html.escape(c.event_name)}</li>"
        f"<li><strong>Venue:</strong> {html.escape(c.venue)}</li>"
        f"<li><strong>Seat:</strong> {html.escape(c.seat_code)}</li>"
        f"<li><strong>Date:</strong> {when}</li>"
        f"<li><strong>Total Price:</strong> &#8377;{c.price}</li>"
        "</ul>"
        "</body></html>"
    )
    return text, body


def build_message(settings: Settings, c: BookingConfirmation) -> EmailMessage:
    text, body = render_booking_confirmation(c)
    msg = EmailMessage()
    msg["Subject"] = SUBJECT
    msg["From"] = settings.mail_from
    msg["To"] = c.to
    msg.set_content(text)
    msg.add_alternative(body, subtype="html")
    return msg


def _deliver(settings: Settings, msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15) as smtp:
        if settings.smtp_starttls:
            smtp.starttls()
        if settings.smtp_username and settings.smtp_password:
            smtp.login(settings.smtp_username, settings.smtp_password.get_secret_value())
        smtp.send_message(msg)


async def send_booking_confirmation(settings: Settings, c: BookingConfirmation) -> bool:
    """Best effort; a failure is logged and reported as False, never raised."""
    try:
        msg = build_message(settings, c)
        await to_thread.run_sync(_deliver, settings, msg)
    except (smtplib.SMTPException, OSError, ValueError):
        logger.warning(
            "Booking confirmation email failed to=%s seat=%s date=%s",
            c.to, c.seat_code, c.booking_date.isoformat(), exc_info=True
        )
        return False
    logger.info("Booking confirmation sent to=%s seat=%s date=%s", c.to, c.seat_code, c.booking_date.isoformat())
    return True


def queue_booking_confirmation(background_tasks: BackgroundTasks, settings: Settings, c: BookingConfirmation) -> str:
    if not settings.smtp_host or not settings.mail_from:
        logger.warning("SMTP not configured; no confirmation for seat=%s date=%s", c.seat_code, c.booking_date)
        return "disabled"
    background_tasks.add_task(send_booking_confirmation, settings, c)
    return "queued"

# tourdesk/services/email_service.py

import base64
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Attachment, Disposition, FileContent, FileName, FileType, Mail

from tourdesk.config.settings import Settings
from tourdesk.logging_config import get_logger
from tourdesk.services.invoice_service import company_info, generate_invoice_pdf, invoice_filename

logger = get_logger(__name__)

# (filename, mime type, raw bytes)
EmailAttachment = Tuple[str, str, bytes]


def send_email(
    settings: Settings,
    to_email: str,
    subject: str,
    text: str,
    html: str,
    attachments: Optional[Sequence[EmailAttachment]] = None,
) -> bool:
    """Core SendGrid wrapper"""
    if not settings.SENDGRID_API_KEY or not settings.SENDGRID_FROM_EMAIL:
        logger.warning("email_not_configured", to=to_email, subject=subject)
        return False

    message = Mail(
        from_email=(settings.SENDGRID_FROM_EMAIL, settings.SENDGRID_FROM_NAME),
        to_emails=to_email,
        subject=subject,
        plain_text_content=text,
        html_content=html,
    )
    for filename, mime_type, content in attachments or ():
        message.add_attachment(Attachment(
            FileContent(base64.b64encode(content).decode("ascii")),
            FileName(filename),
            FileType(mime_type),
            Disposition("attachment"),
        ))

    sg = SendGridAPIClient(settings.SENDGRID_API_KEY)
    res = sg.send(message)

    logger.info("email_sent", to=to_email, status_code=res.status_code, attachments=len(attachments or ()))
    return True


def build_booking_confirmation(booking: Dict[str, Any]) -> Tuple[str, str]:
    """Returns plain text + HTML for a paid booking"""
    ref = booking.get("id")
    tour = booking.get("tour_package_name") or "your tour"
    name = booking.get("customer_name") or "Guest"
    dates = f"{booking.get('start_date') or '-'} to {booking.get('end_date') or '-'}"
    guests = booking.get("guests") or 1
    total = booking.get("total_price")

    text = (
        f"Dear {name},\n\n"
        f"Your payment for {tour} has been received.\n"
        f"Booking reference: {ref}\n"
        f"Dates: {dates}\n"
        f"Guests: {guests}\n"
        f"Total: {total}\n"
    )

    html = f"""
    <div style="font-family:Arial; padding:20px;">
        <h2 style="color:#0F766E;">Booking Confirmed</h2>
        <p>Dear {name},</p>
        <p>Your payment for <b>{tour}</b> has been received.</p>
        <table>
            <tr><td>Booking reference</td><td><b>{ref}</b></td></tr>
            <tr><td>Dates</td><td>{dates}</td></tr>
            <tr><td>Guests</td><td>{guests}</td></tr>
            <tr><td>Total</td><td>{total}</td></tr>
        </table>
    </div>
    """

    return text, html


def send_booking_confirmations(
    settings: Settings,
    booking: Dict[str, Any],
    invoice_pdf: Optional[bytes] = None,
) -> List[str]:
    """
    Mail the customer and the admin list after a booking is paid.
    The invoice, when given, is attached to the customer's mail only.
    Failures are logged per recipient and never raised.
    """
    text, html = build_booking_confirmation(booking)
    invoice = [(invoice_filename(booking.get("id")), "application/pdf", invoice_pdf)] if invoice_pdf else None

    recipients = []
    if booking.get("customer_email"):
        recipients.append((booking["customer_email"], f"Booking {booking.get('id')} confirmed", invoice))
    for admin_email in settings.ADMIN_EMAILS:
        recipients.append((admin_email, f"New paid booking {booking.get('id')}", None))

    sent = []
    for to_email, subject, attachments in recipients:
        try:
            if send_email(settings, to_email, subject, text, html, attachments=attachments):
                sent.append(to_email)
        except Exception as e:
            logger.error("email_send_failed", to=to_email, booking_id=booking.get("id"), error=str(e))
    return sent


def send_payment_confirmation(settings: Settings, store, booking: Dict[str, Any]) -> List[str]:
    """
    Background task run once a booking becomes paid: render the invoice and
    send the confirmations. A failed render still sends the mails, without
    the attachment.
    """
    invoice_pdf = None
    try:
        invoice_pdf = generate_invoice_pdf(booking, company_info(store))
    except Exception as e:
        logger.error("invoice_generation_failed", booking_id=booking.get("id"), error=str(e))
    return send_booking_confirmations(settings, booking, invoice_pdf=invoice_pdf)

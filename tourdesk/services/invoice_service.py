# tourdesk/services/invoice_service.py

from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from tourdesk.config.sources import SETTINGS_ROW_ID, SETTINGS_TABLE
from tourdesk.exceptions import StoreError
from tourdesk.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_COMPANY = {
    "name": "Tourdesk Travel",
    "email": "info@tourdesk.lk",
    "phone": "+94 11 000 0000",
    "address": "Colombo, Sri Lanka",
}

# settings row column -> company field
_COMPANY_COLUMNS = {
    "site_name": "name",
    "contact_email": "email",
    "contact_phone": "phone",
    "contact_address": "address",
}


def company_info(store) -> Dict[str, str]:
    """Letterhead from the settings row, falling back per field to the defaults."""
    company = dict(DEFAULT_COMPANY)
    try:
        row = store.get(SETTINGS_TABLE, SETTINGS_ROW_ID) or {}
    except StoreError as e:
        logger.warning("invoice_company_info_unavailable", error=str(e))
        return company
    for column, key in _COMPANY_COLUMNS.items():
        if row.get(column):
            company[key] = row[column]
    return company


def invoice_filename(booking_id: str) -> str:
    return f"Invoice-{booking_id}.pdf"


def _long_date(value: Any) -> str:
    """2026-12-01 -> December 1, 2026. Unparseable values are shown as given."""
    if not value:
        return "-"
    if isinstance(value, (date, datetime)):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return str(value)
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


def _money(value: Any, currency: str = "LKR") -> str:
    try:
        return f"{currency} {float(value or 0):,.2f}"
    except (TypeError, ValueError):
        return f"{currency} {value}"


def generate_invoice_pdf(booking: Dict[str, Any], company: Optional[Dict[str, str]] = None) -> bytes:
    """Render the invoice for a booking and return the PDF document bytes."""
    # Paragraph parses its text as markup
    company = {k: escape(v) for k, v in (company or DEFAULT_COMPANY).items()}
    booking = {k: escape(v) if isinstance(v, str) else v for k, v in booking.items()}
    styles = getSampleStyleSheet()
    centered = ParagraphStyle("centered", parent=styles["Normal"], alignment=TA_CENTER)
    right = ParagraphStyle("right", parent=styles["Normal"], alignment=TA_RIGHT)
    muted = ParagraphStyle("muted", parent=centered, fontSize=8, textColor=colors.HexColor("#666666"))

    guests = booking.get("guests") or 1
    total = _money(booking.get("total_price"))
    payment_status = str(booking.get("payment_status") or "pending").upper()

    story = [
        Paragraph("INVOICE", styles["Title"]),
        Paragraph(company["name"], centered),
        Paragraph(company["address"], centered),
        Paragraph(f"Email: {company['email']}", centered),
        Paragraph(f"Phone: {company['phone']}", centered),
        Spacer(1, 18),
        Paragraph(f"Invoice Number: {booking.get('id')}", right),
        Paragraph(f"Invoice Date: {_long_date(booking.get('created_at'))}", right),
        Spacer(1, 12),
        Paragraph("Bill To:", styles["Heading4"]),
        Paragraph(booking.get("customer_name") or "-", styles["Normal"]),
        Paragraph(booking.get("customer_email") or "-", styles["Normal"]),
    ]
    if booking.get("customer_phone"):
        story.append(Paragraph(booking["customer_phone"], styles["Normal"]))

    story += [
        Spacer(1, 12),
        Paragraph("Booking Details", styles["Heading4"]),
        Paragraph(f"Tour Package: {booking.get('tour_package_name') or '-'}", styles["Normal"]),
        Paragraph(f"Start Date: {_long_date(booking.get('start_date'))}", styles["Normal"]),
        Paragraph(f"End Date: {_long_date(booking.get('end_date'))}", styles["Normal"]),
        Paragraph(f"Number of Guests: {guests}", styles["Normal"]),
        Spacer(1, 12),
    ]

    items = Table(
        [
            ["Description", "Quantity", "Amount"],
            [Paragraph(booking.get("tour_package_name") or "Tour package", styles["Normal"]), f"{guests} guest(s)", total],
            ["", "Total Amount:", total],
        ],
        colWidths=[260, 100, 120],
    )
    items.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (1, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEBELOW", (0, 0), (-1, 0), 0.75, colors.black),
        ("LINEBELOW", (0, 1), (-1, 1), 0.5, colors.grey),
        ("ALIGN", (2, 0), (2, -1), "RIGHT"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    story += [items, Spacer(1, 12), Paragraph(f"Payment Status: {payment_status}", styles["Normal"])]
    if booking.get("payment_method"):
        story.append(Paragraph(f"Payment Method: {booking['payment_method']}", styles["Normal"]))
    if booking.get("payment_id"):
        story.append(Paragraph(f"Payment ID: {booking['payment_id']}", styles["Normal"]))

    story += [
        Spacer(1, 24),
        Paragraph(f"Thank you for choosing {company['name']}!", centered),
        Paragraph("For any inquiries, please contact us at:", centered),
        Paragraph(f"{company['email']} | {company['phone']}", centered),
        Spacer(1, 8),
        Paragraph("This is an automatically generated invoice.", muted),
    ]

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=f"Invoice {booking.get('id')}",
    )
    doc.build(story)
    return buffer.getvalue()

"""Invoice and export rendering, plus the stay arithmetic they share."""
from __future__ import annotations

import math
from datetime import date, timedelta
from decimal import Decimal
from io import BytesIO
from typing import Iterable, Sequence
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .config import Settings
from .models import Booking, BookingStatus

EXPORT_COLUMNS = (
    ("ID", 10),
    ("Customer Name", 25),
    ("Customer Email", 30),
    ("Room Number", 15),
    ("Room Type", 20),
    ("Check-In", 20),
    ("Check-Out", 20),
    ("Status", 15),
)


def nights_between(check_in: date, check_out: date) -> int:
    """Nights stayed, rounded up to whole days."""

    return math.ceil((check_out - check_in) / timedelta(days=1))


def booking_amount(booking: Booking) -> Decimal:
    return nights_between(booking.check_in, booking.check_out) * Decimal(booking.room.tariff)


def total_revenue(bookings: Iterable[Booking]) -> Decimal:
    """Revenue over checked-out bookings; other statuses contribute nothing."""

    return sum(
        (booking_amount(booking) for booking in bookings if booking.status == BookingStatus.CHECKED_OUT),
        Decimal("0"),
    )


def _format_money(amount: Decimal, currency: str) -> str:
    return f"{currency}{amount.quantize(Decimal('0.01'))}"


def build_bookings_workbook(bookings: Sequence[Booking]) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Bookings"
    worksheet.append([header for header, _ in EXPORT_COLUMNS])
    for cell in worksheet[1]:
        cell.font = Font(bold=True)
    for index, (_, width) in enumerate(EXPORT_COLUMNS, start=1):
        worksheet.column_dimensions[get_column_letter(index)].width = width

    for booking in bookings:
        worksheet.append(
            [
                booking.id,
                booking.customer_name,
                booking.customer_email,
                booking.room.room_number,
                booking.room.type.value,
                booking.check_in.isoformat(),
                booking.check_out.isoformat(),
                booking.status.value,
            ]
        )

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_invoice_pdf(booking: Booking, settings: Settings, issued_on: date) -> bytes:
    room = booking.room
    nights = nights_between(booking.check_in, booking.check_out)
    currency = settings.currency_label

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=f"Invoice {booking.id}",
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
    )
    styles = getSampleStyleSheet()
    centered = ParagraphStyle("Centered", parent=styles["Normal"], alignment=1, textColor=colors.HexColor("#7F8C8D"))
    footer = ParagraphStyle("Footer", parent=centered, fontSize=9)
    story = [
        Paragraph(settings.hotel_name, ParagraphStyle("Hotel", parent=styles["Title"], textColor=colors.HexColor("#2C3E50"))),
        Paragraph(settings.hotel_address, centered),
        Spacer(1, 8),
        HRFlowable(width="100%", color=colors.HexColor("#BDC3C7")),
        Spacer(1, 12),
        Paragraph(f"<b>Invoice ID : {booking.id}</b>", styles["Normal"]),
        Paragraph(f"Date : {issued_on.isoformat()}", styles["Normal"]),
        Paragraph(f"Customer : {escape(booking.customer_name)}", styles["Normal"]),
        Paragraph(f"Email : {escape(booking.customer_email)}", styles["Normal"]),
        Spacer(1, 12),
        Paragraph("<u>Booking Details</u>", styles["Heading3"]),
    ]

    details = Table(
        [
            ["Room Number", room.room_number, "Type", room.type.value],
            ["Stay", f"{booking.check_in.isoformat()} to {booking.check_out.isoformat()}", "", ""],
            ["Tariff per night", _format_money(Decimal(room.tariff), currency), "Total Nights", str(nights)],
        ],
        colWidths=[110, 170, 90, 125],
    )
    details.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTNAME", (2, 0), (2, -1), "Helvetica-Bold"),
                ("TEXTCOLOR", (0, 0), (-1, -1), colors.HexColor("#2C3E50")),
                ("SPAN", (1, 1), (3, 1)),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    story.append(details)
    story.append(Spacer(1, 16))

    total = Table([["Total Amount :", _format_money(booking_amount(booking), currency)]], colWidths=[250, 245])
    total.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#FDEDEC")),
                ("BOX", (0, 0), (-1, -1), 1, colors.HexColor("#E74C3C")),
                ("TEXTCOLOR", (1, 0), (1, 0), colors.HexColor("#E74C3C")),
                ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (1, 0), "RIGHT"),
                ("FONTSIZE", (1, 0), (1, 0), 14),
            ]
        )
    )
    story.append(total)
    story.append(Spacer(1, 40))
    story.append(HRFlowable(width="100%", color=colors.HexColor("#BDC3C7")))
    story.append(Spacer(1, 6))
    story.append(Paragraph(f"Thank you for staying with {settings.hotel_name}!", footer))
    story.append(Paragraph(f"For bookings &amp; inquiries: {settings.hotel_phone} | {settings.hotel_email}", footer))
    story.append(Paragraph(f"Website: {settings.hotel_website}", footer))

    doc.build(story)
    return buffer.getvalue()

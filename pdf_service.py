from io import BytesIO
from xml.sax.saxutils import escape
from typing import Dict, Any, List, Optional
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, PageBreak
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors

from seating_logic import page_header, page_rows

# Seat column : serial column width ratio
CONTENT_WEIGHT = 85
SERIAL_WEIGHT = 30


def _column_widths(columns: int, available_width: float) -> List[float]:
    unit = available_width / (columns * (CONTENT_WEIGHT + SERIAL_WEIGHT))
    widths = []
    for _ in range(columns):
        widths.extend([CONTENT_WEIGHT * unit, SERIAL_WEIGHT * unit])
    return widths


def _page_title(hall: str, from_date: Optional[str], to_date: Optional[str], styles) -> List[Any]:
    title_style = styles["Heading1"]
    title_style.alignment = 1
    hall_style = styles["Heading2"]
    hall_style.alignment = 1
    date_style = styles["Normal"]
    date_style.alignment = 1

    parts: List[Any] = [
        Paragraph("Seating Arrangement", title_style),
        Paragraph(f"Hall: {escape(str(hall))}", hall_style),
    ]
    if from_date and to_date:
        parts.append(Paragraph(f"Date: {escape(from_date)} to {escape(to_date)}", date_style))
    parts.append(Spacer(1, 10))
    return parts


def build_story(plan: Dict[str, Any], from_date: Optional[str] = None,
                to_date: Optional[str] = None) -> List[Any]:
    """
    Flowables for the whole seating chart.
    - One page per layout page, halls in plan order, no blank page between halls.
    - Each seating column is drawn as two table columns: occupants and S.No.
    - The date line only appears when both dates are given.
    """
    styles = getSampleStyleSheet()
    story: List[Any] = []

    pages = [page for hall in plan.get("halls", []) for page in hall["pages"]]
    if not pages:
        story.append(Paragraph("No seating to display.", styles["Heading2"]))
        return story

    # A4 width is 595. With 30pt margins, we have 535pt available.
    available_width = A4[0] - 60

    for i, page in enumerate(pages):
        columns = page["columns"]
        table_data = [page_header(columns)] + page_rows(page)

        table = Table(table_data, colWidths=_column_widths(columns, available_width), repeatRows=1)
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ]))

        story.extend(_page_title(page["hall"], from_date, to_date, styles))
        story.append(table)

        if i < len(pages) - 1:
            story.append(PageBreak())

    return story


def generate_seating_pdf(plan: Dict[str, Any], from_date: Optional[str] = None,
                         to_date: Optional[str] = None) -> BytesIO:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=30,
        leftMargin=30,
        topMargin=30,
        bottomMargin=30,
    )
    doc.build(build_story(plan, from_date, to_date))
    buffer.seek(0)
    return buffer

import logging
import os

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from domain.reports import Dashboard
from utils.charting import pie_sections
from utils.formatting import entry_subtitle, format_amount, format_date

logger = logging.getLogger(__name__)

_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "DejaVuSans.ttf",
)


def _register_unicode_font() -> str:
    """Register a TTF font with wide glyph coverage, or fall back to Helvetica."""
    candidates = list(_FONT_CANDIDATES)
    windir = os.environ.get("WINDIR") or os.environ.get("SystemRoot")
    if windir:
        candidates.append(os.path.join(windir, "Fonts", "Arial.ttf"))

    for path in candidates:
        if not os.path.exists(path):
            continue
        name = os.path.splitext(os.path.basename(path))[0]
        try:
            pdfmetrics.registerFont(TTFont(name, path))
        except Exception:
            logger.debug("Failed to register font %s at %s", name, path, exc_info=True)
            continue
        logger.debug("Registered font %s from %s", name, path)
        return name

    logger.warning("No suitable TTF font found; falling back to Helvetica")
    return "Helvetica"


def _table(data: list[list[str]], col_widths: list[float], font_name: str) -> Table:
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("FONT", (0, 0), (-1, -1), font_name),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LEFTPADDING", (0, 0), (-1, -1), 6),
                ("RIGHTPADDING", (0, 0), (-1, -1), 6),
            ]
        )
    )
    return table


def dashboard_to_pdf(dashboard: Dashboard, filepath: str, recent_limit: int = 10) -> None:
    """Export dashboard totals, breakdowns and recent entries as a PDF."""
    if os.path.dirname(filepath):
        os.makedirs(os.path.dirname(filepath), exist_ok=True)

    doc = SimpleDocTemplate(
        filepath,
        pagesize=A4,
        leftMargin=30,
        rightMargin=30,
        topMargin=30,
        bottomMargin=30,
    )
    available_width = A4[0] - 60
    font_name = _register_unicode_font()
    styles = getSampleStyleSheet()

    summary = [["Figure", "Value"]]
    summary.append(["Balance", format_amount(dashboard.balance)])
    summary.append(["Income", format_amount(dashboard.income)])
    summary.append(["Expenses", format_amount(dashboard.expenses)])
    for label, value in dashboard.saving_breakdown().items():
        summary.append([f"Savings ({label})", format_amount(value)])
    summary.append(["Invested", format_amount(dashboard.invested)])

    elems = [
        Paragraph(dashboard.title, styles["Title"]),
        _table(summary, [available_width * 0.6, available_width * 0.4], font_name),
    ]

    for title, sums in (
        ("Expense category", dashboard.expense_breakdown()),
        ("Income source", dashboard.income_breakdown()),
        ("Investment type", dashboard.investment_breakdown()),
    ):
        sections = pie_sections(sums)
        if not sections:
            continue
        data = [[title, "Amount", "Share"]]
        for section in sections:
            data.append([section.label, format_amount(section.value), f"{section.percent}%"])
        widths = [available_width * 0.5, available_width * 0.3, available_width * 0.2]
        table = _table(data, widths, font_name)
        table.setStyle(
            TableStyle(
                [
                    ("LINEBEFORE", (0, row), (0, row), 8, colors.HexColor(section.color))
                    for row, section in enumerate(sections, start=1)
                ]
            )
        )
        elems.append(Spacer(1, 14))
        elems.append(table)

    recent = dashboard.recent(recent_limit)
    if recent:
        data = [["Date", "Type", "Amount", "Details"]]
        for entry in recent:
            data.append(
                [
                    format_date(entry.date),
                    entry.kind.label,
                    format_amount(entry.amount),
                    entry_subtitle(entry),
                ]
            )
        widths = [
            available_width * 0.18,
            available_width * 0.17,
            available_width * 0.20,
            available_width * 0.45,
        ]
        elems.append(Spacer(1, 14))
        elems.append(_table(data, widths, font_name))

    doc.build(elems)
    logger.info("Dashboard exported to %s", filepath)

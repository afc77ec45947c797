import logging
import os

from openpyxl import Workbook
from openpyxl.styles import PatternFill

from domain.reports import Dashboard
from infrastructure.repositories import ENTRY_FIELDS, entry_to_dict
from utils.charting import pie_sections

logger = logging.getLogger(__name__)


def _append_breakdown(ws, title: str, sums: dict[str, float]) -> None:
    ws.append([title, "Amount", "Share (%)"])
    for section in pie_sections(sums):
        ws.append([section.label, round(section.value, 2), section.percent])
        ws.cell(row=ws.max_row, column=1).fill = PatternFill(
            fill_type="solid", start_color=section.color.lstrip("#")
        )
    ws.append(["SUBTOTAL", round(sum(sums.values(), 0.0), 2), ""])
    ws.append([""])


def dashboard_to_xlsx(dashboard: Dashboard, filepath: str) -> None:
    """Export dashboard figures and the underlying entries to XLSX."""
    wb = Workbook()
    ws = wb.active
    if ws is not None:
        ws.title = "Summary"
        ws.append([dashboard.title, ""])
        ws.append(["Figure", "Value"])
        ws.append(["Balance", round(dashboard.balance, 2)])
        ws.append(["Income", round(dashboard.income, 2)])
        ws.append(["Expenses", round(dashboard.expenses, 2)])
        for label, value in dashboard.saving_breakdown().items():
            ws.append([f"Savings ({label})", round(value, 2)])
        ws.append(["Invested", round(dashboard.invested, 2)])

    entries_ws = wb.create_sheet("Entries")
    entries_ws.append(list(ENTRY_FIELDS))
    for entry in dashboard.entries():
        row = entry_to_dict(entry)
        entries_ws.append([row[key] for key in ENTRY_FIELDS])

    bycat_ws = wb.create_sheet("By Category")
    _append_breakdown(bycat_ws, "Expense category", dashboard.expense_breakdown())
    _append_breakdown(bycat_ws, "Income source", dashboard.income_breakdown())
    _append_breakdown(bycat_ws, "Investment type", dashboard.investment_breakdown())

    summary_year, monthly_rows = dashboard.monthly_income_expense_rows()
    monthly_ws = wb.create_sheet("Yearly Report")
    monthly_ws.append([f"Month ({summary_year})", "Income", "Expense"])
    for month_label, income, expense in monthly_rows:
        monthly_ws.append([month_label, round(income, 2), round(expense, 2)])

    if os.path.dirname(filepath):
        os.makedirs(os.path.dirname(filepath), exist_ok=True)
    wb.save(filepath)
    wb.close()
    logger.info("Dashboard exported to %s", filepath)

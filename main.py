from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from prettytable import PrettyTable

import config
from app.controllers import FinanceController
from app.entry_forms import EntryForm
from backup import create_backup
from bootstrap import bootstrap_repository, configure_logging
from domain.entries import EXPENSE_CATEGORIES
from domain.errors import StorageReadFailure, StorageWriteFailure
from domain.reports import Dashboard
from utils.charting import pie_sections
from utils.csv_utils import export_entries_to_csv, import_entries_from_csv
from utils.excel_utils import dashboard_to_xlsx
from utils.formatting import format_amount
from utils.pdf_utils import dashboard_to_pdf


def _add_entry_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--date", help="YYYY-MM-DD or ISO-8601 timestamp (default: now)")
    parser.add_argument("--note", help="Free text; the income source for income entries")
    parser.add_argument(
        "--category", help=f"Expense category, e.g. {', '.join(EXPENSE_CATEGORIES[:3])}"
    )
    parser.add_argument("--subcategory", help="Expense subcategory")
    parser.add_argument("--currency", help="Saving currency: IRR or USD (default: IRR)")
    parser.add_argument(
        "--investment-type",
        dest="investment_type",
        help="Investment type: gold, stocks, crypto or other (default: other)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finance-tracker",
        description="Track family income, expenses, savings, investments and goals.",
    )
    parser.add_argument("--data", help=f"Path to the JSON data file (default: {config.JSON_PATH})")
    parser.add_argument(
        "--sqlite",
        action="store_true",
        default=config.USE_SQLITE,
        help="Store data in SQLite next to the JSON file",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help=f"Logging level (default: {config.LOG_LEVEL})",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    dashboard = commands.add_parser("dashboard", help="Show totals and breakdowns")
    dashboard.add_argument("--period", help="Limit to YYYY, YYYY-MM or YYYY-MM-DD")
    dashboard.add_argument(
        "--subcategories",
        action="store_true",
        help="Break expenses down by category and subcategory",
    )
    dashboard.add_argument(
        "--recent", type=int, default=config.RECENT_ENTRIES_LIMIT, help="Recent entries to show"
    )
    dashboard.set_defaults(handler=_cmd_dashboard)

    monthly = commands.add_parser("monthly", help="Show monthly income and expense")
    monthly.add_argument("--year", type=int, help="Year to show (default: latest with data)")
    monthly.set_defaults(handler=_cmd_monthly)

    list_cmd = commands.add_parser("list", help="List entries, newest first")
    list_cmd.add_argument("--kind", help="income, expense, saving or investment")
    list_cmd.set_defaults(handler=_cmd_list)

    add = commands.add_parser("add", help="Record a new entry")
    add.add_argument("kind", help="income, expense, saving or investment")
    add.add_argument("amount", help="Amount; negative for saving withdrawals")
    _add_entry_fields(add)
    add.set_defaults(handler=_cmd_add)

    edit = commands.add_parser("edit", help="Change an existing entry")
    edit.add_argument("id")
    edit.add_argument("--amount")
    _add_entry_fields(edit)
    edit.set_defaults(handler=_cmd_edit)

    delete = commands.add_parser("delete", help="Delete an entry")
    delete.add_argument("id")
    delete.set_defaults(handler=_cmd_delete)

    undo = commands.add_parser("undo", help="Restore the most recently deleted entry")
    undo.set_defaults(handler=_cmd_undo)

    clear = commands.add_parser("clear", help="Delete all entries (a backup is made first)")
    clear.set_defaults(handler=_cmd_clear)

    goals = commands.add_parser("goals", help="Manage the purchase checklist")
    goal_commands = goals.add_subparsers(dest="goal_command", required=True)
    goal_commands.add_parser("list", help="List goals")
    goal_add = goal_commands.add_parser("add", help="Add a goal")
    goal_add.add_argument("title")
    goal_add.add_argument("--note")
    goal_toggle = goal_commands.add_parser("toggle", help="Mark a goal done")
    goal_toggle.add_argument("id")
    goal_toggle.add_argument("--undo", action="store_true", help="Mark the goal not done")
    goal_delete = goal_commands.add_parser("delete", help="Delete a goal")
    goal_delete.add_argument("id")
    goals.set_defaults(handler=_cmd_goals)

    export = commands.add_parser("export", help="Export entries or the dashboard")
    export.add_argument("format", choices=("csv", "xlsx", "pdf"))
    export.add_argument("path")
    export.add_argument("--period", help="Limit to YYYY, YYYY-MM or YYYY-MM-DD")
    export.set_defaults(handler=_cmd_export)

    import_cmd = commands.add_parser("import", help="Import entries from a CSV export")
    import_cmd.add_argument("path")
    import_cmd.set_defaults(handler=_cmd_import)
    return parser


def _print_breakdown(title: str, sums: dict[str, float]) -> None:
    sections = pie_sections(sums)
    if not sections:
        return
    print()
    print(Dashboard.breakdown_table(title, sections))


def _cmd_dashboard(controller: FinanceController, args: argparse.Namespace) -> int:
    dashboard = controller.dashboard(args.period)
    print(dashboard.title)
    print(dashboard.summary_table())
    for label in dashboard.negative_savings():
        print(f"Warning: {label} savings balance is negative")
    _print_breakdown("Expense", dashboard.expense_breakdown(by_subcategory=args.subcategories))
    _print_breakdown("Income source", dashboard.income_breakdown())
    _print_breakdown("Investment", dashboard.investment_breakdown())
    recent = dashboard.recent(args.recent)
    if recent:
        print()
        print(Dashboard.entries_table(recent))
    return 0


def _cmd_monthly(controller: FinanceController, args: argparse.Namespace) -> int:
    if not controller.entries and args.year is None:
        print("No entries yet")
        return 0
    year, rows = controller.dashboard().monthly_income_expense_rows(args.year)
    table = PrettyTable()
    table.field_names = [f"Month ({year})", "Income", "Expense"]
    table.align["Income"] = "r"
    table.align["Expense"] = "r"
    for month_label, income, expense in rows:
        table.add_row([month_label, format_amount(income), format_amount(expense)])
    print(table)
    return 0


def _cmd_list(controller: FinanceController, args: argparse.Namespace) -> int:
    dashboard = controller.dashboard()
    entries = dashboard.of_kind(args.kind) if args.kind else dashboard.entries()
    if not entries:
        print("No entries yet")
        return 0
    print(Dashboard.entries_table(entries))
    return 0


def _cmd_add(controller: FinanceController, args: argparse.Namespace) -> int:
    form = EntryForm(
        kind=args.kind,
        amount_text=args.amount,
        date=args.date,
        note=args.note,
        category=args.category,
        subcategory=args.subcategory,
        currency=args.currency,
        investment_type=args.investment_type,
    )
    entry = controller.add_entry(form)
    print(f"Added {entry.kind.label.lower()} {format_amount(entry.amount)} (id {entry.id})")
    _warn_negative_savings(controller)
    return 0


def _cmd_edit(controller: FinanceController, args: argparse.Namespace) -> int:
    form = EntryForm.from_entry(controller.get_entry(args.id))
    overrides = {
        "amount_text": args.amount,
        "date": args.date,
        "note": args.note,
        "category": args.category,
        "subcategory": args.subcategory,
        "currency": args.currency,
        "investment_type": args.investment_type,
    }
    form = replace(form, **{key: value for key, value in overrides.items() if value is not None})
    entry = controller.edit_entry(args.id, form)
    print(f"Updated {entry.id}")
    _warn_negative_savings(controller)
    return 0


def _cmd_delete(controller: FinanceController, args: argparse.Namespace) -> int:
    removed = controller.delete_entry(args.id)
    print(f"Deleted {removed.kind.label.lower()} {format_amount(removed.amount)} (id {removed.id})")
    print("Run 'undo' to restore it")
    return 0


def _cmd_undo(controller: FinanceController, args: argparse.Namespace) -> int:
    restored = controller.undo_delete()
    if restored is None:
        print("Nothing to undo")
        return 0
    label = restored.kind.label.lower()
    print(f"Restored {label} {format_amount(restored.amount)} (id {restored.id})")
    _warn_negative_savings(controller)
    return 0


def _cmd_clear(controller: FinanceController, args: argparse.Namespace) -> int:
    backup_path = create_backup(args.data)
    controller.clear_entries()
    if backup_path:
        print(f"All entries deleted, backup saved to {backup_path}")
    else:
        print("All entries deleted")
    return 0


def _cmd_goals(controller: FinanceController, args: argparse.Namespace) -> int:
    if args.goal_command == "add":
        goal = controller.add_goal(args.title, args.note)
        print(f"Added goal {goal.title!r} (id {goal.id})")
    elif args.goal_command == "toggle":
        controller.toggle_goal(args.id, not args.undo)
        print(f"Goal {args.id} marked {'not done' if args.undo else 'done'}")
    elif args.goal_command == "delete":
        controller.delete_goal(args.id)
        print(f"Deleted goal {args.id}")
    else:
        if not controller.goals:
            print("No goals yet")
            return 0
        table = PrettyTable()
        table.field_names = ["Done", "Title", "Note", "ID"]
        table.align["Title"] = "l"
        table.align["Note"] = "l"
        for goal in controller.goals:
            table.add_row(["x" if goal.done else "", goal.title, goal.note or "", goal.id])
        print(table)
    return 0


def _cmd_export(controller: FinanceController, args: argparse.Namespace) -> int:
    dashboard = controller.dashboard(args.period)
    if args.format == "csv":
        export_entries_to_csv(dashboard.entries(), args.path)
    elif args.format == "xlsx":
        dashboard_to_xlsx(dashboard, args.path)
    else:
        dashboard_to_pdf(dashboard, args.path, recent_limit=config.RECENT_ENTRIES_LIMIT)
    print(f"Exported to {args.path}")
    return 0


def _cmd_import(controller: FinanceController, args: argparse.Namespace) -> int:
    entries, errors = import_entries_from_csv(args.path)
    for message in errors:
        print(f"Skipped {message}", file=sys.stderr)
    count = controller.import_entries(entries)
    print(f"Imported {count} of {len(entries)} entries")
    return 0


def _warn_negative_savings(controller: FinanceController) -> None:
    for label in controller.dashboard().negative_savings():
        print(f"Warning: {label} savings balance is negative")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        configure_logging(args.log_level)
    except ValueError as exc:
        print(f"Error: {exc}: {args.log_level}", file=sys.stderr)
        return 2

    args.data = args.data or config.JSON_PATH
    sqlite_path = config.SQLITE_PATH
    if args.data != config.JSON_PATH:
        sqlite_path = str(Path(args.data).with_suffix(".db"))
    try:
        repository = bootstrap_repository(
            use_sqlite=args.sqlite, json_path=args.data, sqlite_path=sqlite_path
        )
        controller = FinanceController(repository)
        controller.refresh()
        return args.handler(controller, args)
    except KeyError as exc:
        print(f"Error: {exc.args[0] if exc.args else exc}", file=sys.stderr)
        return 1
    except (ValueError, OSError, RuntimeError, StorageReadFailure, StorageWriteFailure) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

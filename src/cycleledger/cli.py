"""Command line interface for cycleledger."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import click

from .config import BaseConfig
from .constants.categories import EXPENSE_CATEGORIES, INCOME_CATEGORIES
from .errors import CycleLedgerError
from .logging_config import setup_logging
from .models.ledger import CYCLE_TYPES
from .services import export_csv
from .services.cycles import cycle_label
from .services.formatting import format_currency, format_percentage, format_signed, format_variance
from .services.tracker import CycleTracker, create_tracker


def _confirmer(assume_yes: bool):
    def confirm(message: str) -> bool:
        return assume_yes or click.confirm(message, default=False)

    return confirm


def _tracker(ctx: click.Context) -> CycleTracker:
    return ctx.obj["tracker"]


def _money(ctx: click.Context, amount) -> str:
    return format_currency(amount, ctx.obj["config"].CURRENCY_SYMBOL)


def _usage_bar(percentage, width: int = 20) -> str:
    """Text progress bar; ``percentage`` is already capped at 100."""
    filled = int(percentage * width / 100)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Echo informational log lines to the console.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Track business income and expenses per weekly, monthly or yearly cycle."""

    config = BaseConfig()
    setup_logging(config, console_level=logging.INFO if verbose else logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["tracker"] = create_tracker(config)


@cli.command("categories")
def list_categories() -> None:
    """List the valid income and expense categories."""

    click.echo("Income:")
    for name in INCOME_CATEGORIES:
        click.echo(f"  {name}")
    click.echo("Expense:")
    for name in EXPENSE_CATEGORIES:
        click.echo(f"  {name}")


@cli.command("summary")
@click.pass_context
def summary(ctx: click.Context) -> None:
    """Show totals and the per-category budget breakdown of the live cycle."""

    tracker = _tracker(ctx)
    symbol = ctx.obj["config"].CURRENCY_SYMBOL
    totals = tracker.totals()

    click.echo(f"Entity: {tracker.state.company_name}")
    click.echo(f"Cycle: {tracker.cycle_label()} (next starts {tracker.next_cycle_start().isoformat()})")
    click.echo(f"Total budget:   {_money(ctx, totals.total_budget)}")
    click.echo(f"Total income:   {_money(ctx, totals.total_income)}")
    click.echo(f"Total expenses: {_money(ctx, totals.total_expenses)}")
    click.echo(f"Variance:       {format_signed(totals.variance, symbol)}")
    click.echo(f"Net flow:       {format_signed(totals.net_flow, symbol)}")

    usage = tracker.utilization()
    if not usage.has_data:
        click.echo("Category budgets not set.")
    else:
        status = "OVER BUDGET" if usage.is_over else "REMAINING"
        click.echo(
            f"{_usage_bar(usage.normalized_percentage)} "
            f"{format_percentage(usage.spent_percentage)} of budget spent, "
            f"{_money(ctx, usage.remaining)} {status}"
        )

    click.echo("")
    for line in tracker.category_breakdown():
        status = "Over" if line.is_over else "Left"
        click.echo(
            f"{line.category}: spent {_money(ctx, line.amount_spent)} / "
            f"budget {_money(ctx, line.budget)} ({_money(ctx, line.variance)} {status})"
        )


@cli.command("list")
@click.option("--type", "txn_type", type=click.Choice(["income", "expense"]), default=None)
@click.pass_context
def list_transactions(ctx: click.Context, txn_type: str | None) -> None:
    """List live transactions, newest entry first."""

    store = _tracker(ctx).state.transactions
    rows = store.filter_by_type(txn_type) if txn_type else store
    for txn in rows:
        sign = "+" if txn.is_income else "-"
        click.echo(
            f"{txn.id}  {txn.date.isoformat()}  {sign}{_money(ctx, txn.amount)}  "
            f"{txn.category}  {txn.description}"
        )


@cli.command("add")
@click.argument("txn_type", type=click.Choice(["income", "expense"]))
@click.argument("description")
@click.argument("amount")
@click.option("--category", "-c", required=True, help="Category name matching the type.")
@click.option("--date", "txn_date", default=None, help="YYYY-MM-DD, defaults to today.")
@click.pass_context
def add_transaction(
    ctx: click.Context, txn_type: str, description: str, amount: str, category: str, txn_date: str | None
) -> None:
    """Record an income or expense transaction."""

    try:
        txn = _tracker(ctx).add_transaction(
            txn_type=txn_type,
            description=description,
            amount=amount,
            category=category,
            txn_date=txn_date or date.today(),
        )
    except CycleLedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Added {txn.type} {txn.id}: {_money(ctx, txn.amount)} ({txn.category})")


@cli.command("delete")
@click.argument("transaction_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def delete_transaction(ctx: click.Context, transaction_id: str, yes: bool) -> None:
    """Delete a live transaction."""

    tracker = _tracker(ctx)
    if tracker.state.transactions.get(transaction_id) is None:
        click.echo(f"Transaction {transaction_id} not found.")
        return
    if tracker.delete_transaction(transaction_id, confirm=_confirmer(yes)):
        click.echo(f"Deleted {transaction_id}.")
    else:
        click.echo("Nothing deleted.")


@cli.command("budget")
@click.option(
    "--set",
    "entries",
    type=(str, str),
    multiple=True,
    metavar="CATEGORY AMOUNT",
    help="Budget (expense) or forecast (income); repeatable. Blank amount means no budget.",
)
@click.pass_context
def budget(ctx: click.Context, entries: tuple[tuple[str, str], ...]) -> None:
    """Save category budgets and income forecasts, or show them."""

    tracker = _tracker(ctx)
    if entries:
        try:
            tracker.save_budgets(dict(entries))
        except CycleLedgerError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo("Budgets saved.")

    for category in EXPENSE_CATEGORIES:
        click.echo(f"{category}: budget {_money(ctx, tracker.state.budgets.get(category))}")
    for category in INCOME_CATEGORIES:
        click.echo(f"{category}: forecast {_money(ctx, tracker.state.budgets.get(category))}")


@cli.command("finalize")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def finalize(ctx: click.Context, yes: bool) -> None:
    """Archive the live cycle and start the next one."""

    tracker = _tracker(ctx)
    try:
        record = tracker.finalize(confirm=_confirmer(yes))
    except CycleLedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    if record is None:
        click.echo("Finalize cancelled.")
        return
    click.echo(
        f"Cycle finalized: {cycle_label(record.cycle_start, record.cycle_type)}, "
        f"net flow {format_signed(record.net_flow, ctx.obj['config'].CURRENCY_SYMBOL)}."
    )
    click.echo(f"Next cycle starts {tracker.state.cycle_start.isoformat()}.")


@cli.command("history")
@click.option("--limit", type=int, default=None, help="Show only the newest N cycles.")
@click.option("--details", is_flag=True, help="Include the per-category summary.")
@click.pass_context
def history(ctx: click.Context, limit: int | None, details: bool) -> None:
    """Show archived cycles, newest first."""

    symbol = ctx.obj["config"].CURRENCY_SYMBOL
    records = _tracker(ctx).history
    if not records:
        click.echo("No finalized cycles yet.")
        return
    for record in records[:limit] if limit else records:
        click.echo(
            f"{cycle_label(record.cycle_start, record.cycle_type)} [{record.id}] "
            f"budget {_money(ctx, record.starting_budget)}, "
            f"income {_money(ctx, record.total_income)}, "
            f"expenses {_money(ctx, record.total_expenses)}, "
            f"net flow {format_signed(record.net_flow, symbol)}"
            + (" (deficit)" if record.is_deficit else "")
        )
        if not details:
            continue
        for category, values in record.category_summary.items():
            is_income = "forecast" in values
            click.echo(
                f"  {category}: {format_variance(values['variance'], income=is_income, symbol=symbol)}"
            )


@cli.command("settings")
@click.option("--company", default=None, help="Company or entity name.")
@click.option("--cycle-type", type=click.Choice(CYCLE_TYPES), default=None)
@click.option("--yes", "-y", is_flag=True, help="Restart the cycle today without asking.")
@click.pass_context
def settings(ctx: click.Context, company: str | None, cycle_type: str | None, yes: bool) -> None:
    """Change the company name or the cycle period."""

    tracker = _tracker(ctx)
    if company is not None:
        tracker.rename_company(company)
    if cycle_type is not None:
        restarted = tracker.change_cycle_type(cycle_type, confirm=_confirmer(yes))
        if restarted:
            click.echo(f"Cycle restarted on {tracker.state.cycle_start.isoformat()}.")
    click.echo(f"Entity: {tracker.state.company_name}")
    click.echo(f"Cycle type: {tracker.state.cycle_type}")


@cli.command("export")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Defaults to <data dir>/exports.",
)
@click.pass_context
def export(ctx: click.Context, output_dir: Path | None) -> None:
    """Export live transactions and cycle history to CSV."""

    tracker = _tracker(ctx)
    target = output_dir or Path(ctx.obj["config"].DATA_DIR) / "exports"
    tx_path = export_csv.export_transactions_csv(
        transactions=tracker.state.transactions.sorted_for_storage(),
        output_path=target / "transactions.csv",
    )
    history_path = export_csv.export_history_csv(
        records=tracker.history, output_path=target / "history.csv"
    )
    click.echo(f"Export written: {tx_path}")
    click.echo(f"Export written: {history_path}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":  # pragma: no cover
    main()

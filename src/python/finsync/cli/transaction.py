"""Transaction CLI commands."""

from __future__ import annotations

import click

from finsync.cli.common import fail, get_client, parse_date, parse_decimal, require_session
from finsync.exceptions import FinanceError
from finsync.models import Transaction, TransactionDTO, TransactionUpdate
from finsync.schema import TRANSACTION_TYPES


def _format(record: Transaction) -> str:
    date = record.date.isoformat() if record.date else ""
    return (
        f"{record.id}\t{date}\t{record.type}\t{record.signed_amount}"
        f"\t{record.category}\t{record.description}"
    )


def _echo_page(synchronizer) -> None:
    for record in synchronizer.transactions:
        click.echo(_format(record))
    pagination = synchronizer.pagination
    click.echo(
        f"page {pagination.current_page}/{pagination.total_pages}"
        f" ({pagination.total_count} total)"
    )


@click.group()
def transaction() -> None:
    """Transaction commands."""


@transaction.command("list")
@click.option("--page", type=int, default=1, help="Page number.")
@click.option("--limit", type=int, default=None, help="Page size.")
@click.option("--category", default=None, help="Filter by category.")
@click.option("--type", "type_", type=click.Choice(TRANSACTION_TYPES), default=None)
@click.option("--start-date", default=None, help="Start date in YYYY-MM-DD.")
@click.option("--end-date", default=None, help="End date in YYYY-MM-DD.")
@click.pass_context
def list_transactions(
    ctx: click.Context,
    page: int,
    limit: int | None,
    category: str | None,
    type_: str | None,
    start_date: str | None,
    end_date: str | None,
) -> None:
    """List transactions."""
    filters = {
        "page": page,
        "category": category,
        "type": type_,
        "start_date": parse_date(start_date, "--start-date"),
        "end_date": parse_date(end_date, "--end-date"),
    }
    if limit is not None:
        filters["limit"] = limit
    with get_client(ctx) as client:
        require_session(client)
        synchronizer = client.transactions(**filters)
        synchronizer.list()
    if synchronizer.error is not None:
        raise fail("Transaction list failed", synchronizer.error)
    _echo_page(synchronizer)


@transaction.command("add")
@click.option("--amount", "amount_value", required=True, help="Transaction amount.")
@click.option("--description", required=True, help="Description, up to 200 characters.")
@click.option("--category", required=True, help="Category tag.")
@click.option("--type", "type_", type=click.Choice(TRANSACTION_TYPES), required=True)
@click.option("--date", "date_value", default=None, help="Date in YYYY-MM-DD, defaults to today.")
@click.option("--tag", "tags", multiple=True, help="Tag; repeat for several.")
@click.pass_context
def add_transaction(
    ctx: click.Context,
    amount_value: str,
    description: str,
    category: str,
    type_: str,
    date_value: str | None,
    tags: tuple[str, ...],
) -> None:
    """Add a transaction and show the refreshed list."""
    try:
        dto = TransactionDTO(
            amount=parse_decimal(amount_value, "--amount"),
            description=description,
            category=category,
            type=type_,
            date=parse_date(date_value, "--date"),
            tags=tags,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    with get_client(ctx) as client:
        require_session(client)
        synchronizer = client.transactions()
        try:
            record = synchronizer.create(dto)
        except FinanceError as error:
            raise fail("Transaction add failed", error)
    if record is not None:
        click.echo(f"Added transaction {record.id}")
    _echo_page(synchronizer)


@transaction.command("update")
@click.argument("transaction_id")
@click.option("--amount", "amount_value", default=None, help="Updated amount.")
@click.option("--description", default=None, help="Updated description.")
@click.option("--category", default=None, help="Updated category.")
@click.option("--type", "type_", type=click.Choice(TRANSACTION_TYPES), default=None)
@click.option("--date", "date_value", default=None, help="Updated date in YYYY-MM-DD.")
@click.pass_context
def update_transaction(
    ctx: click.Context,
    transaction_id: str,
    amount_value: str | None,
    description: str | None,
    category: str | None,
    type_: str | None,
    date_value: str | None,
) -> None:
    """Update a transaction."""
    try:
        changes = TransactionUpdate(
            amount=parse_decimal(amount_value, "--amount"),
            description=description,
            category=category,
            type=type_,
            date=parse_date(date_value, "--date"),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    if changes.is_empty():
        raise click.UsageError(
            "Provide --amount, --description, --category, --type, or --date."
        )
    with get_client(ctx) as client:
        require_session(client)
        synchronizer = client.transactions()
        try:
            synchronizer.update(transaction_id, changes)
        except FinanceError as error:
            raise fail("Transaction update failed", error)
    click.echo(f"Updated transaction {transaction_id}")
    _echo_page(synchronizer)


@transaction.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx: click.Context, transaction_id: str) -> None:
    """Delete a transaction."""
    with get_client(ctx) as client:
        require_session(client)
        synchronizer = client.transactions()
        try:
            synchronizer.delete(transaction_id)
        except FinanceError as error:
            raise fail("Transaction delete failed", error)
    click.echo(f"Deleted transaction {transaction_id}")
    _echo_page(synchronizer)

"""Report CLI commands."""

from __future__ import annotations

import click

from finsync.cli.common import fail, get_client, require_session
from finsync.schema import DEFAULT_PERIOD, SUMMARY_PERIODS


@click.group()
def report() -> None:
    """Report commands."""


@report.command("summary")
@click.option(
    "--period",
    type=click.Choice(SUMMARY_PERIODS),
    default=DEFAULT_PERIOD,
    show_default=True,
)
@click.pass_context
def summary(ctx: click.Context, period: str) -> None:
    """Show income, expenses, balance and the category breakdown."""
    with get_client(ctx) as client:
        require_session(client)
        reader = client.summary(period)
        reader.refresh()
    if reader.error is not None:
        raise fail("Summary failed", reader.error)
    result = reader.aggregate
    if result is None:
        raise click.ClickException("No summary available.")
    click.echo(f"income\t{result.income}")
    click.echo(f"expenses\t{result.expenses}")
    click.echo(f"balance\t{result.balance}")
    click.echo(f"expense_ratio\t{result.expense_ratio}%")
    click.echo(f"savings_rate\t{result.savings_rate}%")
    for item in result.categories:
        click.echo(f"{item.category}\t{item.amount}\t{item.count}\t{item.percentage}%")


@report.command("categories")
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List the categories in use."""
    with get_client(ctx) as client:
        require_session(client)
        reader = client.categories()
        reader.refresh()
    if reader.error is not None:
        raise fail("Categories failed", reader.error)
    for name in reader.data or []:
        click.echo(name)


@report.command("stats")
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show usage statistics."""
    with get_client(ctx) as client:
        require_session(client)
        reader = client.stats()
        reader.refresh()
    if reader.error is not None:
        raise fail("Stats failed", reader.error)
    data = reader.data
    if data is None:
        raise click.ClickException("No statistics available.")
    click.echo(f"name\t{data.name}")
    click.echo(f"member_since\t{data.member_since}")
    click.echo(f"days_active\t{data.days_active}")
    click.echo(f"monthly_income\t{data.monthly_income}")
    click.echo(f"spending_limit\t{data.spending_limit}")
    click.echo(f"profile_completion\t{data.profile_completion}%")

"""Session CLI commands."""

from __future__ import annotations

import click

from finsync.cli.common import fail, get_client, parse_decimal
from finsync.exceptions import FinanceError
from finsync.models import User


def _describe(user: User) -> str:
    age = "" if user.age is None else str(user.age)
    return f"{user.id}\t{user.email}\t{user.name}\t{age}"


@click.group()
def auth() -> None:
    """Session commands."""


@auth.command("login")
@click.argument("email")
@click.password_option("--password", confirmation_prompt=False, help="Account password.")
@click.option("--remember", is_flag=True, help="Remember this device.")
@click.pass_context
def login(ctx: click.Context, email: str, password: str, remember: bool) -> None:
    """Log in and store the session."""
    with get_client(ctx) as client:
        try:
            user = client.session_manager.login(email, password, remember_me=remember)
        except FinanceError as error:
            raise fail("Login failed", error)
    click.echo(f"Welcome, {user.name}!")


@auth.command("register")
@click.argument("email")
@click.option("--name", required=True, help="Display name.")
@click.option("--age", type=int, default=None, help="Age in years.")
@click.password_option("--password", help="Account password.")
@click.pass_context
def register(
    ctx: click.Context,
    email: str,
    name: str,
    age: int | None,
    password: str,
) -> None:
    """Create an account and store the session."""
    with get_client(ctx) as client:
        try:
            user = client.session_manager.register(email, password, name, age)
        except FinanceError as error:
            raise fail("Registration failed", error)
    click.echo(f"Account created. Welcome, {user.name}!")


@auth.command("logout")
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Forget the stored session."""
    with get_client(ctx) as client:
        client.session_manager.logout()
    click.echo("Logged out")


@auth.command("status")
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the restored session state."""
    with get_client(ctx) as client:
        session = client.session
    click.echo(f"state\t{session.state.value}")
    click.echo(f"authenticated\t{session.authenticated}")
    click.echo(f"admin\t{session.is_admin}")
    if session.user is not None:
        click.echo(f"user\t{_describe(session.user)}")


@auth.command("profile")
@click.option("--name", default=None, help="New display name.")
@click.option("--monthly-income", default=None, help="Monthly income.")
@click.option("--financial-goals", default=None, help="Free text goals.")
@click.option("--spending-limit", default=None, help="Monthly spending limit.")
@click.pass_context
def profile(
    ctx: click.Context,
    name: str | None,
    monthly_income: str | None,
    financial_goals: str | None,
    spending_limit: str | None,
) -> None:
    """Update the profile of the logged in user."""
    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = name
    profile_changes: dict[str, object] = {}
    income = parse_decimal(monthly_income, "--monthly-income")
    if income is not None:
        profile_changes["monthlyIncome"] = float(income)
    if financial_goals is not None:
        profile_changes["financialGoals"] = financial_goals
    limit = parse_decimal(spending_limit, "--spending-limit")
    if limit is not None:
        profile_changes["spendingLimit"] = float(limit)
    if profile_changes:
        changes["profile"] = profile_changes
    if not changes:
        raise click.UsageError(
            "Provide --name, --monthly-income, --financial-goals, or --spending-limit."
        )

    with get_client(ctx) as client:
        try:
            user = client.session_manager.update_profile(changes)
        except FinanceError as error:
            raise fail("Profile update failed", error)
    if user is None:
        raise click.ClickException("Not logged in. Run 'finsync auth login' first.")
    click.echo(_describe(user))

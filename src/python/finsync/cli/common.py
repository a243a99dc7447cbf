"""Shared CLI helpers."""

from __future__ import annotations

from dataclasses import replace
import datetime as dt
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from finsync.client import FinanceClient
from finsync.config import load_config
from finsync.exceptions import FinanceError


def parse_date(value: str | None, field_name: str) -> dt.date | None:
    """Parse an ISO date string into a date."""
    if value is None:
        return None
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter("Use YYYY-MM-DD format.", param_hint=field_name) from exc


def parse_decimal(value: str | None, field_name: str) -> Decimal | None:
    """Parse a decimal string into a Decimal."""
    if value is None:
        return None
    try:
        parsed = Decimal(value)
    except InvalidOperation as exc:
        raise click.BadParameter("Use a valid decimal value.", param_hint=field_name) from exc
    if not parsed.is_finite():
        raise click.BadParameter("Use a finite decimal value.", param_hint=field_name)
    return parsed


def get_client(ctx: click.Context) -> FinanceClient:
    """Build a finance client from Click context options layered over the config file."""
    payload = ctx.obj or {}
    config = load_config(payload.get("config_path"))
    if payload.get("api_url"):
        config = replace(config, api_url=payload["api_url"])
    if payload.get("timeout") is not None:
        config = replace(config, timeout_seconds=payload["timeout"])
    store_path: Path | None = payload.get("store_path")
    return FinanceClient(config=config, store_path=store_path)


def fail(label: str, error: FinanceError) -> click.ClickException:
    """Turn a normalized error into a ClickException with its category."""
    return click.ClickException(f"{label}: {error.message} [{error.category.value}]")


def require_session(client: FinanceClient) -> None:
    """Abort unless the restored session is authenticated."""
    session = client.session
    if session.authenticated:
        return
    if session.user is not None:
        raise click.ClickException(
            "Backend unavailable; showing cached session only. Log in again when it is back."
        )
    raise click.ClickException("Not logged in. Run 'finsync auth login' first.")

"""Integration tests for summary, categories and stats readers."""

from __future__ import annotations

from decimal import Decimal

import pytest
import requests

from finsync.api import FinanceAPI
from finsync.exceptions import ErrorCategory
from finsync.readers import CategoriesReader, SummaryReader, UserStatsReader
from finsync.session import SessionManager


def _seed(backend, user_id: str) -> None:
    backend.add_transaction(user_id, amount=1000, type="income", category="salario", description="Salário")
    backend.add_transaction(user_id, amount=300, type="expense", category="food", description="Mercado")
    backend.add_transaction(user_id, amount=200, type="expense", category="transport", description="Ônibus")


@pytest.mark.sit
def test_summary_reader_aggregates(logged_in: SessionManager, api: FinanceAPI, backend) -> None:
    _seed(backend, logged_in.user.id)
    reader = SummaryReader(api, logged_in.user.id, period="7d")

    summary = reader.refresh()

    assert summary.income == Decimal("1000")
    assert backend.requests[-1]["params"] == {"period": "7d"}
    aggregate = reader.aggregate
    assert aggregate.balance == Decimal("500")
    assert aggregate.share("food").percentage == 60
    assert aggregate.share("transport").percentage == 40


@pytest.mark.sit
def test_summary_reader_keeps_data_on_failure(logged_in: SessionManager, api: FinanceAPI, backend) -> None:
    _seed(backend, logged_in.user.id)
    reader = SummaryReader(api, logged_in.user.id)
    first = reader.refresh()
    backend.fail("GET", "/transactions/user/", status=503)

    assert reader.set_period("90d") is first
    assert reader.error.category is ErrorCategory.SERVICE_UNAVAILABLE
    assert reader.period == "90d"
    assert reader.loading is False


def test_summary_reader_rejects_unknown_period(api: FinanceAPI) -> None:
    with pytest.raises(ValueError):
        SummaryReader(api, "user-1", period="2w")


@pytest.mark.sit
def test_categories_reader(logged_in: SessionManager, api: FinanceAPI, backend) -> None:
    _seed(backend, logged_in.user.id)
    reader = CategoriesReader(api, logged_in.user.id)

    assert reader.refresh() == ["food", "salario", "transport"]


@pytest.mark.sit
def test_stats_reader(logged_in: SessionManager, api: FinanceAPI) -> None:
    reader = UserStatsReader(api, logged_in.user.id)

    stats = reader.refresh()

    assert stats.name == "Ana Souza"
    assert stats.monthly_income == Decimal("5000")
    assert stats.profile_completion == 100


@pytest.mark.sit
def test_stats_reader_network_failure(logged_in: SessionManager, api: FinanceAPI, backend) -> None:
    backend.fail("GET", "/users/stats", exc=requests.ConnectionError("refused"))
    reader = UserStatsReader(api, logged_in.user.id)

    assert reader.refresh() is None
    assert reader.error.category is ErrorCategory.NETWORK_UNREACHABLE


@pytest.mark.sit
def test_readers_without_user_are_noops(api: FinanceAPI, backend) -> None:
    for reader in (SummaryReader(api, None), CategoriesReader(api, ""), UserStatsReader(api, None)):
        assert reader.refresh() is None
        assert reader.error is None
    assert backend.requests == []

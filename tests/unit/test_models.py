from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from finsync.models import (
    Pagination,
    Session,
    SessionState,
    TransactionDTO,
    TransactionFilter,
    TransactionUpdate,
    User,
    normalize_transaction,
    normalize_user,
    quantize_amount,
)


def test_normalize_user_snake_case_flat_payload(sample_user_payload: dict) -> None:
    user = normalize_user(sample_user_payload)

    assert user.id == "64f1c0ffee"
    assert user.name == "Bruno Lima"
    assert user.age == 42
    assert user.active is False
    assert user.created_at == "2024-03-01T10:00:00.000Z"
    assert user.updated_at == "2024-03-02T10:00:00.000Z"
    assert user.profile.monthly_income == Decimal("4200.5")
    assert user.profile.financial_goals == "Viajar"
    assert user.profile.spending_limit == Decimal("1500")


def test_normalize_user_unwraps_envelopes() -> None:
    inner = {"id": "u1", "email": "a@b.com", "name": "Ana"}

    assert normalize_user({"user": inner}) == normalize_user(inner)
    assert normalize_user({"data": {"user": inner}}) == normalize_user(inner)


def test_normalize_user_defaults() -> None:
    user = normalize_user({"id": "u1"})

    assert user.email == ""
    assert user.name == "Usuário"
    assert user.age is None
    assert user.active is True
    assert user.created_at == ""
    assert user.updated_at == ""
    assert user.profile.monthly_income == Decimal("0")
    assert user.profile.financial_goals == ""


def test_normalize_user_nested_profile_wins_over_top_level() -> None:
    user = normalize_user(
        {
            "id": "u1",
            "monthlyIncome": 100,
            "profile": {"monthly_income": 200, "monthlyIncome": 300},
        }
    )

    assert user.profile.monthly_income == Decimal("200")


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "u1", "email": "a@b.com", "name": "Ana", "isActive": True},
        {"_id": "u2", "fullName": "Bia", "is_active": False, "age": 30},
        {"user": {"id": "u3", "profile": {"monthlyIncome": "10.5"}}},
        {"data": {"user": {"id": "u4", "created_at": "2024-01-01"}}},
    ],
)
def test_normalize_user_is_idempotent(payload: dict) -> None:
    once = normalize_user(payload)

    assert normalize_user(once) == once
    assert normalize_user(once.to_payload()) == once


def test_normalize_user_rejects_non_mapping() -> None:
    with pytest.raises(ValueError):
        normalize_user(["not", "a", "user"])


def test_user_payload_omits_missing_age() -> None:
    payload = normalize_user({"id": "u1"}).to_payload()

    assert "age" not in payload
    assert payload["isActive"] is True
    assert payload["profile"]["monthlyIncome"] == 0.0


def test_normalize_transaction_uses_absolute_rounded_amount() -> None:
    transaction = normalize_transaction(
        {
            "_id": "t1",
            "user_id": "u1",
            "amount": "-12.345",
            "description": "Mercado",
            "category": "alimentacao",
            "type": "expense",
            "date": "2024-05-10T00:00:00.000Z",
            "tags": ["casa"],
        }
    )

    assert transaction.id == "t1"
    assert transaction.user_id == "u1"
    assert transaction.amount == Decimal("12.35")
    assert transaction.signed_amount == Decimal("-12.35")
    assert transaction.date == dt.date(2024, 5, 10)
    assert transaction.tags == ("casa",)


@pytest.mark.parametrize("raw", ["NaN", "-Infinity", "abc"])
def test_normalize_transaction_non_finite_amount_is_zero(raw: str) -> None:
    transaction = normalize_transaction({"_id": "t1", "amount": raw, "type": "expense"})

    assert transaction.amount == Decimal("0.00")
    assert transaction.amount >= 0


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "sNaN"])
def test_non_finite_amounts_are_rejected(raw: str) -> None:
    with pytest.raises(ValueError):
        TransactionDTO(
            amount=raw,
            description="Mercado",
            category="alimentacao",
            type="expense",
            date=dt.date(2024, 5, 10),
        )
    with pytest.raises(ValueError):
        TransactionUpdate(amount=raw)


def test_quantize_amount_rounds_half_up() -> None:
    assert quantize_amount("10.005") == Decimal("10.01")
    assert quantize_amount(3) == Decimal("3.00")


def test_transaction_dto_validation() -> None:
    with pytest.raises(ValueError):
        TransactionDTO(amount=Decimal("0"), description="x", category="c", type="expense")

    with pytest.raises(ValueError):
        TransactionDTO(amount=Decimal("1"), description="  ", category="c", type="expense")

    with pytest.raises(ValueError):
        TransactionDTO(amount=Decimal("1"), description="x" * 201, category="c", type="expense")

    with pytest.raises(ValueError):
        TransactionDTO(amount=Decimal("1"), description="x", category="c", type="transfer")

    with pytest.raises(ValueError):
        TransactionDTO(
            amount=Decimal("1"),
            description="x",
            category="c",
            type="income",
            date=dt.date.today() + dt.timedelta(days=1),
        )


def test_transaction_dto_payload() -> None:
    dto = TransactionDTO(
        amount="19.999",
        description=" Cinema ",
        category="lazer",
        type="expense",
        date="2024-05-10",
        tags=["fds"],
    )

    assert dto.amount == Decimal("20.00")
    assert dto.to_payload("u1") == {
        "userId": "u1",
        "amount": 20.0,
        "description": "Cinema",
        "category": "lazer",
        "type": "expense",
        "date": "2024-05-10",
        "tags": ["fds"],
    }


def test_transaction_dto_defaults_date_to_today() -> None:
    dto = TransactionDTO(amount=Decimal("5"), description="Café", category="alimentacao", type="expense")

    assert dto.date == dt.date.today()


def test_transaction_update_sends_only_given_fields() -> None:
    update = TransactionUpdate(amount="7.5", category="transporte")

    assert update.to_payload() == {"amount": 7.5, "category": "transporte"}
    assert TransactionUpdate().is_empty()


def test_transaction_filter_params() -> None:
    query = TransactionFilter(
        user_id="u1",
        page=2,
        limit=10,
        category="",
        type="income",
        start_date=dt.date(2024, 1, 1),
    )

    assert query.to_params() == {
        "page": 2,
        "limit": 10,
        "type": "income",
        "startDate": "2024-01-01",
    }


def test_transaction_filter_validation() -> None:
    with pytest.raises(ValueError):
        TransactionFilter(user_id="u1", page=0)

    with pytest.raises(ValueError):
        TransactionFilter(user_id="u1", type="transfer")


def test_pagination_accepts_alternate_keys() -> None:
    assert Pagination.from_payload({"current": 2, "pages": 5, "total": 48}) == Pagination(2, 5, 48)
    assert Pagination.from_payload({"currentPage": 3, "totalPages": 4, "totalCount": 31}) == Pagination(3, 4, 31)
    assert Pagination.from_payload(None) == Pagination()


def test_authenticated_session_requires_credentials() -> None:
    with pytest.raises(ValueError):
        Session(user=None, token="t", authenticated=True)

    user = User(id="u1", email="admin@example.com", name="Root", age=None, active=True, created_at="", updated_at="")
    session = Session(user=user, token="t", authenticated=True, loading=False, state=SessionState.AUTHENTICATED)

    assert session.is_admin


def test_session_is_admin_follows_email() -> None:
    def _user(email: str) -> User:
        return User(id="u1", email=email, name="Ana", age=None, active=True, created_at="", updated_at="")

    assert Session(user=_user("admin@example.com"), token="t").is_admin is True
    assert Session(user=_user("ana@example.com"), token="t").is_admin is False
    assert Session().is_admin is False

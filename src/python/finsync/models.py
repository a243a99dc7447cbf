"""Domain models, data transfer objects and payload normalization."""

from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Mapping

from finsync.schema import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_USER_NAME,
    FILTER_PARAM_NAMES,
    MAX_DESCRIPTION_LENGTH,
    TRANSACTION_TYPES,
)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def quantize_amount(value: Decimal | str | int | float) -> Decimal:
    """Round a monetary value to two decimal places."""
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _ensure_date(value: dt.date | dt.datetime | str) -> dt.date:
    """Normalize a date, datetime or ISO string to a date."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value[:10])
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
    raise ValueError("Date must be a datetime.date")


def _ensure_not_future(value: dt.date, today: dt.date | None = None) -> dt.date:
    if value > (today or dt.date.today()):
        raise ValueError("Date must not be in the future")
    return value


def _ensure_non_empty(value: str, field_name: str) -> str:
    """Validate required text fields."""
    if not value or not value.strip():
        raise ValueError(f"{field_name} is required")
    return value.strip()


def _ensure_description(value: str) -> str:
    value = _ensure_non_empty(value, "Description")
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValueError(
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )
    return value


def _ensure_amount(value: Decimal | str | int | float) -> Decimal:
    """Parse, validate and round positive amounts."""
    try:
        amount = quantize_amount(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError("Amount must be a decimal") from exc
    if not amount.is_finite():
        raise ValueError("Amount must be a finite decimal")
    if amount <= ZERO:
        raise ValueError("Amount must be greater than zero")
    return amount


def _ensure_type(value: str) -> str:
    if value not in TRANSACTION_TYPES:
        raise ValueError(f"Type must be one of {', '.join(TRANSACTION_TYPES)}")
    return value


def _first(mapping: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value that is not None for the given keys."""
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def _first_truthy(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value:
            return value
    return None


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return ZERO
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return ZERO
    return result if result.is_finite() else ZERO


def _to_optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class UserProfile:
    """Financial profile attached to a user."""
    monthly_income: Decimal = ZERO
    financial_goals: str = ""
    spending_limit: Decimal = ZERO


@dataclass(frozen=True)
class User:
    """Canonical user shape produced by :func:`normalize_user`."""
    id: str
    email: str
    name: str
    age: int | None
    active: bool
    created_at: str
    updated_at: str
    profile: UserProfile = field(default_factory=UserProfile)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase shape used on the wire and in storage."""
        payload: dict[str, Any] = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "isActive": self.active,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "profile": {
                "monthlyIncome": float(self.profile.monthly_income),
                "financialGoals": self.profile.financial_goals,
                "spendingLimit": float(self.profile.spending_limit),
            },
        }
        if self.age is not None:
            payload["age"] = self.age
        return payload


def _unwrap_user(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Strip ``{"user": ...}`` and ``{"data": {"user": ...}}`` envelopes."""
    data = payload.get("data")
    if isinstance(data, Mapping) and not isinstance(payload.get("user"), Mapping):
        payload = data
    user = payload.get("user")
    if isinstance(user, Mapping):
        return user
    return payload


def normalize_user(payload: Mapping[str, Any] | User) -> User:
    """Map a heterogeneous server user payload into a :class:`User`.

    Accepts snake_case or camelCase keys, nested (``{"user": {...}}``) or flat
    payloads, and profile fields either under ``profile`` or at top level.
    Missing fields take deterministic defaults, so the result of normalizing
    ``user.to_payload()`` equals ``user``.

    Raises:
        ValueError: If the payload is not a mapping.
    """
    if isinstance(payload, User):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("User payload must be a mapping")

    user = _unwrap_user(payload)
    profile = user.get("profile")
    if not isinstance(profile, Mapping):
        profile = {}

    active = _first(user, "isActive", "is_active", "active")
    name = _first_truthy(user, "name", "fullName", "full_name")

    return User(
        id=str(_first_truthy(user, "id", "_id") or ""),
        email=str(user.get("email") or ""),
        name=str(name or DEFAULT_USER_NAME),
        age=_to_optional_int(user.get("age")),
        active=True if active is None else bool(active),
        created_at=str(_first_truthy(user, "createdAt", "created_at") or ""),
        updated_at=str(_first_truthy(user, "updatedAt", "updated_at") or ""),
        profile=UserProfile(
            monthly_income=_to_decimal(
                _profile_value(profile, user, "monthly_income", "monthlyIncome")
            ),
            financial_goals=str(
                _profile_value(profile, user, "financial_goals", "financialGoals") or ""
            ),
            spending_limit=_to_decimal(
                _profile_value(profile, user, "spending_limit", "spendingLimit")
            ),
        ),
    )


def _profile_value(
    profile: Mapping[str, Any],
    user: Mapping[str, Any],
    snake_key: str,
    camel_key: str,
) -> Any:
    """Nested profile keys win over top-level ones; snake_case wins inside ``profile``."""
    value = _first(profile, snake_key, camel_key)
    if value is not None:
        return value
    return _first(user, camel_key, snake_key)


@dataclass(frozen=True)
class Transaction:
    """Transaction as held in the local cache.

    ``amount`` is never negative; the sign comes from ``type``.
    """
    id: str
    user_id: str
    amount: Decimal
    description: str
    category: str
    type: str
    date: dt.date | None
    tags: tuple[str, ...] = ()
    recurring: bool = False
    recurring_period: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == "income" else -self.amount


def normalize_transaction(payload: Mapping[str, Any]) -> Transaction:
    """Build a :class:`Transaction` from a server payload."""
    if not isinstance(payload, Mapping):
        raise ValueError("Transaction payload must be a mapping")
    raw_date = payload.get("date")
    tags = payload.get("tags") or ()
    return Transaction(
        id=str(_first_truthy(payload, "id", "_id") or ""),
        user_id=str(_first_truthy(payload, "userId", "user_id") or ""),
        amount=quantize_amount(abs(_to_decimal(payload.get("amount")))),
        description=str(payload.get("description") or ""),
        category=str(payload.get("category") or ""),
        type=str(payload.get("type") or ""),
        date=_ensure_date(raw_date) if raw_date else None,
        tags=tuple(str(tag) for tag in tags),
        recurring=bool(_first(payload, "isRecurring", "is_recurring") or False),
        recurring_period=_first(payload, "recurringPeriod", "recurring_period"),
        created_at=str(_first_truthy(payload, "createdAt", "created_at") or ""),
        updated_at=str(_first_truthy(payload, "updatedAt", "updated_at") or ""),
    )


@dataclass(frozen=True)
class TransactionDTO:
    """Validated transaction input for creation."""
    amount: Decimal
    description: str
    category: str
    type: str
    date: dt.date | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _ensure_amount(self.amount))
        object.__setattr__(self, "description", _ensure_description(self.description))
        object.__setattr__(self, "category", _ensure_non_empty(self.category, "Category"))
        object.__setattr__(self, "type", _ensure_type(self.type))
        date = dt.date.today() if self.date is None else _ensure_date(self.date)
        object.__setattr__(self, "date", _ensure_not_future(date))
        object.__setattr__(self, "tags", tuple(self.tags))

    def to_payload(self, user_id: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "userId": user_id,
            "amount": float(self.amount),
            "description": self.description,
            "category": self.category,
            "type": self.type,
            "date": self.date.isoformat(),
        }
        if self.tags:
            payload["tags"] = list(self.tags)
        return payload


@dataclass(frozen=True)
class TransactionUpdate:
    """Partial transaction changes; only provided fields are validated and sent."""
    amount: Decimal | None = None
    description: str | None = None
    category: str | None = None
    type: str | None = None
    date: dt.date | None = None
    tags: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.amount is not None:
            object.__setattr__(self, "amount", _ensure_amount(self.amount))
        if self.description is not None:
            object.__setattr__(self, "description", _ensure_description(self.description))
        if self.category is not None:
            object.__setattr__(self, "category", _ensure_non_empty(self.category, "Category"))
        if self.type is not None:
            _ensure_type(self.type)
        if self.date is not None:
            object.__setattr__(self, "date", _ensure_not_future(_ensure_date(self.date)))
        if self.tags is not None:
            object.__setattr__(self, "tags", tuple(self.tags))

    def is_empty(self) -> bool:
        return not self.to_payload()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.amount is not None:
            payload["amount"] = float(self.amount)
        if self.description is not None:
            payload["description"] = self.description
        if self.category is not None:
            payload["category"] = self.category
        if self.type is not None:
            payload["type"] = self.type
        if self.date is not None:
            payload["date"] = self.date.isoformat()
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        return payload


@dataclass(frozen=True)
class TransactionFilter:
    """Query parameters for listing a user's transactions."""
    user_id: str
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE
    category: str | None = None
    type: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be at least 1")
        if self.limit < 1:
            raise ValueError("limit must be at least 1")
        if self.type is not None:
            _ensure_type(self.type)

    def to_params(self) -> dict[str, Any]:
        """Return the query string for the listing endpoint, omitting absent values."""
        params: dict[str, Any] = {}
        for attr, name in FILTER_PARAM_NAMES.items():
            value = getattr(self, attr)
            if value is None or value == "":
                continue
            if isinstance(value, dt.date):
                value = value.isoformat()
            params[name] = value
        return params


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata returned with a transaction page."""
    current_page: int = 1
    total_pages: int = 1
    total_count: int = 0

    @classmethod
    def from_payload(cls, payload: Any) -> "Pagination":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            current_page=int(_first(payload, "current", "currentPage", "page") or 1),
            total_pages=int(_first(payload, "pages", "totalPages") or 1),
            total_count=int(_first(payload, "total", "totalCount") or 0),
        )


@dataclass(frozen=True)
class TransactionPage:
    """One page of transactions plus its pagination metadata."""
    transactions: tuple[Transaction, ...] = ()
    pagination: Pagination = field(default_factory=Pagination)

    def ids(self) -> list[str]:
        return [transaction.id for transaction in self.transactions]

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class CategoryTotal:
    """Total spent in one category over a period."""
    category: str
    amount: Decimal
    count: int = 0


@dataclass(frozen=True)
class Summary:
    """Server computed or locally derived totals for a period."""
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    balance: Decimal = ZERO
    categories: tuple[CategoryTotal, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Summary":
        categories = payload.get("categories") or ()
        return cls(
            income=_to_decimal(payload.get("income")),
            expenses=_to_decimal(payload.get("expenses")),
            balance=_to_decimal(payload.get("balance")),
            categories=tuple(
                CategoryTotal(
                    category=str(item.get("category") or ""),
                    amount=_to_decimal(item.get("amount")),
                    count=int(item.get("count") or 0),
                )
                for item in categories
                if isinstance(item, Mapping)
            ),
        )


@dataclass(frozen=True)
class UserStats:
    """Usage statistics for a user."""
    name: str
    member_since: str
    days_active: int
    monthly_income: Decimal
    spending_limit: Decimal
    profile_completion: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserStats":
        return cls(
            name=str(payload.get("name") or ""),
            member_since=str(_first(payload, "member_since", "memberSince") or ""),
            days_active=int(_first(payload, "days_active", "daysActive") or 0),
            monthly_income=_to_decimal(_first(payload, "monthly_income", "monthlyIncome")),
            spending_limit=_to_decimal(_first(payload, "spending_limit", "spendingLimit")),
            profile_completion=int(
                _first(payload, "profile_completion", "profileCompletion") or 0
            ),
        )


class SessionState(str, Enum):
    """States of the session state machine."""

    INITIALIZING = "initializing"
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"
    DEGRADED_OFFLINE = "degraded_offline"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class Session:
    """Snapshot of the client session; replaced wholesale on every transition."""
    user: User | None = None
    token: str | None = None
    authenticated: bool = False
    loading: bool = True
    state: SessionState = SessionState.INITIALIZING

    def __post_init__(self) -> None:
        if self.authenticated and (self.user is None or not self.token):
            raise ValueError("An authenticated session requires a user and a token")

    @property
    def is_admin(self) -> bool:
        return bool(self.user and "admin" in self.user.email)

"""Typed access to the finance backend REST endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypeVar

from finsync.exceptions import InvalidResponseError
from finsync.models import (
    Pagination,
    Summary,
    Transaction,
    TransactionDTO,
    TransactionFilter,
    TransactionPage,
    TransactionUpdate,
    User,
    UserStats,
    normalize_transaction,
    normalize_user,
)
from finsync.normalizer import normalize_error
from finsync.schema import (
    CATEGORIES_PATH,
    DEFAULT_PERIOD,
    LOGIN_PATH,
    PROFILE_PATH,
    REGISTER_PATH,
    STATS_PATH,
    SUMMARY_PATH,
    SUMMARY_PERIODS,
    TRANSACTION_PATH,
    TRANSACTIONS_PATH,
    USER_TRANSACTIONS_PATH,
)
from finsync.transport import TransportClient

T = TypeVar("T")


MISSING_CREDENTIALS_MESSAGE = (
    "Resposta inválida do servidor: usuário ou token não encontrado"
)


@dataclass(frozen=True)
class AuthResult:
    """User and token returned by login or registration."""
    user: User
    token: str


def _unwrap_auth(payload: Any) -> AuthResult:
    """Accept ``{user, token}`` or ``{data: {user, token}}``."""
    if not isinstance(payload, Mapping):
        raise InvalidResponseError(MISSING_CREDENTIALS_MESSAGE)
    data = payload.get("data")
    if isinstance(data, Mapping):
        user = data.get("user") or payload.get("user")
        token = data.get("token") or payload.get("token")
    else:
        user = payload.get("user")
        token = payload.get("token")
    if not isinstance(user, Mapping) or not token:
        raise InvalidResponseError(MISSING_CREDENTIALS_MESSAGE)
    return AuthResult(user=normalize_user({"user": user}), token=str(token))


def _unwrap_transaction(payload: Any) -> Transaction | None:
    if not isinstance(payload, Mapping):
        return None
    for key in ("transaction", "data"):
        inner = payload.get(key)
        if isinstance(inner, Mapping):
            return normalize_transaction(inner)
    if payload.get("id") or payload.get("_id"):
        return normalize_transaction(payload)
    return None


class FinanceAPI:
    """One method per backend endpoint.

    Every failure leaves this class as a normalized
    :class:`finsync.exceptions.FinanceError`.
    """

    def __init__(self, transport: TransportClient) -> None:
        self.transport = transport

    def _call(self, action: Callable[[], T]) -> T:
        try:
            return action()
        except Exception as exc:
            raise normalize_error(exc) from exc

    # ------------------------------------------------------------------ users

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate and return the normalized user with its token."""
        payload = self._call(
            lambda: self.transport.post(
                LOGIN_PATH,
                json={"email": email, "password": password},
                broadcast_unauthorized=False,
            )
        )
        return _unwrap_auth(payload)

    def register(
        self,
        email: str,
        password: str,
        name: str,
        age: int | None = None,
    ) -> AuthResult:
        """Create an account and return the normalized user with its token."""
        body: dict[str, Any] = {"email": email, "password": password, "name": name}
        if age is not None:
            body["age"] = age
        payload = self._call(
            lambda: self.transport.post(REGISTER_PATH, json=body, broadcast_unauthorized=False)
        )
        return _unwrap_auth(payload)

    def get_profile(self, user_id: str) -> User:
        payload = self._call(lambda: self.transport.get(PROFILE_PATH.format(user_id=user_id)))
        if not isinstance(payload, Mapping):
            raise InvalidResponseError("Resposta inválida do servidor: perfil não encontrado")
        return normalize_user(payload)

    def update_profile(self, user_id: str, changes: Mapping[str, Any]) -> User:
        payload = self._call(
            lambda: self.transport.put(PROFILE_PATH.format(user_id=user_id), json=dict(changes))
        )
        if not isinstance(payload, Mapping):
            raise InvalidResponseError("Resposta inválida do servidor: perfil não encontrado")
        return normalize_user(payload)

    def get_stats(self, user_id: str) -> UserStats:
        payload = self._call(lambda: self.transport.get(STATS_PATH.format(user_id=user_id)))
        if isinstance(payload, Mapping) and isinstance(payload.get("stats"), Mapping):
            payload = payload["stats"]
        if not isinstance(payload, Mapping):
            raise InvalidResponseError("Resposta inválida do servidor: estatísticas ausentes")
        return UserStats.from_payload(payload)

    # ----------------------------------------------------------- transactions

    def list_transactions(self, query: TransactionFilter) -> TransactionPage:
        payload = self._call(
            lambda: self.transport.get(
                USER_TRANSACTIONS_PATH.format(user_id=query.user_id),
                params=query.to_params(),
            )
        )
        if not isinstance(payload, Mapping):
            payload = {}
        items = payload.get("transactions") or []
        return TransactionPage(
            transactions=tuple(
                normalize_transaction(item) for item in items if isinstance(item, Mapping)
            ),
            pagination=Pagination.from_payload(payload.get("pagination")),
        )

    def get_transaction(self, transaction_id: str) -> Transaction:
        payload = self._call(
            lambda: self.transport.get(TRANSACTION_PATH.format(transaction_id=transaction_id))
        )
        transaction = _unwrap_transaction(payload)
        if transaction is None:
            raise InvalidResponseError("Resposta inválida do servidor: transação não encontrada")
        return transaction

    def create_transaction(self, user_id: str, data: TransactionDTO) -> Transaction | None:
        payload = self._call(
            lambda: self.transport.post(TRANSACTIONS_PATH, json=data.to_payload(user_id))
        )
        return _unwrap_transaction(payload)

    def update_transaction(self, transaction_id: str, data: TransactionUpdate) -> Transaction | None:
        payload = self._call(
            lambda: self.transport.put(
                TRANSACTION_PATH.format(transaction_id=transaction_id),
                json=data.to_payload(),
            )
        )
        return _unwrap_transaction(payload)

    def delete_transaction(self, transaction_id: str) -> None:
        self._call(
            lambda: self.transport.delete(TRANSACTION_PATH.format(transaction_id=transaction_id))
        )

    def get_summary(self, user_id: str, period: str = DEFAULT_PERIOD) -> Summary:
        if period not in SUMMARY_PERIODS:
            raise ValueError(f"period must be one of {', '.join(SUMMARY_PERIODS)}")
        payload = self._call(
            lambda: self.transport.get(
                SUMMARY_PATH.format(user_id=user_id),
                params={"period": period},
            )
        )
        if isinstance(payload, Mapping) and isinstance(payload.get("summary"), Mapping):
            payload = payload["summary"]
        if not isinstance(payload, Mapping):
            raise InvalidResponseError("Resposta inválida do servidor: resumo ausente")
        return Summary.from_payload(payload)

    def get_categories(self, user_id: str) -> list[str]:
        payload = self._call(lambda: self.transport.get(CATEGORIES_PATH.format(user_id=user_id)))
        if not isinstance(payload, Mapping):
            return []
        return [str(category) for category in payload.get("categories") or []]

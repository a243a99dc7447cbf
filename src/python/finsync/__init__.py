"""Public finsync package exports."""

from __future__ import annotations

from finsync.__version__ import __version__
from finsync.aggregation import Aggregate, CategoryShare, aggregate_summary, aggregate_transactions
from finsync.api import AuthResult, FinanceAPI
from finsync.client import FinanceClient
from finsync.config import ClientConfig, load_config
from finsync.events import InvalidationBus, InvalidationEvent
from finsync.exceptions import (
    ConflictError,
    ErrorCategory,
    FinanceError,
    InvalidInputError,
    InvalidResponseError,
    NetworkUnreachableError,
    RequestTimeoutError,
    ServiceUnavailableError,
    UnauthorizedError,
    UnknownError,
)
from finsync.models import (
    Session,
    SessionState,
    Summary,
    Transaction,
    TransactionDTO,
    TransactionFilter,
    TransactionPage,
    TransactionUpdate,
    User,
    normalize_transaction,
    normalize_user,
)
from finsync.normalizer import normalize_error
from finsync.persistence import PersistenceStore
from finsync.readers import CategoriesReader, SummaryReader, UserStatsReader
from finsync.session import SessionManager
from finsync.store import JsonFileStore, MemoryStore
from finsync.transactions import TransactionSynchronizer
from finsync.transport import TransportClient

__all__ = [
    "__version__",
    "Aggregate",
    "AuthResult",
    "CategoriesReader",
    "CategoryShare",
    "ClientConfig",
    "ConflictError",
    "ErrorCategory",
    "FinanceAPI",
    "FinanceClient",
    "FinanceError",
    "InvalidInputError",
    "InvalidResponseError",
    "InvalidationBus",
    "InvalidationEvent",
    "JsonFileStore",
    "MemoryStore",
    "NetworkUnreachableError",
    "PersistenceStore",
    "RequestTimeoutError",
    "ServiceUnavailableError",
    "Session",
    "SessionManager",
    "SessionState",
    "Summary",
    "SummaryReader",
    "Transaction",
    "TransactionDTO",
    "TransactionFilter",
    "TransactionPage",
    "TransactionSynchronizer",
    "TransactionUpdate",
    "TransportClient",
    "UnauthorizedError",
    "UnknownError",
    "User",
    "UserStatsReader",
    "aggregate_summary",
    "aggregate_transactions",
    "load_config",
    "normalize_error",
    "normalize_transaction",
    "normalize_user",
]

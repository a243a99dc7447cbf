"""Client orchestration layer for finsync."""

from __future__ import annotations

from pathlib import Path
import logging
import os

import requests

from finsync.api import FinanceAPI
from finsync.config import ClientConfig, load_config
from finsync.events import InvalidationBus
from finsync.persistence import PersistenceStore
from finsync.readers import CategoriesReader, SummaryReader, UserStatsReader
from finsync.schema import DEFAULT_PERIOD, TOKEN_KEY
from finsync.session import SessionManager
from finsync.store import JsonFileStore
from finsync.transactions import TransactionSynchronizer
from finsync.transport import TransportClient

# Configure logging
logger = logging.getLogger("finsync")
log_level = os.environ.get('LOGGING_LEVEL', 'INFO').upper()
logger.setLevel(getattr(logging, log_level, logging.INFO))
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(levelname)s - %(name)s - %(message)s'))
    logger.addHandler(handler)


class FinanceClient:
    """Wire store, transport, invalidation bus, session and synchronizers together."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        store: PersistenceStore | None = None,
        store_path: str | Path | None = None,
        http_session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Settings; loaded with :func:`load_config` when omitted.
            store: Credential store; a :class:`JsonFileStore` at ``store_path``
                (or ``config.store_path``) when omitted.
            store_path: Location of the JSON store when ``store`` is omitted.
            http_session: Optional ``requests.Session`` to send requests with.
        """
        self.config = config or load_config()
        self.store = store or JsonFileStore(store_path or self.config.store_path)
        self.bus = InvalidationBus()
        self.transport = TransportClient(
            base_url=self.config.api_url,
            token_provider=lambda: self.store.get(TOKEN_KEY),
            bus=self.bus,
            timeout_seconds=self.config.timeout_seconds,
            session=http_session,
        )
        self.api = FinanceAPI(self.transport)
        self.session_manager = SessionManager(self.api, self.store, self.bus)

    def __enter__(self) -> "FinanceClient":
        """Restore the stored session."""
        self.session_manager.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Stop listening for invalidation and close the HTTP session."""
        self.session_manager.close()
        self.transport.close()

    @property
    def session(self):
        return self.session_manager.session

    def _current_user_id(self) -> str:
        # Degraded sessions keep a cached user but must not reach the backend
        session = self.session_manager.session
        if not session.authenticated or session.user is None:
            return ""
        return session.user.id

    def transactions(self, **filters) -> TransactionSynchronizer:
        """Build a synchronizer for the authenticated user.

        Without an authenticated user every operation on it is a no-op.
        """
        filters.setdefault("limit", self.config.default_page_size)
        return TransactionSynchronizer(self.api, self._current_user_id(), **filters)

    def summary(self, period: str = DEFAULT_PERIOD) -> SummaryReader:
        return SummaryReader(self.api, self._current_user_id(), period)

    def categories(self) -> CategoriesReader:
        return CategoriesReader(self.api, self._current_user_id())

    def stats(self) -> UserStatsReader:
        return UserStatsReader(self.api, self._current_user_id())

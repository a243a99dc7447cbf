"""Transaction listing and mutations with read-after-write consistency."""

from __future__ import annotations

import dataclasses
import logging
import threading
from typing import Any, Mapping

from finsync.api import FinanceAPI
from finsync.exceptions import FinanceError
from finsync.models import (
    Pagination,
    Transaction,
    TransactionDTO,
    TransactionFilter,
    TransactionPage,
    TransactionUpdate,
)
from finsync.normalizer import normalize_error

logger = logging.getLogger(__name__)


class TransactionSynchronizer:
    """Hold one user's filtered transaction page and keep it in step with the server.

    Guarantees:

    - Every successful ``create``/``update``/``delete`` is followed by a full
      ``list()`` with the filter in effect at that moment, issued only after
      the mutation's response arrived. The cached page is only ever replaced
      wholesale.
    - A failed read keeps the previous page and records the error in
      ``error``; a failed mutation raises and triggers no refetch.
    - A page fetched under a filter that has since been replaced is dropped.
    - Without a user id every operation returns None and sends nothing.

    Two mutations started concurrently are not serialized: the page left in
    the cache is the one from whichever refetch finishes last.
    """

    def __init__(
        self,
        api: FinanceAPI,
        user_id: str | None,
        **filters: Any,
    ) -> None:
        self.api = api
        self._lock = threading.RLock()
        self._query = TransactionFilter(user_id=user_id or "", **filters)
        self._page = TransactionPage()
        self._error: FinanceError | None = None
        self._in_flight = 0
        self._generation = 0

    # ---------------------------------------------------------------- state

    @property
    def user_id(self) -> str:
        return self._query.user_id

    @property
    def query(self) -> TransactionFilter:
        with self._lock:
            return self._query

    @property
    def page(self) -> TransactionPage:
        with self._lock:
            return self._page

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self.page.transactions

    @property
    def pagination(self) -> Pagination:
        return self.page.pagination

    @property
    def error(self) -> FinanceError | None:
        with self._lock:
            return self._error

    @property
    def loading(self) -> bool:
        with self._lock:
            return self._in_flight > 0

    # ----------------------------------------------------------------- reads

    def list(self) -> TransactionPage | None:
        """Fetch the page for the current filter and replace the cache with it.

        Failures are stored in ``error``; the previous page stays available.
        """
        with self._lock:
            query = self._query
            generation = self._generation
            if not query.user_id:
                return None
            self._in_flight += 1
            self._error = None

        try:
            page = self.api.list_transactions(query)
        except Exception as exc:
            error = normalize_error(exc)
            logger.error("Listing transactions failed: %s", error.message)
            with self._lock:
                self._in_flight -= 1
                if generation == self._generation:
                    self._error = error
                return self._page

        with self._lock:
            self._in_flight -= 1
            if generation != self._generation:
                logger.debug("Dropping page fetched for a previous filter: %s", query)
            else:
                self._page = page
                logger.debug(
                    "Cached %d transaction(s), page %d/%d",
                    len(page),
                    page.pagination.current_page,
                    page.pagination.total_pages,
                )
            return self._page

    refetch = list

    def set_filter(self, **changes: Any) -> TransactionPage | None:
        """Replace filter fields (page, limit, category, type, dates) and re-list."""
        if "user_id" in changes:
            raise ValueError("user_id cannot change; create a new synchronizer")
        with self._lock:
            self._query = dataclasses.replace(self._query, **changes)
            self._generation += 1
        return self.list()

    # ------------------------------------------------------------- mutations

    def _mutate(self, label: str, action) -> Any:
        try:
            result = action()
        except Exception as exc:
            error = normalize_error(exc)
            logger.error("%s failed: %s", label, error.message)
            raise error from exc
        logger.info("%s succeeded; refreshing transactions", label)
        self.list()
        return result

    def create(self, data: TransactionDTO | Mapping[str, Any]) -> Transaction | None:
        """Create a transaction for the current user, then re-list.

        Raises:
            ValueError: If ``data`` fails validation.
            FinanceError: Normalized server or transport failure.
        """
        if not self.user_id:
            return None
        dto = data if isinstance(data, TransactionDTO) else TransactionDTO(**data)
        return self._mutate(
            "Create transaction",
            lambda: self.api.create_transaction(self.user_id, dto),
        )

    def update(
        self,
        transaction_id: str,
        data: TransactionUpdate | Mapping[str, Any],
    ) -> Transaction | None:
        """Apply partial changes to a transaction, then re-list."""
        if not self.user_id:
            return None
        changes = data if isinstance(data, TransactionUpdate) else TransactionUpdate(**data)
        return self._mutate(
            f"Update transaction {transaction_id}",
            lambda: self.api.update_transaction(transaction_id, changes),
        )

    def delete(self, transaction_id: str) -> None:
        """Delete a transaction, then re-list."""
        if not self.user_id:
            return None
        self._mutate(
            f"Delete transaction {transaction_id}",
            lambda: self.api.delete_transaction(transaction_id),
        )
        return None

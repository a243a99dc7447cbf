"""Passive reads that keep their last result and error as state."""

from __future__ import annotations

import logging
import threading
from typing import Generic, TypeVar

from finsync.aggregation import Aggregate, aggregate_summary
from finsync.api import FinanceAPI
from finsync.exceptions import FinanceError
from finsync.models import Summary, UserStats
from finsync.normalizer import normalize_error
from finsync.schema import DEFAULT_PERIOD, SUMMARY_PERIODS

T = TypeVar("T")

logger = logging.getLogger(__name__)


class PassiveReader(Generic[T]):
    """Base for reads that never raise transport failures.

    ``refresh()`` returns the latest data. On failure the previous data is
    kept and the normalized error is stored in ``error``. Without a user id it
    is a no-op.
    """

    label = "data"

    def __init__(self, api: FinanceAPI, user_id: str | None) -> None:
        self.api = api
        self.user_id = user_id or ""
        self._lock = threading.Lock()
        self._data: T | None = None
        self._error: FinanceError | None = None
        self._loading = False

    @property
    def data(self) -> T | None:
        with self._lock:
            return self._data

    @property
    def error(self) -> FinanceError | None:
        with self._lock:
            return self._error

    @property
    def loading(self) -> bool:
        with self._lock:
            return self._loading

    def _fetch(self) -> T:
        raise NotImplementedError

    def refresh(self) -> T | None:
        if not self.user_id:
            return None
        with self._lock:
            self._loading = True
            self._error = None
        try:
            data = self._fetch()
        except Exception as exc:
            error = normalize_error(exc)
            logger.error("Fetching %s failed: %s", self.label, error.message)
            with self._lock:
                self._error = error
                self._loading = False
                return self._data
        with self._lock:
            self._data = data
            self._loading = False
            return data


class SummaryReader(PassiveReader[Summary]):
    """Server computed totals for a period (``7d``, ``30d``, ``90d``, ``1y``)."""

    label = "summary"

    def __init__(self, api: FinanceAPI, user_id: str | None, period: str = DEFAULT_PERIOD) -> None:
        super().__init__(api, user_id)
        if period not in SUMMARY_PERIODS:
            raise ValueError(f"period must be one of {', '.join(SUMMARY_PERIODS)}")
        self.period = period

    def _fetch(self) -> Summary:
        return self.api.get_summary(self.user_id, self.period)

    def set_period(self, period: str) -> Summary | None:
        if period not in SUMMARY_PERIODS:
            raise ValueError(f"period must be one of {', '.join(SUMMARY_PERIODS)}")
        self.period = period
        return self.refresh()

    @property
    def aggregate(self) -> Aggregate | None:
        summary = self.data
        if summary is None:
            return None
        return aggregate_summary(summary)


class CategoriesReader(PassiveReader[list]):
    """Distinct categories the user has used."""

    label = "categories"

    def _fetch(self) -> list[str]:
        return self.api.get_categories(self.user_id)


class UserStatsReader(PassiveReader[UserStats]):
    """Usage statistics for the user."""

    label = "user stats"

    def _fetch(self) -> UserStats:
        return self.api.get_stats(self.user_id)

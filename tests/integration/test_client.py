"""Integration tests for the FinanceClient facade."""

from __future__ import annotations

import json

import pytest
import requests

from finsync.client import FinanceClient
from finsync.config import ClientConfig
from finsync.models import SessionState
from finsync.schema import TOKEN_KEY, USER_KEY
from finsync.store import MemoryStore


def _stored(account: dict) -> MemoryStore:
    return MemoryStore(
        {TOKEN_KEY: account["token"], USER_KEY: json.dumps(account["user"])}
    )


@pytest.mark.sit
def test_client_restores_and_lists(backend, account: dict) -> None:
    backend.add_transaction(account["user"]["id"], amount=15, description="Almoço")
    config = ClientConfig(default_page_size=5)

    with FinanceClient(config=config, store=_stored(account), http_session=backend) as client:
        assert client.session.state is SessionState.AUTHENTICATED
        synchronizer = client.transactions()
        synchronizer.list()

    assert [record.description for record in synchronizer.transactions] == ["Almoço"]
    assert backend.requests[-1]["params"]["limit"] == 5
    assert len(client.bus) == 0


@pytest.mark.sit
def test_degraded_client_sends_no_data_requests(backend, account: dict) -> None:
    backend.fail("GET", "/users/profile", exc=requests.ConnectionError("refused"))

    with FinanceClient(store=_stored(account), config=ClientConfig(), http_session=backend) as client:
        assert client.session.state is SessionState.DEGRADED_OFFLINE
        sent = len(backend.requests)
        assert client.transactions().list() is None
        assert client.summary().refresh() is None
        assert client.stats().refresh() is None
        assert client.categories().refresh() is None

    assert len(backend.requests) == sent


@pytest.mark.sit
def test_client_uses_config_timeout(backend, account: dict) -> None:
    config = ClientConfig(timeout_seconds=1.5)

    with FinanceClient(config=config, store=_stored(account), http_session=backend):
        pass

    assert backend.requests[-1]["timeout"] == 1.5

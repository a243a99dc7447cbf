"""Client configuration from an optional JSON file and environment overrides."""

from __future__ import annotations

from dataclasses import dataclass, replace
import json
import logging
import os
from pathlib import Path
from typing import Any

from finsync.schema import DEFAULT_API_URL, DEFAULT_PAGE_SIZE, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

CONFIG_ENV = "FINSYNC_CONFIG"
API_URL_ENV = "FINSYNC_API_URL"
TIMEOUT_ENV = "FINSYNC_TIMEOUT"
STORE_ENV = "FINSYNC_STORE"

DEFAULT_HOME = Path.home() / ".finsync"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"
DEFAULT_STORE_PATH = DEFAULT_HOME / "session.json"


@dataclass(frozen=True)
class ClientConfig:
    """Settings for :class:`finsync.client.FinanceClient`."""

    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    store_path: Path = DEFAULT_STORE_PATH
    default_page_size: int = DEFAULT_PAGE_SIZE


def _read_config_file(path: Path) -> dict[str, Any]:
    """Load config file if present, else return empty config."""
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring config file %s: %s", path, exc)
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def load_config(path: str | Path | None = None) -> ClientConfig:
    """Build a :class:`ClientConfig`.

    Precedence, lowest first: defaults, the JSON file (``path``, else
    ``$FINSYNC_CONFIG``, else ``~/.finsync/config.json``), then the
    ``FINSYNC_API_URL``, ``FINSYNC_TIMEOUT`` and ``FINSYNC_STORE`` variables.

    Raises:
        ValueError: If a timeout or page size is not a positive number.
    """
    config_path = Path(path or os.environ.get(CONFIG_ENV) or DEFAULT_CONFIG_PATH)
    payload = _read_config_file(config_path)

    config = ClientConfig()
    if payload.get("api_url"):
        config = replace(config, api_url=str(payload["api_url"]))
    if payload.get("timeout_seconds") is not None:
        config = replace(config, timeout_seconds=float(payload["timeout_seconds"]))
    if payload.get("store_path"):
        config = replace(config, store_path=Path(payload["store_path"]).expanduser())
    if payload.get("default_page_size") is not None:
        config = replace(config, default_page_size=int(payload["default_page_size"]))

    if os.environ.get(API_URL_ENV):
        config = replace(config, api_url=os.environ[API_URL_ENV])
    if os.environ.get(TIMEOUT_ENV):
        config = replace(config, timeout_seconds=float(os.environ[TIMEOUT_ENV]))
    if os.environ.get(STORE_ENV):
        config = replace(config, store_path=Path(os.environ[STORE_ENV]).expanduser())

    if config.timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be positive")
    if config.default_page_size < 1:
        raise ValueError("default_page_size must be at least 1")
    return config

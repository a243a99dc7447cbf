"""Package version identifier."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "finsync"
VERSION_FILE = Path(__file__).resolve().parents[3] / "VERSION"


def _source_version() -> str:
    """Version of a source checkout that was never installed."""
    if VERSION_FILE.exists():
        return VERSION_FILE.read_text(encoding="utf-8").strip()
    return "0.0.0+unknown"


try:
    __version__ = version(DISTRIBUTION)
except PackageNotFoundError:
    __version__ = _source_version()

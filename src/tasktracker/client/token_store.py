"""Persistence for the bearer token between client runs."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class TokenStore(ABC):
    """Holds at most one token under ``TOKEN_KEY``."""

    @abstractmethod
    def load(self) -> str | None: ...

    @abstractmethod
    def save(self, token: str) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...


class MemoryTokenStore(TokenStore):
    def __init__(self, token: str | None = None) -> None:
        self._data: dict[str, str] = {}
        if token:
            self._data[TOKEN_KEY] = token

    def load(self) -> str | None:
        return self._data.get(TOKEN_KEY)

    def save(self, token: str) -> None:
        self._data[TOKEN_KEY] = token

    def clear(self) -> None:
        self._data.pop(TOKEN_KEY, None)


class FileTokenStore(TokenStore):
    """JSON file holding ``{"token": ...}``."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        if not self._path.exists():
            return None
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable token file", extra={"path": str(self._path)})
            return None
        token = payload.get(TOKEN_KEY) if isinstance(payload, dict) else None
        return token if isinstance(token, str) and token else None

    def save(self, token: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({TOKEN_KEY: token}), encoding="utf-8")

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


def token_store_for(path: Path | None) -> TokenStore:
    """File-backed store when a path is configured, in-memory otherwise."""
    return FileTokenStore(path) if path is not None else MemoryTokenStore()


__all__ = ["FileTokenStore", "MemoryTokenStore", "TOKEN_KEY", "TokenStore", "token_store_for"]

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path

from authcode.constants import DEFAULT_TOKEN_STORE_PATH
from authcode.json_file import JsonFile
from authcode.models import BearerAccessToken


class BearerTokenStore(ABC):
    """Destination for issued access tokens, read by code that calls the provider's API."""

    @abstractmethod
    async def insert_or_replace(self, key: str, token: BearerAccessToken) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get(self, key: str) -> BearerAccessToken | None:
        raise NotImplementedError


class MemoryBearerTokenStore(BearerTokenStore):
    def __init__(self) -> None:
        self._tokens: dict[str, BearerAccessToken] = {}

    async def insert_or_replace(self, key: str, token: BearerAccessToken) -> None:
        self._tokens[key] = token

    async def get(self, key: str) -> BearerAccessToken | None:
        return self._tokens.get(key)


class FileBearerTokenStore(BearerTokenStore):
    def __init__(self, path: str | Path = DEFAULT_TOKEN_STORE_PATH) -> None:
        self._file = JsonFile(path)

    async def insert_or_replace(self, key: str, token: BearerAccessToken) -> None:
        all_tokens = self._file.read_all()
        all_tokens[key] = asdict(token)
        self._file.write_all(all_tokens)

    async def get(self, key: str) -> BearerAccessToken | None:
        payload = self._file.read_all().get(key)
        if payload is None:
            return None
        return BearerAccessToken(**payload)

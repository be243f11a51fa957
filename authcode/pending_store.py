"""
Persistence of in-flight and completed authorizations, one record per user.

The embedding application supplies its own ``PendingAuthorizationStore`` for
real storage. The memory implementation keeps the record objects themselves,
so mutations made by the service are visible to whoever holds a reference.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict
from pathlib import Path

from authcode.constants import DEFAULT_PENDING_STORE_PATH
from authcode.errors import NotFoundError
from authcode.json_file import JsonFile
from authcode.models import PendingAuthorization


class PendingAuthorizationStore(ABC):
    @abstractmethod
    async def create(self, user_identifier: str, nonce: str) -> PendingAuthorization:
        """Create or overwrite the record for ``user_identifier`` with ``state`` set to ``nonce``."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, user_identifier: str) -> PendingAuthorization | None:
        raise NotImplementedError

    @abstractmethod
    async def update(self, record: PendingAuthorization) -> None:
        """Persist mutations to an existing record. Raises ``NotFoundError`` otherwise."""
        raise NotImplementedError

    @abstractmethod
    async def insert_or_replace(self, record: PendingAuthorization) -> None:
        raise NotImplementedError


class MemoryPendingAuthorizationStore(PendingAuthorizationStore):
    def __init__(self) -> None:
        self._records: dict[str, PendingAuthorization] = {}

    async def create(self, user_identifier: str, nonce: str) -> PendingAuthorization:
        record = PendingAuthorization(user_identifier=user_identifier, state=nonce)
        self._records[user_identifier] = record
        return record

    async def get(self, user_identifier: str) -> PendingAuthorization | None:
        return self._records.get(user_identifier)

    async def update(self, record: PendingAuthorization) -> None:
        if record.user_identifier not in self._records:
            raise NotFoundError(record.user_identifier)
        self._records[record.user_identifier] = record

    async def insert_or_replace(self, record: PendingAuthorization) -> None:
        self._records[record.user_identifier] = record


class FilePendingAuthorizationStore(PendingAuthorizationStore):
    def __init__(self, path: str | Path = DEFAULT_PENDING_STORE_PATH) -> None:
        self._file = JsonFile(path)

    async def create(self, user_identifier: str, nonce: str) -> PendingAuthorization:
        record = PendingAuthorization(user_identifier=user_identifier, state=nonce)
        await self.insert_or_replace(record)
        return record

    async def get(self, user_identifier: str) -> PendingAuthorization | None:
        payload = self._file.read_all().get(user_identifier)
        if payload is None:
            return None
        return PendingAuthorization(**payload)

    async def update(self, record: PendingAuthorization) -> None:
        all_records = self._file.read_all()
        if record.user_identifier not in all_records:
            raise NotFoundError(record.user_identifier)
        all_records[record.user_identifier] = asdict(record)
        self._file.write_all(all_records)

    async def insert_or_replace(self, record: PendingAuthorization) -> None:
        all_records = self._file.read_all()
        all_records[record.user_identifier] = asdict(record)
        self._file.write_all(all_records)

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from leavedesk.config import Settings
from leavedesk.main import create_app
from leavedesk.services.desk import LeaveDesk
from leavedesk.store.base import Document, StoreError
from leavedesk.store.memory import InMemoryDocumentStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

TODAY = date(2026, 10, 19)


class Clock:
    """Controllable clock: ``today`` for the ledger, ``now`` for request timestamps."""

    def __init__(self, today: date = TODAY) -> None:
        self.current = today
        self._now = datetime(today.year, today.month, today.day, 9, 0, tzinfo=UTC)

    def today(self) -> date:
        return self.current

    def now(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def set_year(self, year: int) -> None:
        self.current = self.current.replace(year=year)


class FlakyDocumentStore(InMemoryDocumentStore):
    """In-memory store that raises StoreError for chosen (operation, collection) pairs."""

    def __init__(self) -> None:
        super().__init__()
        self._failures: dict[tuple[str, str], int] = {}

    def fail(self, operation: str, collection: str, times: int = 1) -> None:
        self._failures[(operation, str(collection))] = times

    def heal(self) -> None:
        self._failures.clear()

    def _maybe_fail(self, operation: str, collection: str) -> None:
        key = (operation, str(collection))
        remaining = self._failures.get(key, 0)
        if remaining <= 0:
            return
        self._failures[key] = remaining - 1
        msg = f"injected {operation} failure on {collection}"
        raise StoreError(msg, collection=collection)

    def get(self, collection: str, doc_id: str) -> Document | None:
        self._maybe_fail("get", collection)
        return super().get(collection, doc_id)

    def create(self, collection: str, doc_id: str, fields: dict[str, Any]) -> Document:
        self._maybe_fail("create", collection)
        return super().create(collection, doc_id, fields)

    def delete(self, collection: str, doc_id: str) -> None:
        self._maybe_fail("delete", collection)
        super().delete(collection, doc_id)

    def scan(self, collection: str) -> list[Document]:
        self._maybe_fail("scan", collection)
        return super().scan(collection)

    def ping(self) -> None:
        self._maybe_fail("ping", "(root)")


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def settings() -> Settings:
    return Settings(store_backend="memory", _env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def store() -> FlakyDocumentStore:
    return FlakyDocumentStore()


@pytest.fixture
def desk(store: FlakyDocumentStore, settings: Settings, clock: Clock) -> LeaveDesk:
    return LeaveDesk(store, settings, today=clock.today, now=clock.now)


@pytest.fixture
def app(store: FlakyDocumentStore, settings: Settings, clock: Clock) -> FastAPI:
    return create_app(settings, store, today=clock.today)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against an app wired to the in-memory store."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

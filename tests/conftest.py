"""
Shared test fixtures.

mongo_db wraps mongomock in an async facade exposing the subset of the
pymongo AsyncCollection API the repositories use. clock is a controllable
time source for the OTP service; mail_provider is an always-succeeding mock
EmailProvider.
"""

from unittest.mock import AsyncMock

import mongomock
import pytest

from infrastructure.email.protocol import MailResult


class AsyncCursor:
    def __init__(self, cursor):
        self._cursor = cursor

    async def to_list(self, length=None):
        docs = list(self._cursor)
        return docs if length is None else docs[:length]


class AsyncCollection:
    def __init__(self, collection):
        self.sync = collection

    async def find_one(self, *args, **kwargs):
        return self.sync.find_one(*args, **kwargs)

    def find(self, *args, **kwargs):
        return AsyncCursor(self.sync.find(*args, **kwargs))

    async def insert_one(self, *args, **kwargs):
        return self.sync.insert_one(*args, **kwargs)

    async def update_one(self, *args, **kwargs):
        return self.sync.update_one(*args, **kwargs)

    async def delete_one(self, *args, **kwargs):
        return self.sync.delete_one(*args, **kwargs)

    async def create_index(self, *args, **kwargs):
        return self.sync.create_index(*args, **kwargs)

    async def drop_index(self, *args, **kwargs):
        return self.sync.drop_index(*args, **kwargs)

    async def index_information(self):
        return self.sync.index_information()


class AsyncDatabase:
    def __init__(self, db):
        self.sync = db
        self._collections = {}

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = AsyncCollection(self.sync[name])
        return self._collections[name]


@pytest.fixture
def mongo_db():
    """A fresh in-memory database per test."""
    return AsyncDatabase(mongomock.MongoClient().db)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mail_provider():
    provider = AsyncMock()
    provider.send_mail.return_value = MailResult(success=True, info={"status_code": 201})
    return provider

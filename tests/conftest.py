# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from messenger.core.settings import Settings
from messenger.db.session import (
    Base,
    enable_sqlite_foreign_keys,
    enable_sqlite_immediate_transactions,
)
from messenger.db.store import Store
from messenger.services import AccountService, ChatService, RelationshipService

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    enable_sqlite_immediate_transactions(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def store(engine: Engine) -> Iterator[Store]:
    try:
        yield Store(engine, timeout=1.0)
    finally:
        # Ensure each test sees a clean database; the engines commit for real.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Provide settings pinned to the defaults the engines are tested against."""
    return Settings(MESSAGE_PAGE_SIZE=10, WELCOME_MESSAGE="Welcome to the chat!")


@pytest.fixture()
def accounts(store: Store) -> AccountService:
    return AccountService(store)


@pytest.fixture()
def relationships(store: Store) -> RelationshipService:
    return RelationshipService(store)


@pytest.fixture()
def chats(store: Store, test_settings: Settings) -> ChatService:
    return ChatService(store, app_settings=test_settings)


def _register(accounts: AccountService, login: str, status: str | None = None) -> str:
    accounts.register(login, TEST_PASSWORD, status=status)
    return login


@pytest.fixture()
def alice(accounts: AccountService) -> str:
    """Register and return the primary test user."""
    return _register(accounts, "alice", status="Available")


@pytest.fixture()
def bob(accounts: AccountService) -> str:
    return _register(accounts, "bob", status="At work")


@pytest.fixture()
def carol(accounts: AccountService) -> str:
    return _register(accounts, "carol")


@pytest.fixture()
def dave(accounts: AccountService) -> str:
    return _register(accounts, "dave", status="Gone fishing")

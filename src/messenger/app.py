"""Composition root wiring the store into the engines."""

from __future__ import annotations

from dataclasses import dataclass

from messenger.core.logging_config import configure_logging
from messenger.core.settings import Settings, settings
from messenger.db.session import build_engine, create_tables
from messenger.db.store import Store
from messenger.services import AccountService, ChatService, RelationshipService


@dataclass
class Messenger:
    """Engines sharing one injected store handle."""

    store: Store
    accounts: AccountService
    relationships: RelationshipService
    chats: ChatService


def build_messenger(app_settings: Settings | None = None, *, create_schema: bool = False) -> Messenger:
    """Build the engines for the configured database.

    Args:
        app_settings: Settings to use instead of the environment-loaded ones.
        create_schema: Create missing tables directly instead of relying on migrations.
    """
    app_settings = app_settings or settings
    configure_logging(app_settings)
    engine = build_engine(app_settings)
    if create_schema:
        create_tables(engine)
    store = Store(engine, timeout=app_settings.store_timeout_seconds)
    return Messenger(
        store=store,
        accounts=AccountService(store),
        relationships=RelationshipService(store),
        chats=ChatService(store, app_settings=app_settings),
    )

"""Injected handle over the relational record store."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from messenger.core.errors import StoreUnavailable
from messenger.core.settings import settings

logger = logging.getLogger(__name__)


class Store:
    """Unit-of-work factory shared by the engines.

    Each engine operation runs inside exactly one ``transaction()``: reads,
    row locks and writes commit together or not at all.
    """

    def __init__(self, engine: Engine, *, timeout: float | None = None) -> None:
        self.engine = engine
        self.timeout = settings.store_timeout_seconds if timeout is None else timeout
        self._session_factory = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @contextmanager
    def transaction(self, timeout: float | None = None) -> Iterator[Session]:
        """Yield a session inside a transaction that commits on clean exit.

        Args:
            timeout: Statement timeout in seconds; defaults to the store timeout.

        Raises:
            StoreUnavailable: If the driver reports an operational failure.
        """
        session = self._session_factory()
        try:
            with session.begin():
                self._apply_timeout(session, self.timeout if timeout is None else timeout)
                yield session
        except (OperationalError, InterfaceError) as exc:
            logger.warning("Store transaction aborted: %s", exc)
            raise StoreUnavailable(str(exc.orig) if exc.orig is not None else str(exc)) from exc
        finally:
            session.close()

    def _apply_timeout(self, session: Session, timeout: float) -> None:
        # SQLite connections carry their busy timeout from build_engine.
        if self.engine.dialect.name != "postgresql":
            return
        session.execute(
            text("SELECT set_config('statement_timeout', :value, true)"),
            {"value": str(int(timeout * 1000))},
        )

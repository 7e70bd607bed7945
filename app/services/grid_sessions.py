"""In-memory grid sessions for the admin console.

A session pairs one ``DataGrid`` with one ``BatchOperationExecutor`` for a
registered table and a client-chosen session id. Rows are reloaded from the
database whenever a session is fetched, so sort, page and selection survive
across requests while the data stays current.

The store keeps at most ``GRID_MAX_SESSIONS`` sessions and evicts the least
recently used idle one when full.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any

from sqlalchemy.orm import Session

from app.config import settings
from app.services.batch_operations import (
    BatchInProgressError,
    BatchNotification,
    BatchOperationExecutor,
    BatchResult,
)
from app.services.grid import DataGrid
from app.services.table_config import GridRegistry, GridTable

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"


class GridSession:
    def __init__(self, table: GridTable, session_id: str = DEFAULT_SESSION_ID):
        self.table = table
        self.session_id = session_id
        self.last_notification: BatchNotification | None = None
        self.grid = DataGrid(
            table.definition,
            on_selection_change=self._selection_changed,
        )
        self.executor = BatchOperationExecutor(
            clear_selection=self.grid.clear_selection,
            notify=self._notified,
        )

    @property
    def table_key(self) -> str:
        return self.table.table_key

    @property
    def is_busy(self) -> bool:
        return self.executor.is_running

    def reload(self, db: Session) -> None:
        self.grid.load(self.table.loader(db))

    def open_row(self, row_id: Hashable) -> Any | None:
        return self.grid.click_row(row_id)

    async def run_action(self, db: Session, action_name: str) -> BatchResult:
        action = self.table.action(action_name)
        if self.executor.is_running:
            raise BatchInProgressError("A batch operation is already running")
        ids = self.grid.selected_ids
        logger.info(
            "Running %s on %d %s from grid %s/%s",
            action.name,
            len(ids),
            action.noun,
            self.table_key,
            self.session_id,
        )

        async def _reload() -> None:
            await asyncio.to_thread(self.reload, db)

        self.executor.reload = _reload
        return await self.executor.run(
            ids,
            action.operation(db),
            verb=action.verb,
            noun=action.noun,
        )

    def _notified(self, notification: BatchNotification) -> None:
        self.last_notification = notification

    def _selection_changed(self, ids: list[Hashable]) -> None:
        logger.debug(
            "Grid %s/%s selection now %d row(s)",
            self.table_key,
            self.session_id,
            len(ids),
        )


class GridSessionStore:
    def __init__(self, max_sessions: int | None = None):
        self.max_sessions = max_sessions or settings.grid_max_sessions
        self._sessions: OrderedDict[tuple[str, str], GridSession] = OrderedDict()

    def get(
        self,
        db: Session,
        table_key: str,
        session_id: str | None = None,
    ) -> GridSession:
        table = GridRegistry.get(table_key)
        key = (table_key, session_id or DEFAULT_SESSION_ID)
        session = self._sessions.get(key)
        if session is None:
            session = GridSession(table, key[1])
            self._sessions[key] = session
            self._evict()
        else:
            self._sessions.move_to_end(key)
        if not session.is_busy:
            session.reload(db)
        return session

    def _evict(self) -> None:
        # Sessions with a running batch are never dropped.
        while len(self._sessions) > self.max_sessions:
            key = next((k for k, s in self._sessions.items() if not s.is_busy), None)
            if key is None:
                break
            del self._sessions[key]
            logger.debug("Evicted grid session %s/%s", *key)

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._sessions

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


grid_sessions = GridSessionStore()


def clear_sessions() -> None:
    grid_sessions.clear()

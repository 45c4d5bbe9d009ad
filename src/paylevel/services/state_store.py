"""Snapshot persistence for the single AppState."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from paylevel.models import AppState, StateSnapshot
from paylevel.services.migration import (
    CURRENT_SCHEMA_VERSION,
    dump_state,
    load_or_fresh,
)

logger = logging.getLogger(__name__)


class StateStore:
    """Load and save the application state as one JSON blob.

    Loading always goes through the state migrator, so blobs written by
    older versions are upgraded and written back. When there is no row
    yet, or the stored blob cannot be read, a fresh state is saved in its
    place so that ids handed out to clients stay stable.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        state_key: str = "default",
    ):
        self.session_factory = session_factory
        self.state_key = state_key
        self._lock = asyncio.Lock()

    async def load(self) -> AppState:
        async with self._lock:
            return await self._load()

    async def save(self, state: AppState) -> None:
        async with self._lock:
            await self._save(state)

    async def update(self, command: Callable[[AppState], AppState]) -> AppState:
        """Load, apply a state command and save, one writer at a time."""
        async with self._lock:
            state = await self._load()
            new_state = command(state)
            if new_state is not state:
                await self._save(new_state)
            return new_state

    async def _load(self) -> AppState:
        async with self.session_factory() as session:
            snapshot = await session.get(StateSnapshot, self.state_key)

        if snapshot is None:
            logger.info("No saved state for %r, starting fresh", self.state_key)
            payload = None
        else:
            payload = snapshot.payload

        state = load_or_fresh(payload)
        # Fresh, recovered and upgraded states are written back
        if payload != dump_state(state):
            await self._save(state)
        return state

    async def _save(self, state: AppState) -> None:
        payload = dump_state(state)
        async with self.session_factory() as session:
            async with session.begin():
                snapshot = await session.get(StateSnapshot, self.state_key)
                if snapshot is None:
                    session.add(
                        StateSnapshot(
                            state_key=self.state_key,
                            payload=payload,
                            schema_version=CURRENT_SCHEMA_VERSION,
                        )
                    )
                else:
                    snapshot.payload = payload
                    snapshot.schema_version = CURRENT_SCHEMA_VERSION
        logger.info(
            "Saved state %r: %d job(s), %d log(s)",
            self.state_key,
            len(state.jobs),
            len(state.logs),
        )

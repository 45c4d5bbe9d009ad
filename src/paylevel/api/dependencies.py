"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from datetime import date
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from paylevel.config import get_settings
from paylevel.models import AppState
from paylevel.services import StateStore


def get_store(request: Request) -> StateStore:
    """State store created at startup."""
    store = request.app.state.store
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="State store is not initialized",
        )
    return store


Store = Annotated[StateStore, Depends(get_store)]


async def get_db_session(store: Store) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with store.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_app_state(store: Store) -> AppState:
    """Current application state."""
    return await store.load()


def get_today() -> date:
    return get_settings().today()


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CurrentState = Annotated[AppState, Depends(get_app_state)]
Today = Annotated[date, Depends(get_today)]

"""SQLAlchemy database sessions and engines — the default store plus named destinations."""

from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from cloner.config import get_settings


def _get_async_url(url: str) -> str:
    """Convert a sync SQLAlchemy URL to an async one."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(_get_async_url(url), echo=echo, future=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


settings = get_settings()

engine = build_engine(settings.database_url, echo=(settings.app_env == "development"))
async_session_factory = build_session_factory(engine)

destination_engines: dict[str, AsyncEngine] = {
    name: build_engine(url) for name, url in settings.destination_database_urls.items()
}
destination_session_factories: dict[str, async_sessionmaker[AsyncSession]] = {
    name: build_session_factory(bind) for name, bind in destination_engines.items()
}


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency — yields an async DB session per request."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_destination_sessions() -> AsyncGenerator[dict[str, AsyncSession], None]:
    """FastAPI dependency — yields one session per configured destination store."""
    async with AsyncExitStack() as stack:
        sessions = {
            name: await stack.enter_async_context(factory())
            for name, factory in destination_session_factories.items()
        }
        try:
            yield sessions
            for session in sessions.values():
                await session.commit()
        except Exception:
            for session in sessions.values():
                await session.rollback()
            raise

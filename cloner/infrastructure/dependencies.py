"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cloner.config import get_settings
from cloner.application.services import Cloner, CloneService
from cloner.infrastructure.database.session import get_db_session, get_destination_sessions
from cloner.infrastructure.database.repositories import SQLAlchemyCloneRepository
from cloner.infrastructure.events.in_memory_event_bus import InMemoryEventBus
from cloner.infrastructure.storage.local_file_duplicator import LocalFileDuplicator


def get_event_bus(request: Request) -> InMemoryEventBus:
    """The application's event bus, created once per app in ``create_app``."""
    return request.app.state.event_bus


async def get_clone_service(
    session: AsyncSession = Depends(get_db_session),
    destinations: dict[str, AsyncSession] = Depends(get_destination_sessions),
    event_bus: InMemoryEventBus = Depends(get_event_bus),
) -> AsyncGenerator[CloneService, None]:
    """Provides a CloneService with the engine, repository and file storage wired up."""
    settings = get_settings()
    repository = SQLAlchemyCloneRepository(session, destinations)
    cloner = Cloner(
        repository=repository,
        events=event_bus,
        files=LocalFileDuplicator(upload_dir=settings.upload_dir),
    )
    yield CloneService(repository, cloner, destinations=repository.destinations)

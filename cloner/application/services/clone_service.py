"""Application service (use case) for duplicating stored entities by type and id."""

import logging
from typing import Any

from cloner.application.interfaces import CloneRepository
from cloner.application.services.cloner import Cloner
from cloner.domain.exceptions import EntityNotFoundError, UnknownDestinationError

logger = logging.getLogger(__name__)


class CloneService:
    """Looks up the source entity and hands it to the duplication engine."""

    def __init__(
        self,
        repository: CloneRepository,
        cloner: Cloner,
        destinations: list[str] | None = None,
    ):
        self._repository = repository
        self._cloner = cloner
        self._destinations = set(destinations or [])

    async def duplicate(
        self, entity_type: str, entity_id: int | str, destination: str | None = None
    ) -> Any:
        if destination is not None and destination not in self._destinations:
            raise UnknownDestinationError(destination)

        source = await self._repository.get_by_id(entity_type, entity_id)
        if source is None:
            raise EntityNotFoundError(entity_type, entity_id)

        if destination is None:
            clone = await self._cloner.duplicate(source)
        else:
            clone = await self._cloner.duplicate_to(source, destination)
        logger.info(
            "Cloned %s '%s' → '%s' (destination=%s)",
            entity_type, entity_id, getattr(clone, clone.primary_key_name), destination or "default",
        )
        return clone

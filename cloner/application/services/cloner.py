"""Duplication engine — clones an entity, its files and its declared relations."""

import logging
from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any

from cloner.application.interfaces import CloneRepository, EventPublisher, FileDuplicator
from cloner.domain.entities import (
    CLONED,
    CLONING,
    Cloneable,
    CloneEvent,
    RelationHandle,
    RelationKind,
    event_name,
)
from cloner.domain.exceptions import ClonerError, UnsupportedEntityError
from cloner.infrastructure.logging.clone_logger import CloneLogger, CloneStage

logger = logging.getLogger(__name__)
plog = CloneLogger("Cloner")

# Destination of the duplicate_to() call running in the current context.
_destination: ContextVar[str | None] = ContextVar("clone_destination", default=None)


class Cloner:
    """Deep-copies cloneable entities through the persistence, file and event ports.

    For every entity the engine builds an unsaved copy, duplicates its file
    attributes, persists it (fired between ``cloning:<type>`` and
    ``cloned:<type>`` events) and then walks the relations the source
    declares:

    - many-to-many relations are re-attached to the clone with their pivot data;
    - one-to-many / one-to-one relations are cloned recursively under the clone.

    Relation declarations that form a cycle recurse until the interpreter
    gives up; they are a configuration error.
    """

    def __init__(
        self,
        repository: CloneRepository,
        events: EventPublisher,
        files: FileDuplicator | None = None,
    ):
        self._repository = repository
        self._events = events
        self._files = files

    async def duplicate(self, source: Any, relation: RelationHandle | None = None) -> Any:
        """Clone ``source`` and everything it declares as cloneable.

        When ``relation`` is given the clone is saved as a new child of that
        relation instead of on its own.
        """
        destination = _destination.get()
        details = {"destination": destination} if destination else {}
        async with plog.timed_step(CloneStage.CLONE, f"Duplicating {_describe(source)}", **details):
            return await self._duplicate(source, relation, destination)

    async def duplicate_to(self, source: Any, destination: str) -> Any:
        """Clone ``source`` into another store.

        Applies to the whole clone tree. Many-to-many relations are not
        re-attached because related identifiers are meaningless in the other store.
        """
        if _destination.get() is not None:
            raise ClonerError("duplicate_to() cannot be nested inside another duplicate_to() call")
        token = _destination.set(destination)
        try:
            return await self.duplicate(source)
        finally:
            _destination.reset(token)

    # ── Steps ────────────────────────────────────────────────────────

    async def _duplicate(self, source: Any, relation: RelationHandle | None, destination: str | None) -> Any:
        if not isinstance(source, Cloneable):
            raise UnsupportedEntityError(type(source).__name__)

        clone = await self._clone_entity(source)
        await self._duplicate_files(clone)
        clone = await self._save_clone(clone, source, relation, destination)
        await self._clone_relations(source, clone, destination)
        return clone

    async def _clone_entity(self, source: Cloneable) -> Any:
        """Instantiate an unsaved copy carrying every non-exempt attribute."""
        exempt = set(source.get_clone_exempt_attributes())
        attributes = await self._repository.attributes_of(source)
        copied = {name: value for name, value in attributes.items() if name not in exempt}
        plog.detail(f"Copied {_describe(source)}", attributes=len(copied), exempt=len(attributes) - len(copied))
        return type(source)(**copied)

    async def _duplicate_files(self, clone: Cloneable) -> None:
        if self._files is None:
            return
        for attribute in clone.get_cloneable_file_attributes():
            original = getattr(clone, attribute, None)
            if not original:
                continue
            duplicate = await self._files.duplicate(original)
            setattr(clone, attribute, duplicate)
            plog.step_complete(
                CloneStage.FILES, f"Duplicated file attribute '{attribute}'",
                source=original, copy=duplicate,
            )

    async def _save_clone(
        self,
        clone: Cloneable,
        source: Cloneable,
        relation: RelationHandle | None,
        destination: str | None,
    ) -> Any:
        """Persist the clone, notifying the entity hooks and event subscribers."""
        entity_type = source.get_clone_entity_type()

        clone.on_cloning(source)
        await self._publish(event_name(CLONING, entity_type), clone, source)

        if relation is None:
            clone = await self._repository.persist(clone, destination)
        else:
            clone = await self._repository.persist_under_parent(clone, relation, destination)

        plog.step_complete(CloneStage.SAVE, f"Saved {_describe(clone)}", source=_describe(source))

        clone.on_cloned(source)
        await self._publish(event_name(CLONED, entity_type), clone, source)
        return clone

    async def _publish(self, name: str, clone: Any, source: Any) -> None:
        await self._events.publish(name, CloneEvent(name=name, clone=clone, source=source))

    async def _clone_relations(self, source: Cloneable, clone: Any, destination: str | None) -> None:
        for name, pivot_data in source.get_cloneable_relations().items():
            kind = self._repository.relation_kind(source, name)
            if kind is RelationKind.LINK:
                await self._link_relation(source, clone, name, pivot_data, destination)
            else:
                await self._clone_owned_relation(source, clone, name, destination)

    async def _link_relation(
        self,
        source: Cloneable,
        clone: Any,
        name: str,
        pivot_data: Mapping[str, Any],
        destination: str | None,
    ) -> None:
        """Attach the source's related records to the clone without copying them."""
        if destination is not None:
            logger.info(
                "Skipping linked relation %s.%s while cloning to '%s'",
                type(source).__name__, name, destination,
            )
            return

        handle = RelationHandle(clone, name)
        related = await self._repository.load_related(source, name)
        for entity in related:
            await self._repository.attach(handle, entity, pivot_data)
        plog.step_complete(CloneStage.LINK, f"Linked relation '{name}'", count=len(related), pivot=bool(pivot_data))

    async def _clone_owned_relation(
        self, source: Cloneable, clone: Any, name: str, destination: str | None
    ) -> None:
        """Clone each related record and save it as a child of the clone."""
        handle = RelationHandle(clone, name)
        related = await self._repository.load_related(source, name)
        for entity in related:
            await self._duplicate(entity, handle, destination)
        plog.step_complete(CloneStage.OWNED, f"Cloned owned relation '{name}'", count=len(related))


def _describe(entity: Any) -> str:
    key = getattr(entity, "primary_key_name", "id")
    return f"{type(entity).__name__}#{getattr(entity, key, None)}"

"""Concrete clone repository backed by SQLAlchemy — works on any mapped Cloneable model."""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import inspect, insert
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstanceState, RelationshipDirection, RelationshipProperty

from cloner.application.interfaces import CloneRepository
from cloner.domain.entities import Cloneable, RelationHandle, RelationKind
from cloner.domain.exceptions import StoreError, UnknownDestinationError, UnsupportedEntityError
from cloner.infrastructure.database.base import Base

logger = logging.getLogger(__name__)


class SQLAlchemyCloneRepository(CloneRepository):
    """Implements the CloneRepository port using SQLAlchemy async sessions.

    ``session`` is the default store; ``destinations`` maps destination names
    to sessions bound to other databases. Relations are read from the mapper:
    many-to-many relationships are links, one-to-many / one-to-one are owned.
    """

    def __init__(self, session: AsyncSession, destinations: Mapping[str, AsyncSession] | None = None):
        self._session = session
        self._destinations = dict(destinations or {})

    @property
    def destinations(self) -> list[str]:
        return sorted(self._destinations)

    async def get_by_id(self, entity_type: str, entity_id: int | str) -> Any | None:
        model = cloneable_models().get(entity_type)
        if model is None:
            raise UnsupportedEntityError(entity_type, "is not a cloneable table")
        try:
            return await self._session.get(model, entity_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load {entity_type} '{entity_id}': {exc}") from exc

    async def attributes_of(self, entity: Any) -> dict[str, Any]:
        state = _state(entity)
        mapper = state.mapper
        # The identifier is never copied, whatever the key column is called
        keys = {mapper.get_property_by_column(column).key for column in mapper.primary_key}
        columns = [attr.key for attr in mapper.column_attrs if attr.key not in keys]

        # Expired or deferred columns cannot be lazy-loaded outside the greenlet
        unloaded = [key for key in columns if key in state.unloaded]
        try:
            if unloaded and state.async_session is not None:
                await state.async_session.refresh(entity, attribute_names=unloaded)
            return {key: getattr(entity, key) for key in columns}
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load {type(entity).__name__}: {exc}") from exc

    def relation_kind(self, entity: Any, relation: str) -> RelationKind:
        prop = _relationship(entity, relation)
        if prop.direction is RelationshipDirection.MANYTOMANY:
            return RelationKind.LINK
        if prop.direction is RelationshipDirection.ONETOMANY:
            return RelationKind.OWNED
        raise UnsupportedEntityError(
            type(entity).__name__, f"relation '{relation}' is many-to-one and cannot be cloned"
        )

    async def load_related(self, entity: Any, relation: str) -> list[Any]:
        prop = _relationship(entity, relation)
        session = _state(entity).async_session or self._session
        try:
            value = await session.run_sync(lambda _: getattr(entity, relation))
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load {type(entity).__name__}.{relation}: {exc}") from exc

        if not prop.uselist:
            return [] if value is None else [value]
        return list(value)

    async def persist(self, entity: Any, destination: str | None = None) -> Any:
        session = self._session_for(destination)
        try:
            session.add(entity)
            await session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not save {type(entity).__name__}: {exc}") from exc
        logger.debug("Persisted %r (destination=%s)", entity, destination or "default")
        return entity

    async def persist_under_parent(
        self, entity: Any, parent: RelationHandle, destination: str | None = None
    ) -> Any:
        prop = _relationship(parent.owner, parent.name)
        owner_mapper = _state(parent.owner).mapper
        child_mapper = _state(entity).mapper

        # Same as the ORM's own one-to-many sync: copy parent key columns onto the child
        for parent_column, child_column in prop.synchronize_pairs:
            value = getattr(parent.owner, owner_mapper.get_property_by_column(parent_column).key)
            setattr(entity, child_mapper.get_property_by_column(child_column).key, value)

        return await self.persist(entity, destination)

    async def attach(
        self, relation: RelationHandle, related: Any, extra_attributes: Mapping[str, Any]
    ) -> None:
        prop = _relationship(relation.owner, relation.name)
        if prop.secondary is None:
            raise UnsupportedEntityError(
                type(relation.owner).__name__, f"relation '{relation.name}' has no pivot table"
            )

        owner_mapper = _state(relation.owner).mapper
        related_mapper = _state(related).mapper
        row: dict[str, Any] = {}
        for owner_column, pivot_column in prop.synchronize_pairs:
            row[pivot_column.key] = getattr(
                relation.owner, owner_mapper.get_property_by_column(owner_column).key
            )
        for related_column, pivot_column in prop.secondary_synchronize_pairs:
            row[pivot_column.key] = getattr(
                related, related_mapper.get_property_by_column(related_column).key
            )
        row.update(extra_attributes)

        session = _state(relation.owner).async_session or self._session
        try:
            await session.execute(insert(prop.secondary).values(row))
        except SQLAlchemyError as exc:
            raise StoreError(
                f"Could not attach {type(related).__name__} to {type(relation.owner).__name__}.{relation.name}: {exc}"
            ) from exc

    def _session_for(self, destination: str | None) -> AsyncSession:
        if destination is None:
            return self._session
        try:
            return self._destinations[destination]
        except KeyError:
            raise UnknownDestinationError(destination) from None


def cloneable_models() -> dict[str, type]:
    """Map table name → mapped class for every model implementing Cloneable."""
    return {
        mapper.local_table.name: mapper.class_
        for mapper in Base.registry.mappers
        if issubclass(mapper.class_, Cloneable)
    }


def _state(entity: Any) -> InstanceState:
    try:
        return inspect(entity)
    except NoInspectionAvailable:
        raise UnsupportedEntityError(type(entity).__name__, "is not a mapped SQLAlchemy model") from None


def _relationship(entity: Any, relation: str) -> RelationshipProperty:
    relationships = _state(entity).mapper.relationships
    if relation not in relationships:
        raise UnsupportedEntityError(type(entity).__name__, f"has no relationship named '{relation}'")
    return relationships[relation]

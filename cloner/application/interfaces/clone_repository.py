"""Abstract persistence port used by the duplication engine."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from cloner.domain.entities import RelationHandle, RelationKind


class CloneRepository(ABC):
    """Port for loading and saving cloneable entities — implemented in the infrastructure layer.

    Every method raises ``StoreError`` when the underlying store fails.
    ``destination`` names an alternate store; ``None`` means the default one.
    """

    @abstractmethod
    async def get_by_id(self, entity_type: str, entity_id: int | str) -> Any | None:
        """Retrieve a cloneable entity by type name and identifier."""
        ...

    @abstractmethod
    async def attributes_of(self, entity: Any) -> dict[str, Any]:
        """Return the persisted fields of ``entity`` keyed by attribute name, identifier excluded."""
        ...

    @abstractmethod
    def relation_kind(self, entity: Any, relation: str) -> RelationKind:
        """Resolve whether ``relation`` links (many-to-many) or owns its members."""
        ...

    @abstractmethod
    async def load_related(self, entity: Any, relation: str) -> list[Any]:
        """Return the entities currently reachable through ``relation``."""
        ...

    @abstractmethod
    async def persist(self, entity: Any, destination: str | None = None) -> Any:
        """Insert a new entity; identifier and timestamps are populated on return."""
        ...

    @abstractmethod
    async def persist_under_parent(
        self, entity: Any, parent: RelationHandle, destination: str | None = None
    ) -> Any:
        """Insert ``entity`` as a new child of ``parent.owner`` through ``parent.name``."""
        ...

    @abstractmethod
    async def attach(
        self, relation: RelationHandle, related: Any, extra_attributes: Mapping[str, Any]
    ) -> None:
        """Link ``related`` to ``relation.owner``, storing extra pivot attributes."""
        ...

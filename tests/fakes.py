"""In-memory fakes for the clone ports, plus small cloneable entities to drive them."""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any

from cloner.application.interfaces import CloneRepository, EventPublisher, FileDuplicator
from cloner.domain.entities import Cloneable, RelationHandle, RelationKind
from cloner.domain.exceptions import FileError, StoreError


# ── Entities ─────────────────────────────────────────────────────────

@dataclass(eq=False)
class Tag:
    name: str = ""
    id: int | None = None


@dataclass(eq=False)
class Comment(Cloneable):
    cloneable_relations = ["reactions"]
    cloneable_relations_pivot_data = {"reactions": {"copied": True}}

    text: str = ""
    post_id: int | None = None
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(eq=False)
class Post(Cloneable):
    clone_exempt_attributes = ["view_count"]
    cloneable_file_attributes = ["cover"]
    cloneable_relations = ["comments", "tags"]
    cloneable_relations_pivot_data = {"tags": {"added_by": "tests"}}

    title: str = ""
    cover: str | None = None
    view_count: int = 0
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def on_cloning(self, source: "Post") -> None:
        self.hook_calls = [("on_cloning", source, self.id)]

    def on_cloned(self, source: "Post") -> None:
        self.hook_calls.append(("on_cloned", source, self.id))


RELATION_KINDS = {
    ("Post", "comments"): RelationKind.OWNED,
    ("Post", "tags"): RelationKind.LINK,
    ("Comment", "reactions"): RelationKind.LINK,
}


# ── Ports ────────────────────────────────────────────────────────────

class FakeCloneRepository(CloneRepository):
    """Keeps related entities in a dict keyed by (owner, relation name)."""

    def __init__(self, fail_on: type | None = None):
        self.members: dict[tuple[Any, str], list[Any]] = {}
        self.entities: dict[tuple[str, int], Any] = {}
        self.saved: list[tuple[Any, str | None]] = []
        self.children: list[tuple[Any, RelationHandle]] = []
        self.attached: list[tuple[RelationHandle, Any, dict[str, Any]]] = []
        self.fail_on = fail_on
        self._next_id = 100

    def add(self, entity: Any) -> Any:
        self.entities[(type(entity).__name__, entity.id)] = entity
        return entity

    def relate(self, owner: Any, relation: str, *related: Any) -> None:
        self.members.setdefault((owner, relation), []).extend(related)

    async def get_by_id(self, entity_type: str, entity_id: int | str) -> Any | None:
        return self.entities.get((entity_type, entity_id))

    async def attributes_of(self, entity: Any) -> dict[str, Any]:
        return {f.name: getattr(entity, f.name) for f in fields(entity) if f.name != "id"}

    def relation_kind(self, entity: Any, relation: str) -> RelationKind:
        return RELATION_KINDS[(type(entity).__name__, relation)]

    async def load_related(self, entity: Any, relation: str) -> list[Any]:
        return list(self.members.get((entity, relation), []))

    async def persist(self, entity: Any, destination: str | None = None) -> Any:
        await asyncio.sleep(0)
        if self.fail_on is not None and isinstance(entity, self.fail_on):
            raise StoreError(f"constraint violated for {type(entity).__name__}")
        entity.id = self._next_id
        self._next_id += 1
        entity.created_at = entity.updated_at = datetime.now(timezone.utc)
        self.saved.append((entity, destination))
        return self.add(entity)

    async def persist_under_parent(
        self, entity: Any, parent: RelationHandle, destination: str | None = None
    ) -> Any:
        setattr(entity, f"{type(parent.owner).__name__.lower()}_id", parent.owner.id)
        saved = await self.persist(entity, destination)
        self.children.append((saved, parent))
        self.relate(parent.owner, parent.name, saved)
        return saved

    async def attach(
        self, relation: RelationHandle, related: Any, extra_attributes: Mapping[str, Any]
    ) -> None:
        self.attached.append((relation, related, dict(extra_attributes)))
        self.relate(relation.owner, relation.name, related)

    def destinations_of(self, entity_type: type) -> list[str | None]:
        return [destination for entity, destination in self.saved if isinstance(entity, entity_type)]


class FakeFileDuplicator(FileDuplicator):
    """Returns ``<stem>_copy<ext>`` for every reference it is given."""

    def __init__(self, missing: set[str] | None = None):
        self.calls: list[str] = []
        self._missing = missing or set()

    async def duplicate(self, reference: str) -> str:
        self.calls.append(reference)
        if reference in self._missing:
            raise FileError(reference, "source file does not exist")
        path = PurePosixPath(reference)
        return str(path.with_name(f"{path.stem}_copy{path.suffix}"))


class RecordingEventBus(EventPublisher):
    """Records (event name, payload, clone id at publish time); may run a hook per event."""

    def __init__(self, on_publish: Callable[[str, Any], Awaitable[None]] | None = None):
        self.published: list[tuple[str, Any, Any]] = []
        self._on_publish = on_publish

    async def publish(self, event_name: str, payload: Any) -> None:
        self.published.append((event_name, payload, payload.clone.id))
        if self._on_publish is not None:
            await self._on_publish(event_name, payload)

    @property
    def names(self) -> list[str]:
        return [name for name, _, _ in self.published]

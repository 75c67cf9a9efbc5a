"""Relation descriptors shared by the duplication engine and persistence adapters."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RelationKind(str, Enum):
    """How a declared relation is carried over to a clone."""

    LINK = "link"  # many-to-many: re-attach the same related records
    OWNED = "owned"  # one-to-many / one-to-one: clone the related records


@dataclass(frozen=True, eq=False)
class RelationHandle:
    """Points at a named relation on a specific entity instance."""

    owner: Any
    name: str

    def __repr__(self) -> str:
        return f"<RelationHandle({type(self.owner).__name__}.{self.name})>"

"""Cloneable contract — mixed into every entity type that can be duplicated."""

from typing import Any, ClassVar


class Cloneable:
    """Declares how an entity is copied by the duplication engine.

    Entity types opt in by inheriting from this mixin and overriding the
    class-level declarations::

        class PostModel(Cloneable, Base):
            clone_exempt_attributes = ["view_count"]
            cloneable_file_attributes = ["cover"]
            cloneable_relations = ["comments", "tags"]
            cloneable_relations_pivot_data = {"tags": {"added_by": "cloner"}}

    The identifier and both timestamps are always exempt, whatever the type
    declares.
    """

    primary_key_name: ClassVar[str] = "id"
    created_at_field: ClassVar[str] = "created_at"
    updated_at_field: ClassVar[str] = "updated_at"

    clone_exempt_attributes: ClassVar[list[str]] = []
    cloneable_file_attributes: ClassVar[list[str]] = []
    cloneable_relations: ClassVar[list[str]] = []
    cloneable_relations_pivot_data: ClassVar[dict[str, dict[str, Any]]] = {}

    def get_clone_entity_type(self) -> str:
        """Name used in cloning/cloned event names."""
        return type(self).__name__

    def get_clone_exempt_attributes(self) -> list[str]:
        """Return the attributes that must not be copied onto a clone."""
        defaults = [self.primary_key_name, self.created_at_field, self.updated_at_field]
        return defaults + [name for name in self.clone_exempt_attributes if name not in defaults]

    def get_cloneable_file_attributes(self) -> list[str]:
        """Return the attributes holding references to stored files."""
        return list(self.cloneable_file_attributes)

    def get_cloneable_relations(self) -> dict[str, dict[str, Any]]:
        """Return relation name → pivot data, in declaration order."""
        return {name: self.get_cloneable_relation_pivot_data(name) for name in self.cloneable_relations}

    def get_cloneable_relation_pivot_data(self, relation: str) -> dict[str, Any]:
        return dict(self.cloneable_relations_pivot_data.get(relation) or {})

    def add_cloneable_relation(self, relation: str) -> None:
        """Declare a relation as cloneable for this instance only.

        Adding a relation that is already declared is a no-op.
        """
        if relation in self.cloneable_relations:
            return
        self.cloneable_relations = [*self.cloneable_relations, relation]

    def on_cloning(self, source: "Cloneable") -> None:
        """Called on the clone right before it is persisted."""

    def on_cloned(self, source: "Cloneable") -> None:
        """Called on the clone right after it is persisted."""

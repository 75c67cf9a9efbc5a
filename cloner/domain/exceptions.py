"""Domain-specific exceptions — framework-independent."""


class ClonerError(Exception):
    """Base class for every failure raised while duplicating an entity."""


class UnsupportedEntityError(ClonerError):
    """Raised when an entity (or one of its relations) cannot take part in cloning."""

    def __init__(self, entity_type: str, reason: str = "does not implement the Cloneable contract"):
        self.entity_type = entity_type
        self.reason = reason
        super().__init__(f"{entity_type} {reason}")


class StoreError(ClonerError):
    """Raised when the persistence layer fails to load, save or attach an entity."""


class UnknownDestinationError(StoreError):
    """Raised when a clone is routed to a destination that is not configured."""

    def __init__(self, destination: str):
        self.destination = destination
        super().__init__(f"Destination '{destination}' is not configured")


class FileError(ClonerError):
    """Raised when a file referenced by a clone cannot be duplicated."""

    def __init__(self, reference: str, message: str):
        self.reference = reference
        super().__init__(f"Could not duplicate file '{reference}': {message}")


class EntityNotFoundError(ClonerError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")

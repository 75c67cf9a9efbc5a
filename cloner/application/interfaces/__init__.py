from .clone_repository import CloneRepository
from .event_publisher import EventPublisher
from .file_duplicator import FileDuplicator

__all__ = [
    "CloneRepository",
    "EventPublisher",
    "FileDuplicator",
]

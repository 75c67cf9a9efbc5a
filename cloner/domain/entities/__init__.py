from .cloneable import Cloneable
from .relation import RelationHandle, RelationKind
from .clone_event import CLONED, CLONING, CloneEvent, event_name

__all__ = [
    "Cloneable",
    "RelationHandle",
    "RelationKind",
    "CLONED",
    "CLONING",
    "CloneEvent",
    "event_name",
]

"""Events published around the persistence of every clone."""

from dataclasses import dataclass
from typing import Any

CLONING = "cloning"
CLONED = "cloned"


def event_name(phase: str, entity_type: str) -> str:
    """Build an event name such as ``cloning:ArticleModel``."""
    return f"{phase}:{entity_type}"


@dataclass(frozen=True, eq=False)
class CloneEvent:
    """Payload carried by ``cloning:<type>`` and ``cloned:<type>`` events."""

    name: str
    clone: Any
    source: Any

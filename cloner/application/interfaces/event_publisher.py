"""Abstract event publishing port."""

from abc import ABC, abstractmethod
from typing import Any


class EventPublisher(ABC):
    """Fire-and-forget publisher — implementations must not raise on delivery failures."""

    @abstractmethod
    async def publish(self, event_name: str, payload: Any) -> None:
        ...

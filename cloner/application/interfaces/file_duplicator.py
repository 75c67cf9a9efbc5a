"""Abstract file duplication port."""

from abc import ABC, abstractmethod


class FileDuplicator(ABC):
    """Copies a stored file and hands back the reference of the copy."""

    @abstractmethod
    async def duplicate(self, reference: str) -> str:
        """Duplicate the file behind ``reference``.

        Raises ``FileError`` when the source is missing or the copy cannot be written.
        """
        ...

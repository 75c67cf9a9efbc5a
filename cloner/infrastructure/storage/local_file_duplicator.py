"""Local filesystem file duplication — copies stored files next to their originals.

Storage layout:
    <upload_dir>/<folder>/<stem><ext>           — original reference
    <upload_dir>/<folder>/<stem>_copy<ext>      — first duplicate
    <upload_dir>/<folder>/<stem>_copy_2<ext>    — following duplicates
"""

import asyncio
import logging
import shutil
from pathlib import Path, PurePosixPath

from cloner.application.interfaces import FileDuplicator
from cloner.domain.exceptions import FileError

logger = logging.getLogger(__name__)


class LocalFileDuplicator(FileDuplicator):
    """Infrastructure adapter duplicating files kept under a local upload directory.

    References are POSIX paths relative to ``upload_dir``.
    """

    def __init__(self, upload_dir: str):
        self._upload_dir = Path(upload_dir)
        self._upload_dir.mkdir(parents=True, exist_ok=True)

    async def duplicate(self, reference: str) -> str:
        source = self._resolve(reference)
        if not source.is_file():
            raise FileError(reference, "source file does not exist")

        target = _free_copy_path(source)
        try:
            await asyncio.to_thread(shutil.copy2, source, target)
        except OSError as exc:
            raise FileError(reference, str(exc)) from exc

        new_reference = target.relative_to(self._upload_dir).as_posix()
        logger.info("Duplicated file: %s → %s", reference, new_reference)
        return new_reference

    def _resolve(self, reference: str) -> Path:
        relative = PurePosixPath(reference)
        if relative.is_absolute() or ".." in relative.parts:
            raise FileError(reference, "reference must stay inside the upload directory")
        return self._upload_dir.joinpath(*relative.parts)


def _free_copy_path(source: Path) -> Path:
    """Return the first ``<stem>_copy[_N]<ext>`` sibling that does not exist yet."""
    candidate = source.with_name(f"{source.stem}_copy{source.suffix}")
    counter = 2
    while candidate.exists():
        candidate = source.with_name(f"{source.stem}_copy_{counter}{source.suffix}")
        counter += 1
    return candidate

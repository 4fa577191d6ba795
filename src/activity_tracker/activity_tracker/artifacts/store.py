from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Protocol

from werkzeug.utils import secure_filename

from ..core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class ArtifactStore(Protocol):
    """Holds certificate files; the rest of the system only keeps references."""

    def store(self, data: bytes, filename: str) -> str:
        raise NotImplementedError

    def delete(self, reference: str) -> None:
        """Remove the artifact. Raises OSError when removal fails."""

        raise NotImplementedError

    def open(self, reference: str) -> Path:
        raise NotImplementedError


class LocalArtifactStore(ArtifactStore):
    """Stores artifacts as files under a single upload directory.

    References are bare file names, unique per stored artifact.
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir).resolve()

    def _path_for(self, reference: str) -> Path:
        name = secure_filename(reference or "")
        if not name or name != reference:
            raise NotFoundError("Certificate not found")
        return self._base_dir / name

    def store(self, data: bytes, filename: str) -> str:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        safe = secure_filename(filename or "") or "certificate"
        reference = f"{uuid.uuid4().hex}-{safe}"
        path = self._base_dir / reference
        path.write_bytes(data)
        logger.debug("Stored artifact %s (%d bytes)", reference, len(data))
        return reference

    def delete(self, reference: str) -> None:
        path = self._path_for(reference)
        path.unlink()
        logger.debug("Deleted artifact %s", reference)

    def open(self, reference: str) -> Path:
        path = self._path_for(reference)
        if not path.is_file():
            raise NotFoundError("Certificate not found")
        return path

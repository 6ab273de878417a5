"""Filesystem-backed blob store for rant audio.

Audio references handed out by :meth:`BlobStore.save` are relative keys
(``<rant_id>.wav``) resolved under ``settings.audio_dir``.  A reference is
only returned once the bytes are fully written.
"""

import logging
import re
from pathlib import Path

from src.core.config import get_settings
from src.core.exceptions import AudioNotFoundError, InvalidRequestError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9]{1,5}$")


class BlobStore:
    """Stores and serves audio bytes under a single directory.

    Args:
        root: Directory holding the blobs (defaults to ``settings.audio_dir``).
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root or get_settings().audio_dir)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        """Resolve a blob key to a path, rejecting traversal attempts."""
        if not _KEY_RE.match(key):
            raise InvalidRequestError(f"Invalid audio reference: {key}")
        return self._root / key

    def save(self, key: str, data: bytes) -> str:
        """Write *data* atomically and return the audio reference."""
        if not data:
            raise InvalidRequestError("Cannot store empty audio")
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".part")
        tmp.write_bytes(data)
        tmp.replace(path)
        logger.info("Stored audio %s (%d bytes)", key, len(data))
        return key

    def read(self, key: str) -> bytes:
        """Return the stored bytes or raise :class:`AudioNotFoundError`."""
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise AudioNotFoundError(f"Audio blob missing: {key}") from exc

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def delete(self, key: str) -> bool:
        """Remove a blob; returns ``False`` if it was already gone."""
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Audio blob already missing: %s", key)
            return False
        return True

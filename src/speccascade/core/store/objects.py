"""Content-addressed object table.

Objects live at ``objects/<first two hex chars>/<remaining hex chars>``. An
object's name is the digest of its exact (normalised) bytes, so identical
content always lands on the same file and is stored once.
"""
from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path
from typing import Iterator, Union

from speccascade.core.exceptions import ObjectReferenceError, StorageIOError
from speccascade.core.utils.io import write_bytes

logger = logging.getLogger(__name__)

Content = Union[str, bytes]

_HEX = re.compile(r"^[0-9a-f]+$")


def normalize_bytes(content: Content, *, normalize_line_endings: bool = True) -> bytes:
    """Encode ``content`` as UTF-8 and fold CRLF / CR line endings to LF."""
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    if normalize_line_endings:
        data = data.replace(b"\r\n", b"\n").replace(b"\r", b"\n")
    return data


class ObjectStore:
    """Hash-addressed blob storage under ``objects_dir``."""

    def __init__(
        self,
        objects_dir: Path,
        *,
        algorithm: str = "sha256",
        normalize_line_endings: bool = True,
    ) -> None:
        self.objects_dir = Path(objects_dir)
        self.algorithm = algorithm
        self.normalize_line_endings = normalize_line_endings
        self.digest_size = hashlib.new(algorithm).digest_size * 2

    def prepare(self, content: Content) -> tuple[str, bytes]:
        """Return ``(hash, bytes)`` exactly as ``write`` would store them."""
        data = normalize_bytes(content, normalize_line_endings=self.normalize_line_endings)
        return hashlib.new(self.algorithm, data).hexdigest(), data

    def hash_content(self, content: Content) -> str:
        return self.prepare(content)[0]

    def is_valid_hash(self, object_hash: str) -> bool:
        return len(object_hash) == self.digest_size and bool(_HEX.match(object_hash))

    def path_for(self, object_hash: str) -> Path:
        if not self.is_valid_hash(object_hash):
            raise ObjectReferenceError(
                f"Malformed object hash: {object_hash!r}", context={"hash": object_hash}
            )
        return self.objects_dir / object_hash[:2] / object_hash[2:]

    def exists(self, object_hash: str) -> bool:
        if not self.is_valid_hash(object_hash):
            return False
        return self.path_for(object_hash).is_file()

    def write(self, content: Content) -> str:
        """Store ``content`` and return its hash (no-op when already present).

        Raises:
            StorageIOError: If the object cannot be written
        """
        object_hash, data = self.prepare(content)
        target = self.path_for(object_hash)
        if target.is_file():
            return object_hash
        try:
            write_bytes(target, data)
        except OSError as exc:
            raise StorageIOError(
                f"Failed to write object {object_hash}: {exc}",
                context={"hash": object_hash, "path": str(target)},
            ) from exc
        logger.debug("Wrote object %s (%d bytes)", object_hash, len(data))
        return object_hash

    def read(self, object_hash: str) -> bytes:
        """Return the stored bytes for ``object_hash``.

        Raises:
            ObjectReferenceError: If no such object exists
            StorageIOError: If the object cannot be read
        """
        target = self.path_for(object_hash)
        if not target.is_file():
            raise ObjectReferenceError(
                f"Object not found: {object_hash}", context={"hash": object_hash}
            )
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StorageIOError(
                f"Failed to read object {object_hash}: {exc}",
                context={"hash": object_hash, "path": str(target)},
            ) from exc

    def iter_hashes(self) -> Iterator[str]:
        """Yield every stored hash in sorted order."""
        if not self.objects_dir.is_dir():
            return
        for fanout in sorted(self.objects_dir.iterdir()):
            if not fanout.is_dir():
                continue
            for blob in sorted(fanout.iterdir()):
                object_hash = fanout.name + blob.name
                if self.is_valid_hash(object_hash):
                    yield object_hash


__all__ = ["Content", "ObjectStore", "normalize_bytes"]

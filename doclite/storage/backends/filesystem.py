"""File system storage backend: one JSON snapshot file, optionally gzipped."""

import fcntl
import gzip
import logging
import tempfile
from pathlib import Path

from doclite.core.codec import decode_documents, encode_documents
from doclite.core.exceptions import SerializationError, StorageError
from doclite.core.models import Document

from .base import BaseBackend

logger = logging.getLogger(__name__)

GZIP_SUFFIX = ".gz"
# favour speed; compression makes saves I/O bound anyway
GZIP_LEVEL = 1


class FileSystemBackend(BaseBackend):
    """Store the snapshot as a JSON array in a single file.

    A path ending in ``.gz`` turns compression on regardless of
    ``use_gzip``. Writes go to a temporary file in the same directory and
    are renamed over the target, so a failed save leaves the previous
    snapshot intact.
    """

    def __init__(
        self,
        path: Path | str,
        use_gzip: bool = False,
        indent: int | None = None,
    ):
        self.path = Path(path)
        self.use_gzip = use_gzip or self.path.name.endswith(GZIP_SUFFIX)
        self.indent = indent

    @property
    def location(self) -> str:
        return str(self.path)

    def load(self) -> list[Document] | None:
        """Read the snapshot file; None when it does not exist."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, "rb") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    raw = f.read()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            raise StorageError(f"Failed reading {self.path}: {e}") from e

        if self.use_gzip and raw:
            try:
                raw = gzip.decompress(raw)
            except (OSError, EOFError) as e:
                raise SerializationError(
                    f"Failed decompressing {self.path}: {e}"
                ) from e

        documents = decode_documents(raw)
        logger.info(f"Loaded {len(documents or [])} documents from {self.path}")
        return documents

    def save(self, documents: list[Document]) -> None:
        """Write the snapshot atomically."""
        data = encode_documents(documents, indent=self.indent)
        if self.use_gzip:
            data = gzip.compress(data, compresslevel=GZIP_LEVEL)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent, suffix=".tmp"
            )
        except OSError as e:
            raise StorageError(f"Failed writing {self.path}: {e}") from e

        try:
            with open(temp_fd, "wb") as f:
                f.write(data)
            Path(temp_path).replace(self.path)
        except OSError as e:
            Path(temp_path).unlink(missing_ok=True)
            raise StorageError(f"Failed writing {self.path}: {e}") from e

        logger.info(f"Saved {len(documents)} documents to {self.path}")

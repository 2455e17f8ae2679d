"""Durable fingerprint -> chunk set storage on the local filesystem.

One JSON file per fingerprint. Writes go to a temporary file in the same
directory and are published with ``os.replace``, so a reader sees either no
entry or a complete one. The store is the only component that touches these
files.
"""

import json
import logging
import os
import time
import uuid
from collections.abc import Iterator, Sequence
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from gemini_mcp.cache.fingerprint import is_valid_fingerprint
from gemini_mcp.core.errors import PersistenceFailure
from gemini_mcp.core.types import CacheEntryMetadata, Chunk

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".json"
TEMP_PREFIX = ".tmp-"
FORMAT_VERSION = 1


class ChunkStore:
    """Filesystem-backed chunk set store."""

    def __init__(self, root: Path, ttl_seconds: float | None = None) -> None:
        """Initialize the store.

        Args:
            root: Directory holding one file per cache entry
            ttl_seconds: Entries older than this read as missing; None disables the check
        """
        self.root = Path(root)
        self.ttl_seconds = ttl_seconds

    def _entry_path(self, fingerprint: str) -> Path:
        if not is_valid_fingerprint(fingerprint):
            raise ValueError(f"Invalid fingerprint: {fingerprint!r}")
        return self.root / f"{fingerprint}{ENTRY_SUFFIX}"

    def _is_expired(self, metadata: CacheEntryMetadata) -> bool:
        if self.ttl_seconds is None:
            return False
        return metadata.age(time.time()) > self.ttl_seconds

    def write(
        self,
        fingerprint: str,
        chunks: Sequence[Chunk],
        metadata: CacheEntryMetadata,
    ) -> None:
        """Persist a complete chunk set under ``fingerprint``.

        Raises:
            PersistenceFailure: if the entry could not be durably published
        """
        target = self._entry_path(fingerprint)
        document = {
            "version": FORMAT_VERSION,
            "metadata": metadata.to_dict(),
            "chunks": [chunk.to_dict() for chunk in chunks],
        }
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp = NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.root,
                prefix=TEMP_PREFIX,
                suffix=ENTRY_SUFFIX,
                delete=False,
            )
        except OSError as e:
            raise PersistenceFailure(f"Cannot create cache entry in {self.root}: {e}") from e

        tmp_path = Path(tmp.name)
        try:
            with tmp:
                json.dump(document, tmp, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, target)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceFailure(f"Failed to write cache entry {fingerprint}: {e}") from e

        logger.debug("chunk_store_write fingerprint=%s chunks=%d", fingerprint, len(chunks))

    def _load(self, path: Path) -> dict[str, Any] | None:
        """Read and decode an entry file; None when absent or malformed."""
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Ignoring malformed cache entry %s: %s", path.name, e)
            return None
        except OSError as e:
            raise PersistenceFailure(f"Failed to read cache entry {path.name}: {e}") from e

        if not isinstance(document, dict) or document.get("version") != FORMAT_VERSION:
            logger.warning("Ignoring cache entry %s with unsupported format", path.name)
            return None
        return document

    def read(self, fingerprint: str) -> list[Chunk] | None:
        """Return the chunk set stored under ``fingerprint``.

        Returns None if the entry is absent, malformed or expired.
        """
        path = self._entry_path(fingerprint)
        document = self._load(path)
        if document is None:
            return None

        try:
            metadata = CacheEntryMetadata.from_dict(document["metadata"])
            chunks = [Chunk.from_dict(item) for item in document["chunks"]]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed cache entry %s: %s", path.name, e)
            return None

        if len(chunks) != metadata.total_chunks:
            logger.warning("Ignoring truncated cache entry %s", path.name)
            return None
        if self._is_expired(metadata):
            return None

        self._touch(path)
        return chunks

    @staticmethod
    def _touch(path: Path) -> None:
        """Record last access in the file's mtime; content is never rewritten."""
        try:
            os.utime(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Could not update access time for %s: %s", path.name, e)

    def delete(self, fingerprint: str) -> None:
        """Remove an entry. Deleting a missing entry is not an error.

        Raises:
            PersistenceFailure: if an existing entry could not be removed
        """
        path = self._entry_path(fingerprint)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailure(f"Failed to delete cache entry {fingerprint}: {e}") from e

    def delete_if_expired(self, fingerprint: str, ttl_seconds: float, now: float) -> bool:
        """Remove an entry only if the copy on disk is still older than ``ttl_seconds``.

        An entry re-stored after it was listed is kept. The entry is moved aside
        before its age is checked again, and restored without overwriting if a
        fresh copy turns out to have been published meanwhile.

        Returns:
            True if an expired entry was removed

        Raises:
            PersistenceFailure: if the entry could not be moved or removed
        """
        path = self._entry_path(fingerprint)
        current = self._metadata_for(path, fingerprint)
        if current is None or current.age(now) <= ttl_seconds:
            return False

        tombstone = path.with_name(f"{TEMP_PREFIX}{fingerprint}-{uuid.uuid4().hex}.sweep")
        try:
            os.rename(path, tombstone)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceFailure(f"Failed to delete cache entry {fingerprint}: {e}") from e

        moved = self._metadata_for(tombstone, fingerprint)
        if moved is not None and moved.age(now) <= ttl_seconds:
            self._restore(tombstone, path)
            logger.debug("sweep_skipped_restored_entry fingerprint=%s", fingerprint)
            return False

        try:
            tombstone.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceFailure(f"Failed to delete cache entry {fingerprint}: {e}") from e
        return True

    @staticmethod
    def _restore(tombstone: Path, path: Path) -> None:
        """Put a moved entry back unless a newer copy was published in its place."""
        try:
            os.link(tombstone, path)
        except FileExistsError:
            pass
        except OSError:
            # no hard links on this filesystem
            try:
                os.replace(tombstone, path)
            except OSError as e:
                raise PersistenceFailure(f"Failed to restore cache entry {path.name}: {e}") from e
            return
        tombstone.unlink(missing_ok=True)

    def list_all(self) -> Iterator[tuple[str, CacheEntryMetadata]]:
        """Yield ``(fingerprint, metadata)`` for every entry currently on disk.

        Best-effort snapshot: entries written or removed while iterating may or
        may not appear. Entries whose metadata cannot be decoded are reported
        with their file times so the sweeper can still expire them.
        """
        if not self.root.is_dir():
            return
        for path in sorted(self.root.glob(f"*{ENTRY_SUFFIX}")):
            if path.name.startswith(TEMP_PREFIX):
                continue
            key = path.name[: -len(ENTRY_SUFFIX)]
            if not is_valid_fingerprint(key):
                continue
            metadata = self._metadata_for(path, key)
            if metadata is not None:
                yield key, metadata

    def _metadata_for(self, path: Path, key: str) -> CacheEntryMetadata | None:
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Cannot stat cache entry %s: %s", path.name, e)
            return None

        try:
            document = self._load(path)
        except PersistenceFailure as e:
            logger.warning("%s", e)
            document = None
        if document is not None:
            try:
                stored = CacheEntryMetadata.from_dict(document["metadata"])
                return CacheEntryMetadata(
                    fingerprint=stored.fingerprint,
                    created_at=stored.created_at,
                    last_accessed_at=max(stored.last_accessed_at, stat.st_mtime),
                    total_chunks=stored.total_chunks,
                )
            except (KeyError, TypeError, ValueError):
                pass
        return CacheEntryMetadata(
            fingerprint=key,
            created_at=stat.st_mtime,
            last_accessed_at=stat.st_mtime,
            total_chunks=0,
        )

    def purge_temp_files(self, older_than_seconds: float) -> int:
        """Remove temporary files abandoned by interrupted writes."""
        if not self.root.is_dir():
            return 0
        now = time.time()
        removed = 0
        for path in self.root.glob(f"{TEMP_PREFIX}*"):
            try:
                if now - path.stat().st_mtime > older_than_seconds:
                    path.unlink(missing_ok=True)
                    removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Could not remove temporary cache file %s: %s", path.name, e)
        return removed

    def count(self) -> int:
        if not self.root.is_dir():
            return 0
        return sum(
            1
            for path in self.root.glob(f"*{ENTRY_SUFFIX}")
            if not path.name.startswith(TEMP_PREFIX)
            and is_valid_fingerprint(path.name[: -len(ENTRY_SUFFIX)])
        )

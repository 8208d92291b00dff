"""Cached, staleness-aware store for the persisted sanctions document.

The store owns the in-memory copy of every sanctions list. Readers get a
reference to a whole document that is never mutated afterwards; merges and
reloads publish a new document by swapping that reference under the lock.
"""

import contextlib
import os
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sanctionwatch.config.settings import get_settings
from sanctionwatch.core.logging import get_logger

from .types import (
    SanctionList,
    SanctionsDocument,
    SanctionsDocumentError,
    SanctionsPersistError,
    document_adapter,
)

logger = get_logger(__name__)

_NS_PER_SECOND = 1_000_000_000


class ListStore:
    """Holds all sanctions lists loaded from a YAML document.

    The document is reloaded only when its modification time moves past
    the one recorded at the last load or persist.

    Usage:
        store = ListStore("/var/storage/sanctions.yml")
        data = store.current_data()

        if store.merge(fresh_lists):
            store.persist()
    """

    def __init__(self, sanction_file: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            sanction_file: Path of the persisted document. Defaults to
                the configured `sanction_file` setting.
        """
        self._path = Path(sanction_file) if sanction_file else get_settings().sanction_file
        self._data: SanctionsDocument = {}
        self._loaded = False
        self._last_mtime_ns = 0
        self._load_count = 0
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        """Location of the persisted document."""
        return self._path

    @property
    def load_count(self) -> int:
        """Number of times the document has been read from disk."""
        return self._load_count

    @contextlib.contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the store's cache-and-persist section for a whole cycle."""
        with self._lock:
            yield

    def current_data(self) -> SanctionsDocument:
        """Return the cached document, reloading it if the file is newer.

        A missing document yields an empty one.

        Raises:
            SanctionsDocumentError: If the document exists but is malformed.
        """
        with self._lock:
            try:
                fh = self._path.open("rb")
            except FileNotFoundError:
                if not self._loaded:
                    logger.info("sanctions_document_missing", path=str(self._path))
                    self._data = {}
                    self._loaded = True
                return self._data

            with fh:
                mtime_ns = os.fstat(fh.fileno()).st_mtime_ns
                if self._loaded and mtime_ns <= self._last_mtime_ns:
                    return self._data
                data = self._parse(fh.read())

            self._data = data
            self._last_mtime_ns = mtime_ns
            self._loaded = True
            self._load_count += 1

            logger.info(
                "sanctions_document_loaded",
                path=str(self._path),
                lists=len(data),
                mtime=mtime_ns // _NS_PER_SECOND,
            )
            return self._data

    def merge(self, updates: Mapping[str, SanctionList | Mapping[str, Any]]) -> bool:
        """Fold freshly fetched lists into the cached document.

        A stored list is replaced only when it is absent or its `updated`
        timestamp is strictly older than the incoming one. Lists absent from
        `updates` are kept. The merge starts from the current document, so
        a store that has not loaded yet, or whose file changed, is reloaded
        first. Nothing is written to disk.

        Args:
            updates: Fresh lists keyed by list identifier.

        Returns:
            True if any list was replaced.

        Raises:
            SanctionsDocumentError: If the current document is malformed.
        """
        incoming = {
            list_id: SanctionList.model_validate(value) for list_id, value in updates.items()
        }

        with self._lock:
            merged = dict(self.current_data())
            replaced: list[str] = []
            for list_id, fresh in incoming.items():
                existing = merged.get(list_id)
                if existing is None or existing.updated < fresh.updated:
                    merged[list_id] = fresh
                    replaced.append(list_id)

            if not replaced:
                logger.debug("sanctions_lists_unchanged", lists=sorted(incoming))
                return False

            self._data = merged
            logger.info("sanctions_lists_merged", lists=sorted(replaced))
            return True

    def persist(self) -> None:
        """Atomically write the cached document back to its file.

        The document is written to a temporary sibling and renamed over the
        real name, so a partially written file is never visible.

        Raises:
            SanctionsPersistError: If the write or the rename fails.
        """
        with self._lock:
            tmp_path = self._path.with_name(self._path.name + ".tmp")
            payload = {
                list_id: self._data[list_id].model_dump(mode="json")
                for list_id in sorted(self._data)
            }

            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with tmp_path.open("w", encoding="utf-8") as fh:
                    yaml.safe_dump(payload, fh, allow_unicode=True, sort_keys=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_path, self._path)
                mtime_ns = self._path.stat().st_mtime_ns
            except OSError as e:
                with contextlib.suppress(OSError):
                    tmp_path.unlink(missing_ok=True)
                logger.error(
                    "sanctions_persist_failed",
                    path=str(self._path),
                    error=str(e),
                )
                raise SanctionsPersistError(self._path, str(e)) from e

            self._last_mtime_ns = mtime_ns
            self._loaded = True
            logger.info(
                "sanctions_document_persisted",
                path=str(self._path),
                lists=len(payload),
            )

    def restore(self, document: SanctionsDocument) -> None:
        """Publish a previously returned document as the cached one."""
        with self._lock:
            self._data = document

    def last_updated(self, list_id: str | None = None) -> int | None:
        """Timestamp of a list's last change, or of the document itself.

        Args:
            list_id: Optional list identifier.

        Returns:
            The list's `updated` field when `list_id` is given (None for an
            unknown list), otherwise the document's modification time as
            recorded at the last load or persist.
        """
        if list_id:
            sanction_list = self.current_data().get(list_id)
            return sanction_list.updated if sanction_list is not None else None
        return self._last_mtime_ns // _NS_PER_SECOND

    def _parse(self, raw: bytes) -> SanctionsDocument:
        """Decode and validate the YAML document."""
        try:
            content = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise SanctionsDocumentError(self._path, str(e)) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise SanctionsDocumentError(
                self._path, f"expected a mapping of lists, got {type(content).__name__}"
            )

        try:
            return document_adapter.validate_python(content)
        except ValidationError as e:
            raise SanctionsDocumentError(self._path, str(e)) from e

"""Refresh cycle folding freshly fetched lists into the sanctions store."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from sanctionwatch.core.logging import LogContext, get_logger, log_exception

from .store import ListStore
from .types import SanctionList, SanctionsError, SanctionsFetchError, SanctionsPersistError

logger = get_logger(__name__)

# Produces the current content of each upstream list, keyed by identifier
ListFetcher = Callable[[], Mapping[str, SanctionList | Mapping[str, Any]]]


class RefreshResult(BaseModel):
    """Result of one refresh cycle.

    Attributes:
        changed: Whether any list was replaced (and the document written).
        lists_fetched: Identifiers returned by the fetcher.
        started_at: When the refresh started.
        completed_at: When the refresh completed.
        duration_seconds: How long the refresh took.
    """

    changed: bool
    lists_fetched: list[str] = Field(default_factory=list)
    started_at: datetime
    completed_at: datetime
    duration_seconds: float = 0.0


class UpdateCoordinator:
    """Drives refreshes of a ListStore from an external fetcher.

    The fetch runs outside the store's lock; load, merge and persist run
    inside it, so readers never see a half-merged document.

    Usage:
        coordinator = UpdateCoordinator(store, fetch_all_lists)
        result = coordinator.refresh()
    """

    def __init__(self, store: ListStore, fetcher: ListFetcher) -> None:
        self._store = store
        self._fetcher = fetcher

    @property
    def store(self) -> ListStore:
        return self._store

    def refresh(self) -> RefreshResult:
        """Fetch all lists, merge them and persist if anything changed.

        Raises:
            SanctionsFetchError: If the fetcher fails or returns data that
                does not fit the data model. Nothing is merged.
            SanctionsPersistError: If the document could not be written.
                The cached document is left as it was before the refresh.
            SanctionsDocumentError: If the current document is malformed.
        """
        with LogContext(sanction_file=str(self._store.path)):
            return self._refresh()

    def _refresh(self) -> RefreshResult:
        started_at = datetime.now(UTC)
        logger.info("sanctions_refresh_started")

        updates = self._fetch()

        with self._store.exclusive():
            previous = self._store.current_data()
            changed = self._store.merge(updates)
            if changed:
                try:
                    self._store.persist()
                except SanctionsPersistError:
                    self._store.restore(previous)
                    raise

        completed_at = datetime.now(UTC)
        result = RefreshResult(
            changed=changed,
            lists_fetched=sorted(updates),
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

        logger.info(
            "sanctions_refresh_completed",
            changed=changed,
            lists_fetched=result.lists_fetched,
            duration_seconds=result.duration_seconds,
        )
        return result

    def _fetch(self) -> dict[str, SanctionList]:
        """Call the fetcher and validate what it returned."""
        try:
            fetched = self._fetcher()
        except SanctionsError:
            raise
        except Exception as e:
            log_exception(logger, e, operation="sanctions_fetch")
            raise SanctionsFetchError(str(e)) from e

        if not isinstance(fetched, Mapping):
            raise SanctionsFetchError(
                f"fetcher returned {type(fetched).__name__}, expected a mapping"
            )

        try:
            return {
                str(list_id): SanctionList.model_validate(value)
                for list_id, value in fetched.items()
            }
        except ValidationError as e:
            raise SanctionsFetchError(str(e)) from e

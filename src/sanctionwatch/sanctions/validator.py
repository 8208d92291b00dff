"""Caller-facing sanctions validator and the process-wide default instance.

Example:
    from sanctionwatch.sanctions import is_sanctioned, set_sanction_file

    set_sanction_file("/var/storage/sanctions.yml")
    if is_sanctioned("First", "Last Name"):
        ...

    # Or with an explicit instance
    validator = SanctionsValidator("/var/storage/sanctions.yml", fetcher=fetch_lists)
    info = validator.get_sanctioned_info("Jon", "Snow", "1990-01-31")
    validator.update_data()
"""

import threading
from pathlib import Path

from sanctionwatch.config.settings import Settings, get_settings
from sanctionwatch.core.logging import get_logger
from sanctionwatch.utils.exceptions import ConfigurationError

from .matcher import DobInput, NameMatcher
from .store import ListStore
from .types import MatchResult
from .updater import ListFetcher, RefreshResult, UpdateCoordinator

logger = get_logger(__name__)


class SanctionsValidator:
    """Validates names against the sanctions lists of one document.

    Bundles the store, the matcher and, when a fetcher is given, the
    update coordinator for that document.
    """

    def __init__(
        self,
        sanction_file: str | Path | None = None,
        *,
        fetcher: ListFetcher | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            sanction_file: Path of the persisted document (default from settings).
            fetcher: Optional collaborator producing fresh lists for `update_data`.
            settings: Optional settings overriding the global ones.
        """
        settings = settings or get_settings()
        self._store = ListStore(sanction_file or settings.sanction_file)
        self._matcher = NameMatcher(
            self._store,
            dob_aware_lists=settings.dob_aware_lists,
            require_dob_match=settings.require_dob_match,
        )
        self._coordinator = UpdateCoordinator(self._store, fetcher) if fetcher else None

    @property
    def sanction_file(self) -> Path:
        return self._store.path

    @property
    def store(self) -> ListStore:
        return self._store

    @property
    def matcher(self) -> NameMatcher:
        return self._matcher

    def get_sanctioned_info(
        self,
        first_name: str | None,
        last_name: str | None = None,
        date_of_birth: DobInput = None,
    ) -> MatchResult:
        """Screen a name and report which list and entry matched.

        Either pass first and last name (both orders are checked) or a single
        combined name with the last name first.
        """
        return self._matcher.check(first_name, last_name, date_of_birth)

    def is_sanctioned(
        self,
        first_name: str | None,
        last_name: str | None = None,
        date_of_birth: DobInput = None,
    ) -> bool:
        """Return True if the name matches any sanctions list."""
        return self.get_sanctioned_info(first_name, last_name, date_of_birth).matched

    def update_data(self) -> RefreshResult:
        """Fetch the latest lists and update the stored document if needed.

        Raises:
            ConfigurationError: If the validator was created without a fetcher.
        """
        if self._coordinator is None:
            raise ConfigurationError("update_data requires a list fetcher")
        return self._coordinator.refresh()

    def last_updated(self, list_id: str | None = None) -> int | None:
        """Timestamp of the stored document, or of one list if given."""
        return self._store.last_updated(list_id)


# =============================================================================
# Default instance
# =============================================================================


_sanction_file: Path | None = None
_validator_instance: SanctionsValidator | None = None
_instance_lock = threading.Lock()


def set_sanction_file(sanction_file: str | Path) -> None:
    """Set the document used by the module-level functions.

    Discards the default validator bound to the previous location.
    """
    global _sanction_file, _validator_instance
    if not sanction_file:
        raise ConfigurationError("sanction_file is needed")
    with _instance_lock:
        _sanction_file = Path(sanction_file)
        _validator_instance = None
    logger.info("sanction_file_set", path=str(sanction_file))


def get_sanction_file() -> Path:
    """Get the document used by the module-level functions."""
    validator = _validator_instance
    if validator is not None:
        return validator.sanction_file
    return _sanction_file or get_settings().sanction_file


def get_sanctions_validator() -> SanctionsValidator:
    """Get the lazily created default validator.

    Returns:
        The SanctionsValidator singleton.
    """
    global _validator_instance
    validator = _validator_instance
    if validator is None:
        with _instance_lock:
            if _validator_instance is None:
                _validator_instance = SanctionsValidator(_sanction_file)
            validator = _validator_instance
    return validator


def create_sanctions_validator(
    sanction_file: str | Path | None = None,
    *,
    fetcher: ListFetcher | None = None,
    settings: Settings | None = None,
) -> SanctionsValidator:
    """Create a new validator instance.

    Use this for testing or when you need a validator for another document.
    """
    return SanctionsValidator(sanction_file, fetcher=fetcher, settings=settings)


def get_sanctioned_info(
    first_name: str | None,
    last_name: str | None = None,
    date_of_birth: DobInput = None,
) -> MatchResult:
    """Screen a name with the default validator."""
    return get_sanctions_validator().get_sanctioned_info(first_name, last_name, date_of_birth)


def is_sanctioned(
    first_name: str | None,
    last_name: str | None = None,
    date_of_birth: DobInput = None,
) -> bool:
    """Return True if the name matches any list, using the default validator."""
    return get_sanctioned_info(first_name, last_name, date_of_birth).matched

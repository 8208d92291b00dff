"""Sanctions list screening.

This module screens person names (and optionally dates of birth) against
government sanctions lists kept in a cached YAML document:
- OFAC SDN (US Treasury Specially Designated Nationals)
- OFAC Consolidated (non-SDN) list
- HMT (UK Treasury) consolidated list, with dates of birth

Example:
    from sanctionwatch.sanctions import (
        ListStore,
        NameMatcher,
        UpdateCoordinator,
    )

    store = ListStore("/var/storage/sanctions.yml")
    matcher = NameMatcher(store)

    result = matcher.check("Jon", "Snow")
    if result.matched:
        print(f"{result.name} is on {result.list_id}")

    # Refresh from an external fetcher
    UpdateCoordinator(store, fetch_lists).refresh()
"""

from .matcher import (
    NameMatcher,
    contains_in_order,
    match_document,
    name_variants,
    normalize_name,
    resolve_dob_epoch,
)
from .scheduler import RefreshScheduler, RefreshSchedulerConfig
from .store import ListStore
from .types import (
    KNOWN_LISTS,
    OFAC_CONSOLIDATED,
    OFAC_SDN,
    ListKind,
    MatchResult,
    NameRecord,
    SanctionList,
    SanctionsDocument,
    SanctionsDocumentError,
    SanctionsError,
    SanctionsFetchError,
    SanctionsPersistError,
)
from .updater import ListFetcher, RefreshResult, UpdateCoordinator
from .validator import (
    SanctionsValidator,
    create_sanctions_validator,
    get_sanction_file,
    get_sanctioned_info,
    get_sanctions_validator,
    is_sanctioned,
    set_sanction_file,
)

__all__ = [
    # Store
    "ListStore",
    # Matcher
    "NameMatcher",
    "contains_in_order",
    "match_document",
    "name_variants",
    "normalize_name",
    "resolve_dob_epoch",
    # Updates
    "ListFetcher",
    "RefreshResult",
    "UpdateCoordinator",
    "RefreshScheduler",
    "RefreshSchedulerConfig",
    # Validator
    "SanctionsValidator",
    "create_sanctions_validator",
    "get_sanction_file",
    "get_sanctioned_info",
    "get_sanctions_validator",
    "is_sanctioned",
    "set_sanction_file",
    # Types
    "KNOWN_LISTS",
    "OFAC_CONSOLIDATED",
    "OFAC_SDN",
    "ListKind",
    "MatchResult",
    "NameRecord",
    "SanctionList",
    "SanctionsDocument",
    # Exceptions
    "SanctionsError",
    "SanctionsDocumentError",
    "SanctionsFetchError",
    "SanctionsPersistError",
]

"""Name matching against sanctions lists.

Names are reduced to their upper-cased alphabetic characters. A query of
first and last name yields up to two variants (first-then-last and
last-then-first); a stored name matches a variant when the variant's
tokens occur in it in order, with anything in between.
"""

import re
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, time
from typing import Any

from sanctionwatch.config.settings import get_settings
from sanctionwatch.core.logging import get_logger

from .store import ListStore
from .types import ListKind, MatchResult, SanctionsDocument

logger = get_logger(__name__)

DobInput = date | datetime | int | str | None

_DATE_FORMATS = ("%Y/%m/%d", "%d-%b-%Y", "%d %b %Y", "%d %B %Y")
_EPOCH_PATTERN = re.compile(r"-?[0-9]+")


def normalize_name(name: str | None) -> str:
    """Keep alphabetic characters only, upper-cased."""
    if not name:
        return ""
    return "".join(ch for ch in name.upper() if ch.isalpha())


def name_variants(first_name: str | None, last_name: str | None = None) -> list[tuple[str, ...]]:
    """Build the token sequences a stored name is tested against.

    Empty tokens are dropped, so a single combined name produces one
    variant and a query with no letters at all produces none.
    """
    tokens = tuple(t for t in (normalize_name(first_name), normalize_name(last_name)) if t)
    if not tokens:
        return []
    if len(tokens) == 1:
        return [tokens]
    return [tokens, tokens[::-1]]


def contains_in_order(haystack: str, tokens: Sequence[str]) -> bool:
    """Check that every token occurs in `haystack`, in order, without overlap."""
    pos = 0
    for token in tokens:
        found = haystack.find(token, pos)
        if found < 0:
            return False
        pos = found + len(token)
    return True


def resolve_dob_epoch(value: Any) -> int | None:
    """Resolve a date of birth to epoch seconds at midnight UTC.

    Integers, and strings made only of digits (optionally signed), are
    taken as epoch seconds as they are, so `"19900131"` is an epoch and not
    a basic-format ISO date. Other strings are tried as ISO 8601 and then
    as the formats in `_DATE_FORMATS`. Returns None when the value is
    absent or cannot be understood as a date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return _unparsable_dob(value)
    if isinstance(value, int):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return _date_to_epoch(value.date())
    if isinstance(value, date):
        return _date_to_epoch(value)
    if not isinstance(value, str):
        return _unparsable_dob(value)

    text = value.strip()
    if _EPOCH_PATTERN.fullmatch(text):
        return int(text)
    try:
        return _date_to_epoch(date.fromisoformat(text))
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(UTC)
        return _date_to_epoch(parsed.date())
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return _date_to_epoch(datetime.strptime(text, fmt).date())
        except ValueError:
            continue
    return _unparsable_dob(value)


def _date_to_epoch(day: date) -> int:
    return int(datetime.combine(day, time(), tzinfo=UTC).timestamp())


def _unparsable_dob(value: Any) -> None:
    logger.warning("dob_unparsable", value_type=type(value).__name__)
    return None


def match_document(
    data: SanctionsDocument,
    first_name: str | None,
    last_name: str | None = None,
    date_of_birth: DobInput = None,
    *,
    dob_aware_lists: Iterable[str] = (),
    require_dob_match: bool = False,
) -> MatchResult:
    """Scan a sanctions document for the first list entry matching a name.

    Lists are visited sorted by identifier and entries in stored order;
    the first (list, entry, variant) hit wins.

    On date-of-birth-aware lists the date check is computed for every name
    hit but, unless `require_dob_match` is set, does not gate the verdict.

    Args:
        data: Document to scan.
        first_name: First name, or a single combined name.
        last_name: Optional last name.
        date_of_birth: Optional date of birth in any supported form.
        dob_aware_lists: Identifiers of date-of-birth-aware lists.
        require_dob_match: Only report hits on date-of-birth-aware lists
            whose date of birth also matched.

    Returns:
        The verdict for the query.
    """
    variants = name_variants(first_name, last_name)
    if not variants:
        return MatchResult(matched=False)

    dob_aware = set(dob_aware_lists)
    dob_epoch = resolve_dob_epoch(date_of_birth)

    for list_id in sorted(data):
        sanction_list = data[list_id]
        kind = ListKind.for_list(list_id, dob_aware)

        for name in sanction_list.names():
            check_name = normalize_name(name)
            if not check_name:
                continue
            if not any(contains_in_order(check_name, variant) for variant in variants):
                continue

            dob_matched: bool | None = None
            if kind is ListKind.DOB_AWARE:
                dob_matched = dob_epoch is not None and dob_epoch in sanction_list.dob_epochs(name)
                if require_dob_match and not dob_matched:
                    continue

            logger.debug(
                "sanctions_match_found",
                list_id=list_id,
                dob_matched=dob_matched,
            )
            return MatchResult(matched=True, list_id=list_id, name=name, dob_matched=dob_matched)

    return MatchResult(matched=False)


class NameMatcher:
    """Screens names against the lists held by a ListStore.

    The matcher holds no state of its own; every check reads the store's
    current document, which reloads it if the file changed.

    Usage:
        matcher = NameMatcher(ListStore("/var/storage/sanctions.yml"))

        result = matcher.check("Jon", "Snow")
        if result.matched:
            print(f"{result.name} on {result.list_id}")
    """

    def __init__(
        self,
        store: ListStore,
        *,
        dob_aware_lists: Iterable[str] | None = None,
        require_dob_match: bool | None = None,
    ) -> None:
        """Initialize the matcher.

        Args:
            store: Store providing the sanctions document.
            dob_aware_lists: Identifiers of date-of-birth-aware lists
                (default from settings).
            require_dob_match: Gate hits on date-of-birth-aware lists by
                the date check (default from settings).
        """
        settings = get_settings()
        self._store = store
        self._dob_aware_lists = frozenset(
            dob_aware_lists if dob_aware_lists is not None else settings.dob_aware_lists
        )
        self._require_dob_match = (
            require_dob_match if require_dob_match is not None else settings.require_dob_match
        )

    @property
    def store(self) -> ListStore:
        return self._store

    @property
    def dob_aware_lists(self) -> frozenset[str]:
        return self._dob_aware_lists

    def list_kind(self, list_id: str) -> ListKind:
        """Kind of the list with the given identifier."""
        return ListKind.for_list(list_id, self._dob_aware_lists)

    def check(
        self,
        first_name: str | None,
        last_name: str | None = None,
        date_of_birth: DobInput = None,
    ) -> MatchResult:
        """Screen a name (and optional date of birth) against all lists."""
        return match_document(
            self._store.current_data(),
            first_name,
            last_name,
            date_of_birth,
            dob_aware_lists=self._dob_aware_lists,
            require_dob_match=self._require_dob_match,
        )

    def is_sanctioned(
        self,
        first_name: str | None,
        last_name: str | None = None,
        date_of_birth: DobInput = None,
    ) -> bool:
        """Boolean form of `check`."""
        return self.check(first_name, last_name, date_of_birth).matched

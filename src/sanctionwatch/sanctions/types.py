"""Type definitions for sanctions list screening.

This module defines the persisted data model (sanctions lists and their
entries), the match verdict returned to callers, and the exceptions raised
by the store, the matcher and the update coordinator.
"""

from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer

from sanctionwatch.config.settings import HMT_SANCTIONS
from sanctionwatch.utils.exceptions import SanctionwatchError

# Identifiers of the upstream lists maintained by the fetch collaborator
OFAC_SDN = "OFAC-SDN"
OFAC_CONSOLIDATED = "OFAC-Consolidated"
KNOWN_LISTS = (OFAC_SDN, OFAC_CONSOLIDATED, HMT_SANCTIONS)


class ListKind(str, Enum):
    """How the entries of a sanctions list are shaped."""

    PLAIN = "plain"  # Ordered sequence of names
    DOB_AWARE = "dob_aware"  # Name-keyed mapping to known birth dates

    @classmethod
    def for_list(cls, list_id: str, dob_aware_lists: Iterable[str]) -> "ListKind":
        """Resolve the kind of a list from its identifier."""
        return cls.DOB_AWARE if list_id in set(dob_aware_lists) else cls.PLAIN


class NameRecord(BaseModel):
    """Per-name record of a date-of-birth-aware list.

    Attributes:
        dob_epoch: Known birth dates as epoch seconds (midnight UTC).
    """

    model_config = ConfigDict(extra="forbid")

    dob_epoch: set[int] = Field(default_factory=set)

    @field_serializer("dob_epoch")
    def _serialize_dob_epoch(self, value: set[int]) -> list[int]:
        return sorted(value)


class SanctionList(BaseModel):
    """One named watch list.

    Both fields are required and unknown keys are rejected, so a list in
    any other shape fails validation instead of loading as empty.

    Attributes:
        updated: Epoch timestamp of the last change to this list's content.
        entries: Names in publication order, or a name-keyed mapping to
            birth date records for date-of-birth-aware lists.
    """

    model_config = ConfigDict(extra="forbid")

    updated: int
    entries: list[str] | dict[str, NameRecord]

    def names(self) -> list[str]:
        """Stored names in the list's own order."""
        return list(self.entries)

    def dob_epochs(self, name: str) -> set[int]:
        """Known birth dates for a stored name (empty for plain lists)."""
        if isinstance(self.entries, dict):
            record = self.entries.get(name)
            if record is not None:
                return record.dob_epoch
        return set()


# The full persisted state: list identifier -> list
SanctionsDocument = dict[str, SanctionList]

document_adapter: TypeAdapter[SanctionsDocument] = TypeAdapter(SanctionsDocument)


class MatchResult(BaseModel):
    """Verdict of screening one name.

    Attributes:
        matched: Whether any stored name matched.
        list_id: Identifier of the matching list (only when matched).
        name: The stored entry that matched (only when matched).
        dob_matched: Outcome of the date-of-birth check on
            date-of-birth-aware lists; None when it was not applicable.
    """

    matched: bool = False
    list_id: str | None = Field(default=None, serialization_alias="list")
    name: str | None = None
    dob_matched: bool | None = None

    def __bool__(self) -> bool:
        return self.matched

    def to_dict(self) -> dict[str, Any]:
        """Plain `{matched, list, name}` form; list and name only when matched."""
        if not self.matched:
            return {"matched": False}
        return {"matched": True, "list": self.list_id, "name": self.name}


# =============================================================================
# Exceptions
# =============================================================================


class SanctionsError(SanctionwatchError):
    """Base exception for sanctions screening errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SanctionsDocumentError(SanctionsError):
    """Raised when the persisted sanctions document cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"Sanctions document {path} is malformed: {reason}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class SanctionsPersistError(SanctionsError):
    """Raised when the sanctions document could not be durably replaced."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"Can't replace sanctions document {path}: {reason}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class SanctionsFetchError(SanctionsError):
    """Raised when fresh list data could not be obtained."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            f"Fetching sanctions lists failed: {reason}",
            details={"reason": reason},
        )
        self.reason = reason

"""Unit tests for sanctions type definitions."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from sanctionwatch.sanctions import (
    KNOWN_LISTS,
    ListKind,
    MatchResult,
    NameRecord,
    SanctionList,
    SanctionsDocumentError,
    SanctionsError,
    SanctionsFetchError,
    SanctionsPersistError,
)
from sanctionwatch.sanctions.types import document_adapter
from sanctionwatch.utils.exceptions import SanctionwatchError


class TestSanctionList:
    """Tests for the SanctionList model."""

    def test_fields_required(self):
        """Test a list without a timestamp or entries is rejected."""
        with pytest.raises(ValidationError):
            SanctionList()
        with pytest.raises(ValidationError):
            SanctionList(updated=5)
        with pytest.raises(ValidationError):
            SanctionList(entries=["A"])

    def test_unknown_keys_rejected(self):
        """Test keys from other document layouts are not silently dropped."""
        with pytest.raises(ValidationError):
            SanctionList.model_validate({"updated": 5, "names": ["Jon Snow"]})
        with pytest.raises(ValidationError):
            SanctionList.model_validate({"updated": 5, "entries": [], "names": ["Jon Snow"]})
        with pytest.raises(ValidationError):
            NameRecord.model_validate({"dob": [123456]})

    def test_empty_entries(self):
        sanction_list = SanctionList(updated=0, entries=[])
        assert sanction_list.names() == []

    def test_plain_entries(self):
        sanction_list = SanctionList(updated=5, entries=["B", "A"])
        assert sanction_list.names() == ["B", "A"]
        assert sanction_list.dob_epochs("A") == set()

    def test_dob_entries(self):
        sanction_list = SanctionList.model_validate(
            {"updated": 5, "entries": {"Jane Doe": {"dob_epoch": [3, 1]}}}
        )
        assert isinstance(sanction_list.entries["Jane Doe"], NameRecord)
        assert sanction_list.names() == ["Jane Doe"]
        assert sanction_list.dob_epochs("Jane Doe") == {1, 3}
        assert sanction_list.dob_epochs("Nobody") == set()

    def test_dump_sorts_dob_epochs(self):
        sanction_list = SanctionList(updated=0, entries={"X": NameRecord(dob_epoch={9, 2, 5})})
        assert sanction_list.model_dump(mode="json") == {
            "updated": 0,
            "entries": {"X": {"dob_epoch": [2, 5, 9]}},
        }

    def test_invalid_updated(self):
        with pytest.raises(ValidationError):
            SanctionList(updated="never", entries=[])

    def test_document_adapter(self):
        document = document_adapter.validate_python({"L1": {"updated": 1, "entries": ["A"]}})
        assert document == {"L1": SanctionList(updated=1, entries=["A"])}


class TestListKind:
    """Tests for list kind resolution."""

    def test_known_lists(self):
        assert KNOWN_LISTS == ("OFAC-SDN", "OFAC-Consolidated", "HMT-Sanctions")

    def test_for_list(self):
        assert ListKind.for_list("HMT-Sanctions", ["HMT-Sanctions"]) is ListKind.DOB_AWARE
        assert ListKind.for_list("OFAC-SDN", ["HMT-Sanctions"]) is ListKind.PLAIN


class TestMatchResult:
    """Tests for the MatchResult model."""

    def test_unmatched_dict(self):
        assert MatchResult().to_dict() == {"matched": False}

    def test_matched_dict(self):
        result = MatchResult(matched=True, list_id="L1", name="Jon Snow")
        assert result.to_dict() == {"matched": True, "list": "L1", "name": "Jon Snow"}

    def test_serialization_alias(self):
        result = MatchResult(matched=True, list_id="L1", name="Jon Snow")
        dumped = result.model_dump(by_alias=True, exclude_none=True)
        assert dumped == {"matched": True, "list": "L1", "name": "Jon Snow"}

    def test_truthiness(self):
        assert MatchResult(matched=True)
        assert not MatchResult(matched=False)


class TestExceptions:
    """Tests for the sanctions exception hierarchy."""

    def test_hierarchy(self):
        for exc_type in (SanctionsDocumentError, SanctionsPersistError, SanctionsFetchError):
            assert issubclass(exc_type, SanctionsError)
        assert issubclass(SanctionsError, SanctionwatchError)

    def test_document_error(self):
        error = SanctionsDocumentError(Path("/tmp/s.yml"), "bad yaml")
        assert "malformed" in str(error)
        assert error.details == {"path": "/tmp/s.yml", "reason": "bad yaml"}

    def test_persist_error(self):
        error = SanctionsPersistError(Path("/tmp/s.yml"), "denied")
        assert "Can't replace" in str(error)
        assert error.reason == "denied"

    def test_fetch_error(self):
        error = SanctionsFetchError("timeout")
        assert error.message == "Fetching sanctions lists failed: timeout"

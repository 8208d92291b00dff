"""Pytest fixtures for sanctionwatch tests."""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import structlog
import yaml

from sanctionwatch.config.settings import Settings
from sanctionwatch.sanctions import validator as validator_module

# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def reset_default_validator() -> Generator[None, None, None]:
    """Drop the process-wide validator between tests."""
    validator_module._sanction_file = None
    validator_module._validator_instance = None
    yield
    validator_module._sanction_file = None
    validator_module._validator_instance = None


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create mock settings for testing."""
    return Settings(
        sanction_file=tmp_path / "sanctions.yml",
        dob_aware_lists=["HMT-Sanctions", "L2"],
        log_level="DEBUG",
        environment="test",
    )


@pytest.fixture
def patch_settings(mock_settings: Settings) -> Generator[Settings, None, None]:
    """Patch get_settings everywhere it is imported."""
    targets = [
        "sanctionwatch.config.settings.get_settings",
        "sanctionwatch.core.logging.get_settings",
        "sanctionwatch.sanctions.store.get_settings",
        "sanctionwatch.sanctions.matcher.get_settings",
        "sanctionwatch.sanctions.validator.get_settings",
    ]
    patchers = [patch(target, return_value=mock_settings) for target in targets]
    for patcher in patchers:
        patcher.start()
    yield mock_settings
    for patcher in patchers:
        patcher.stop()


# =============================================================================
# Document Fixtures
# =============================================================================


def write_document(path: Path, content: dict[str, Any], mtime: int | None = None) -> Path:
    """Write a sanctions document and optionally pin its modification time."""
    path.write_text(yaml.safe_dump(content, sort_keys=False), encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def sample_document() -> dict[str, Any]:
    """Document with one plain list and one date-of-birth-aware list."""
    return {
        "L1": {"updated": 100, "entries": ["Jon Snow", "Daenerys Targaryen"]},
        "L2": {
            "updated": 200,
            "entries": {
                "Jane Doe": {"dob_epoch": [123456]},
                "Ramsay Bolton": {"dob_epoch": [0, 86400]},
            },
        },
    }


@pytest.fixture
def sanction_file(tmp_path: Path, sample_document: dict[str, Any]) -> Path:
    """Sample document written to a temporary file."""
    return write_document(tmp_path / "sanctions.yml", sample_document, mtime=1_700_000_000)


@pytest.fixture
def document_writer():
    """Expose write_document to tests."""
    return write_document

"""Shared test fixtures for the document number extraction test suite."""

from pathlib import Path

import pytest

# Passes the Verhoeff check (payload 23456789012, check digit 4).
VALID_NATIONAL_ID = "234567890124"
# Fails the Verhoeff check.
INVALID_NATIONAL_ID = "123456789123"


@pytest.fixture
def valid_national_id() -> str:
    """Return a 12-digit number with a correct Verhoeff check digit."""
    return VALID_NATIONAL_ID


@pytest.fixture
def invalid_national_id() -> str:
    """Return a 12-digit number whose Verhoeff check fails."""
    return INVALID_NATIONAL_ID


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"

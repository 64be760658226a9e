"""Shared test fixtures for the docaudit test suite."""

from collections.abc import Generator
from datetime import UTC, datetime

import pytest

from docaudit.stores import InMemoryDocumentStore, InMemoryIdentifierAllocator

ACTOR = "someuser"


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache and TOML source before and after each test.

    This ensures test isolation for configuration tests.
    """
    from docaudit.config import get_settings
    from docaudit.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def actor() -> str:
    """Name reported by the identity resolver."""
    return ACTOR


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 15, 10, 0, tzinfo=UTC)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create a fresh in-memory store for each test."""
    return InMemoryDocumentStore()


@pytest.fixture
def allocator() -> InMemoryIdentifierAllocator:
    return InMemoryIdentifierAllocator()

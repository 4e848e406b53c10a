"""Pytest configuration and shared fixtures for QuoteGen tests."""

import pytest

from quotegen.config.settings import Settings
from tests.fixtures.fakes import CatalogRecorder, make_catalog_client, make_settings
from tests.fixtures.mock_catalog_data import stone_catalog


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Valid settings with every optional AI call switched off."""
    return make_settings()


# ============================================================================
# Catalogue Mocks
# ============================================================================


@pytest.fixture
def stone_recorder() -> CatalogRecorder:
    """Catalogue that only knows about sandstone paving."""
    return CatalogRecorder(stone_catalog)


@pytest.fixture
def stone_catalog_client(stone_recorder):
    return make_catalog_client(stone_recorder)


@pytest.fixture
def failing_recorder() -> CatalogRecorder:
    """Catalogue answering HTTP 500 to everything."""
    return CatalogRecorder(status_code=500)

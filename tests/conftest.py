"""
Pytest configuration and shared fixtures

Common fixtures used across multiple test files are defined here.
"""
import random
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, Mock

import pytest

# Add api directory to path for imports
# Detect if running in Docker (./api:/app mount) vs host (./api exists)
api_path = Path(__file__).parent.parent / "api"
if not api_path.exists():
    # Running in Docker where api contents are at /app directly
    api_path = Path(__file__).parent.parent
sys.path.insert(0, str(api_path))


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def config():
    """Config with defaults and a small page size for pagination tests."""
    from config import Config, DataConfig
    return Config(data=DataConfig(default_page_size=10, max_page_size=100, timeout_seconds=5))


@pytest.fixture
def page_defaults():
    """Pagination policy: default 10, max 100."""
    from value_objects import PageDefaults
    return PageDefaults(default_page_size=10, max_page_size=100)


# =============================================================================
# Variant Fixtures
# =============================================================================

@pytest.fixture
def base_variant():
    from storage.variants import BASE
    return BASE


@pytest.fixture
def custom_variant():
    from storage.variants import CUSTOM
    return CUSTOM


# =============================================================================
# MongoDB Test Doubles
# =============================================================================

def make_cursor(documents):
    """Create a cursor double that iterates documents and records close()."""
    cursor = MagicMock()
    cursor.__iter__.return_value = iter(documents)
    return cursor


@pytest.fixture
def mock_collection():
    """Create a collection double with an empty result set.

    Tests replace find/count return values as needed.
    """
    collection = Mock()
    collection.find.return_value = make_cursor([])
    collection.estimated_document_count.return_value = 0
    collection.count_documents.return_value = 0
    return collection


@pytest.fixture
def mock_database():
    """Create a database double whose collections are MagicMocks."""
    database = MagicMock()
    collections = {}

    def get_collection(name):
        return collections.setdefault(name, MagicMock(name=name))

    database.__getitem__.side_effect = get_collection
    database.list_collection_names.return_value = []
    database.collections = collections
    return database


# =============================================================================
# Test Data Fixtures
# =============================================================================

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock returning a constant UTC instant."""
    return lambda: FIXED_NOW


@pytest.fixture
def seeded_generator(fixed_clock):
    """Deterministic RandomRecordGenerator."""
    from operations.rando_generator import RandomRecordGenerator
    return RandomRecordGenerator(rng=random.Random(42), clock=fixed_clock)


@pytest.fixture
def sample_base_document():
    """Stored base-variant document (identity in _id)."""
    return {
        "_id": "0f8fad5bd9cb469fa16570867728950e",
        "createdAt": datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc),
        "email": "x@test.com",
        "favoriteColor": "blue",
        "firstName": "Abcdef",
        "lastName": "Ghijkl",
        "updatedAt": datetime(2024, 2, 1, 8, 0, tzinfo=timezone.utc),
    }


@pytest.fixture
def sample_custom_document(sample_base_document):
    """Stored custom-variant document (identity in randoID, ObjectId-like _id)."""
    document = dict(sample_base_document)
    document["randoID"] = document.pop("_id")
    document["_id"] = "65a1b2c3d4e5f60718293a4b"
    return document


@pytest.fixture
def cursor_factory():
    """Factory for cursor doubles, see make_cursor()."""
    return make_cursor

"""Pytest configuration and fixtures."""

import pytest
import tempfile
from pathlib import Path

from json_mapper import ObjectMapper, FieldDescriptorCache

from sample_models import Address, Person, Priority


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def descriptor_cache():
    """A descriptor cache isolated from the process-wide one."""
    return FieldDescriptorCache()


@pytest.fixture
def mapper(descriptor_cache):
    """An object mapper with its own descriptor cache."""
    return ObjectMapper(descriptor_cache=descriptor_cache)


@pytest.fixture
def sample_person():
    """A fully populated Person."""
    return Person(
        name="Alice",
        age=30,
        height=1.68,
        active=True,
        priority=Priority.HIGH,
        nickname=None,
        address=Address(street="1 Main St", city="New York", zip_code="10001"),
        tags=["admin", "ops"],
        extra={"source": "import", "ids": [1, 2, 3]}
    )


@pytest.fixture
def sample_person_json():
    """JSON tree of sample_person, keys in declaration order."""
    return {
        "name": "Alice",
        "age": 30,
        "height": 1.68,
        "active": True,
        "priority": "high",
        "nickname": None,
        "address": {"street": "1 Main St", "city": "New York", "zipCode": "10001"},
        "tags": ["admin", "ops"],
        "extra": {"source": "import", "ids": [1, 2, 3]}
    }

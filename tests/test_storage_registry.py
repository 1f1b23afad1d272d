# tests/test_storage_registry.py
"""Tests for the storage adapter registry."""

import pytest
from unittest.mock import MagicMock

from core.interfaces import DriveType
from storage.adapters.local import LocalAdapter
from storage.adapters.s3 import S3Adapter
from storage.exceptions import UnsupportedDriveTypeError
from storage.registry import AdapterRegistry, create_registry


@pytest.fixture
def registry():
    return create_registry(MagicMock(), MagicMock(return_value=None))


def test_builtin_adapters(registry):
    """Registry maps each drive type to its adapter."""
    assert isinstance(registry.lookup(DriveType.S3), S3Adapter)
    assert isinstance(registry.lookup(DriveType.LOCAL), LocalAdapter)
    assert registry.lookup(DriveType.NETWORK) is registry.lookup(DriveType.LOCAL)
    assert set(registry.registered_types()) == {DriveType.S3, DriveType.LOCAL, DriveType.NETWORK}


def test_lookup_by_value(registry):
    assert isinstance(registry.lookup("s3"), S3Adapter)
    assert "s3" in registry


def test_unregistered_type():
    """Known drive types without an adapter are never served by a default."""
    registry = AdapterRegistry({DriveType.S3: MagicMock()})

    with pytest.raises(UnsupportedDriveTypeError, match="local"):
        registry.lookup(DriveType.LOCAL)
    assert DriveType.LOCAL not in registry


def test_unknown_type(registry):
    with pytest.raises(UnsupportedDriveTypeError, match="Unknown storage drive type"):
        registry.lookup("ftp")


def test_registry_is_read_only():
    adapters = {DriveType.S3: MagicMock()}
    registry = AdapterRegistry(adapters)
    adapters[DriveType.LOCAL] = MagicMock()

    with pytest.raises(UnsupportedDriveTypeError):
        registry.lookup(DriveType.LOCAL)
    with pytest.raises(TypeError):
        registry._adapters[DriveType.LOCAL] = MagicMock()

# tests/test_storage_local.py
"""Tests for local storage adapter."""

import pytest

from core.interfaces import DriveEntity, DriveType, FolderEntity, LocalDriveDetails, LocalFolderDetails
from storage.adapters.local import LocalAdapter
from storage.exceptions import (
    InsufficientPrivilegesError,
    StorageNotFoundError,
    StorageUnavailableError,
)


@pytest.fixture
def drive(tmp_path):
    return DriveEntity(
        id="drive-1",
        drive_type=DriveType.LOCAL,
        display_name="Lab share",
        root_path="",
        details=LocalDriveDetails(mount_path=str(tmp_path)),
    )


@pytest.fixture
def adapter(drive):
    """Create a LocalAdapter that knows the temp drive."""
    return LocalAdapter({drive.id: drive}.get)


@pytest.fixture
def folder(drive, tmp_path):
    (tmp_path / "results").mkdir()
    return FolderEntity(
        id="folder-1",
        storage_drive_id=drive.id,
        path="results/",
        name="results",
        write_enabled=True,
    )


def test_test_connection(adapter, drive):
    """Test connection should succeed for valid path."""
    assert adapter.test_connection(drive) is True


def test_test_connection_invalid_path():
    """Test connection should fail for non-existent path."""
    drive = DriveEntity(
        id="drive-2",
        drive_type=DriveType.NETWORK,
        display_name="Unmounted share",
        root_path="",
        details=LocalDriveDetails(mount_path="/nonexistent/path/12345"),
    )
    adapter = LocalAdapter({drive.id: drive}.get)
    with pytest.raises(StorageUnavailableError):
        adapter.test_connection(drive)


def test_create_folder(adapter, drive, tmp_path):
    """Create should make the directory and its parents."""
    created = adapter.create_folder(drive, "a/b", "c")

    assert created.path == "a/b/c/"
    assert created.name == "c"
    assert isinstance(created.details, LocalFolderDetails)
    assert (tmp_path / "a/b/c").is_dir()


def test_create_folder_is_idempotent(adapter, drive, tmp_path):
    adapter.create_folder(drive, "a", "b")
    (tmp_path / "a/b/keep.txt").write_text("keep")

    again = adapter.create_folder(drive, "a", "b")

    assert [f.name for f in again.files] == ["keep.txt"]


def test_create_folder_requires_write_enabled(adapter, drive, tmp_path):
    read_only = FolderEntity(id="ro", storage_drive_id=drive.id, path="", name="root")

    with pytest.raises(InsufficientPrivilegesError):
        adapter.create_folder(read_only, "", "blocked")
    assert not (tmp_path / "blocked").exists()


def test_find_folder_by_path(adapter, drive, tmp_path):
    """Listing splits sub-folders and files."""
    (tmp_path / "data/raw").mkdir(parents=True)
    (tmp_path / "data/summary.txt").write_text("ok")

    listing = adapter.find_folder_by_path(drive, "data")

    assert listing.path == "data/"
    assert [f.path for f in listing.folders] == ["data/raw/"]
    assert [f.path for f in listing.files] == ["data/summary.txt"]
    assert listing.files[0].size == 2


def test_find_folder_missing(adapter, drive):
    with pytest.raises(StorageNotFoundError):
        adapter.find_folder_by_path(drive, "missing")


def test_file_and_folder_are_distinct(adapter, drive, tmp_path):
    (tmp_path / "dir").mkdir()
    (tmp_path / "dir/file.txt").write_text("x")

    with pytest.raises(StorageNotFoundError):
        adapter.find_file_by_path(drive, "dir")
    with pytest.raises(StorageNotFoundError):
        adapter.find_file_by_path(drive, "dir/")
    with pytest.raises(StorageNotFoundError):
        adapter.find_folder_by_path(drive, "dir/file.txt")
    assert adapter.find_file_by_path(drive, "dir/file.txt").name == "file.txt"


def test_save_and_fetch_file(adapter, folder, tmp_path):
    """Save then read file."""
    source = tmp_path / "upload.tmp"
    source.write_bytes(b"hello world")

    stored = adapter.save_file(folder, "results/run1", source, "out.txt")

    assert stored.path == "results/run1/out.txt"
    assert (tmp_path / "results/run1/out.txt").read_bytes() == b"hello world"
    assert adapter.fetch_file(folder, stored.path) == b"hello world"


def test_fetch_missing_file(adapter, folder):
    with pytest.raises(StorageNotFoundError):
        adapter.fetch_file(folder, "results/nothing.txt")


def test_path_traversal_blocked(adapter, drive):
    """Paths escaping the mount path are refused."""
    with pytest.raises(InsufficientPrivilegesError):
        adapter.find_folder_by_path(drive, "../../etc")


def test_exists(adapter, drive, tmp_path):
    """Check file and directory existence."""
    (tmp_path / "subdir").mkdir()
    (tmp_path / "exists.txt").write_bytes(b"data")

    assert adapter.file_exists(drive, "exists.txt") is True
    assert adapter.file_exists(drive, "missing.txt") is False
    assert adapter.folder_exists(drive, "subdir") is True
    assert adapter.folder_exists(drive, "exists.txt") is False
    assert adapter.folder_exists(drive, "../outside") is False

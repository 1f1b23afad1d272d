"""Tests for the SQLAlchemy metadata store."""

import pytest
from sqlalchemy.exc import IntegrityError

from core.interfaces import (
    DriveEntity,
    DriveType,
    EntityFolderEntity,
    EntityKind,
    FolderEntity,
    LocalFolderDetails,
    S3BucketDetails,
    S3FolderDetails,
)
from storage.exceptions import FolderAlreadyRegisteredError


def add_folder(store, drive, path, **kwargs) -> FolderEntity:
    with store.transaction() as repos:
        return repos.folders.create(FolderEntity(
            id=None,
            storage_drive_id=drive.id,
            path=path,
            name=path.rstrip("/").rsplit("/", 1)[-1],
            **kwargs,
        ))


def test_drive_details_round_trip(store, s3_drive, integration):
    """Tagged details come back as the same variant."""
    with store.transaction() as repos:
        drive = repos.drives.get(s3_drive.id)

    assert drive.drive_type == DriveType.S3
    assert drive.details == S3BucketDetails(bucket_name="study-bucket", integration_id=integration.id)
    assert drive.created_at is not None


def test_list_drives(store, s3_drive, local_drive):
    with store.transaction() as repos:
        repos.drives.set_active(local_drive.id, False)

    with store.transaction() as repos:
        active = repos.drives.list()
        everything = repos.drives.list(active_only=False)

    assert [d.id for d in active] == [s3_drive.id]
    assert {d.id for d in everything} == {s3_drive.id, local_drive.id}


def test_folder_details_round_trip(store, s3_drive, local_drive):
    s3_folder = add_folder(store, s3_drive, "a/", details=S3FolderDetails(key="a/", etag='"abc"'))
    local_folder = add_folder(store, local_drive, "b/", details=LocalFolderDetails())
    bare = add_folder(store, s3_drive, "c/")

    with store.transaction() as repos:
        assert repos.folders.get(s3_folder.id).details == S3FolderDetails(key="a/", etag='"abc"')
        assert repos.folders.get(local_folder.id).details == LocalFolderDetails()
        assert repos.folders.get(bare.id).details is None


def test_find_by_path(store, s3_drive, local_drive):
    folder = add_folder(store, s3_drive, "programs/")

    with store.transaction() as repos:
        assert repos.folders.find_by_path(s3_drive.id, "programs/").id == folder.id
        assert repos.folders.find_by_path(local_drive.id, "programs/") is None


def test_path_unique_per_drive(store, s3_drive):
    """A second record at the same path is refused as already registered."""
    add_folder(store, s3_drive, "programs/")

    with pytest.raises(FolderAlreadyRegisteredError) as exc_info:
        add_folder(store, s3_drive, "programs/")
    assert isinstance(exc_info.value.__cause__, IntegrityError)

    with store.transaction() as repos:
        assert len(repos.folders.list_by_drive(s3_drive.id)) == 1


def test_folder_cannot_change_drive(store, s3_drive, local_drive):
    folder = add_folder(store, s3_drive, "programs/")
    folder.storage_drive_id = local_drive.id

    with pytest.raises(ValueError):
        with store.transaction() as repos:
            repos.folders.update(folder)


def test_transaction_rolls_back_on_error(store, s3_drive):
    with pytest.raises(RuntimeError):
        with store.transaction() as repos:
            repos.folders.create(FolderEntity(id=None, storage_drive_id=s3_drive.id, path="x/", name="x"))
            raise RuntimeError("boom")

    with store.transaction() as repos:
        assert repos.folders.list_by_drive(s3_drive.id) == []


def test_single_primary_per_entity(store, s3_drive):
    first = add_folder(store, s3_drive, "one/")
    second = add_folder(store, s3_drive, "two/")

    with store.transaction() as repos:
        repos.entity_folders.add(EntityFolderEntity(EntityKind.STUDY, "s1", first.id, primary=True))
        repos.entity_folders.add(EntityFolderEntity(EntityKind.STUDY, "s1", second.id, primary=True))

    with store.transaction() as repos:
        links = repos.entity_folders.list_for_entity(EntityKind.STUDY, "s1")
        primary = repos.entity_folders.find_primary(EntityKind.STUDY, "s1")

    assert primary.folder_id == second.id
    assert [link.primary for link in links] == [True, False]


def test_set_primary_unknown_association(store, s3_drive):
    folder = add_folder(store, s3_drive, "one/")

    with store.transaction() as repos:
        assert repos.entity_folders.set_primary(EntityKind.ASSAY, "a1", folder.id) is None


def test_health_check(store):
    assert store.health_check() is True

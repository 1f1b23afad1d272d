"""Tests for storage path helpers."""

import pytest

from storage.paths import base_name, folder_path, is_folder_key, join_path, normalize_folder_path, parent_path


def test_join_path_skips_empty_segments():
    assert join_path("programs/", "/prog1/", "", "study") == "programs/prog1/study"
    assert join_path("", "file.txt") == "file.txt"
    assert join_path() == ""


@pytest.mark.parametrize(
    "path, expected",
    [
        ("", ""),
        ("   ", ""),
        (None, ""),
        ("a", "a/"),
        ("a/b/", "a/b/"),
        ("a/b//", "a/b/"),
        ("/", ""),
        ("/a/b", "a/b/"),
        ("//a/", "a/"),
    ],
)
def test_normalize_folder_path(path, expected):
    assert normalize_folder_path(path) == expected


def test_folder_path():
    assert folder_path("programs/prog1/", "study-001") == "programs/prog1/study-001/"
    assert folder_path("", "programs") == "programs/"


def test_parent_path():
    assert parent_path("a/b/c/") == "a/b/"
    assert parent_path("a/b/c") == "a/b/"
    assert parent_path("a/") == ""


def test_base_name():
    assert base_name("a/b/c/") == "c"
    assert base_name("a/b/file.csv") == "file.csv"


def test_is_folder_key():
    assert is_folder_key("a/") is True
    assert is_folder_key("a/file.csv") is False

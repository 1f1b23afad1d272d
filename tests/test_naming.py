"""Tests for storage folder naming."""

from core.interfaces import EntityKind, EntityRef
from services.naming import MAX_NAME_LENGTH, default_folder_name, sanitize_name


def test_sanitize_name():
    """Unsafe characters collapse to single underscores."""
    assert sanitize_name("My Study") == "My_Study"
    assert sanitize_name("a/b\\c:d") == "a_b_c_d"
    assert sanitize_name("  spaced   out  ") == "spaced_out"
    assert sanitize_name("Plate (2)!") == "Plate_(2)!"


def test_sanitize_name_empty():
    assert sanitize_name("") == "untitled"
    assert sanitize_name("///") == "untitled"


def test_sanitize_name_truncates():
    assert len(sanitize_name("x" * 500)) == MAX_NAME_LENGTH


def test_default_folder_name():
    study = EntityRef(kind=EntityKind.STUDY, id="1", code="PPB-10001", name="My Study")
    assert default_folder_name(study) == "PPB-10001_My_Study"


def test_default_folder_name_without_code():
    program = EntityRef(kind=EntityKind.PROGRAM, id="1", code="", name="Oncology")
    assert default_folder_name(program) == "Oncology"

"""Folder naming for programs, studies and assays.

Folder names must be safe on every backend: S3 keys, Windows and POSIX
filesystems and SMB shares. Names are built only from characters all of
them accept.
"""

import re
from typing import Callable

from core.interfaces import EntityRef

FolderNamer = Callable[[EntityRef], str]

# Anything outside the S3 "safe characters" set, minus the ones Windows rejects
INVALID_CHARS_PATTERN = re.compile(r"[^A-Za-z0-9!\-_.'()]")

MAX_NAME_LENGTH = 200


def sanitize_name(name: str) -> str:
    """Sanitize a name for use as a folder name.

    Args:
        name: The raw name (e.g., study name).

    Returns:
        A name made of backend-safe characters, never empty.
    """
    if not name:
        return "untitled"

    sanitized = INVALID_CHARS_PATTERN.sub("_", name.strip())
    sanitized = re.sub(r"_+", "_", sanitized).strip("_.")

    if len(sanitized) > MAX_NAME_LENGTH:
        sanitized = sanitized[:MAX_NAME_LENGTH].rstrip("_.")

    return sanitized or "untitled"


def default_folder_name(entity: EntityRef) -> str:
    """Folder name for a program, study or assay: ``<code>_<name>``.

    A study with code "PPB-10001" named "My Study" maps to
    "PPB-10001_My_Study".
    """
    code = sanitize_name(entity.code) if entity.code else ""
    name = sanitize_name(entity.name)
    return f"{code}_{name}" if code else name

"""Path helpers shared by storage adapters.

Storage paths are drive-relative strings using ``/`` as the delimiter,
whatever the backend. Folder paths carry a trailing delimiter so that
object-storage markers and folder lookups agree on the same key.
"""

DELIMITER = "/"


def join_path(*parts: str) -> str:
    """Join path segments with a single delimiter between them.

    Empty segments are skipped and no leading or trailing delimiter is kept.
    """
    cleaned = [p.strip(DELIMITER) for p in parts if p and p.strip(DELIMITER)]
    return DELIMITER.join(cleaned)


def normalize_folder_path(path: str | None) -> str:
    """Return the canonical folder form of a path.

    Blank paths and ``/`` are the drive root and become empty. Anything else
    loses its leading delimiters and gets exactly one trailing delimiter, the
    same form ``join_path`` produces.
    """
    if path is None or not path.strip():
        return ""
    joined = join_path(path)
    return joined + DELIMITER if joined else ""


def folder_path(parent: str, name: str) -> str:
    """Canonical path of folder ``name`` under ``parent``."""
    return normalize_folder_path(join_path(parent, name))


def parent_path(path: str) -> str:
    """Return the folder path containing ``path``.

    >>> parent_path("programs/prog1/study-001/")
    'programs/prog1/'
    """
    stripped = path.rstrip(DELIMITER)
    if DELIMITER not in stripped:
        return ""
    return normalize_folder_path(stripped.rsplit(DELIMITER, 1)[0])


def base_name(path: str) -> str:
    """Return the last segment of a file or folder path."""
    return path.rstrip(DELIMITER).rsplit(DELIMITER, 1)[-1]


def is_folder_key(key: str) -> bool:
    return key.endswith(DELIMITER)

from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides existence checks, loadable-script lookups and path normalization
helpers. Acts as an abstraction over the 'os' module so that resolution
logic never deals with separators or directory listing details directly.
"""

import logging
import os
from typing import Iterable, List, Optional, Tuple

from gopack.domain.constants import INDEX_STEM, LOADABLE_EXTENSIONS

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# EXISTENCE & CLASSIFICATION API
# -----------------------------------------------------------------------------

def path_exists(path: str) -> bool:
    """Return True if a regular file is present at the path."""
    return os.path.isfile(path)


def is_loadable(file_name: str, extensions: Iterable[str] = LOADABLE_EXTENSIONS) -> bool:
    """
    Check whether a file name carries a browser-loadable module extension.

    Args:
        file_name: Base name or full path of the file.
        extensions: Allowed extensions, each with a leading dot.

    Returns:
        bool: True if the extension is in the allowed set.
    """
    _, ext = os.path.splitext(file_name)
    return ext.lower() in tuple(extensions)


def find_loadable_file(
        directory: str,
        extensions: Iterable[str] = LOADABLE_EXTENSIONS,
) -> Optional[str]:
    """
    Pick a loadable script among the direct children of a directory.

    Tie-break when several candidates exist: a file named 'index' first,
    then sorted name order; for files sharing a stem, the extension listed
    earlier in 'extensions' wins.

    Args:
        directory: Directory to inspect (not recursed).
        extensions: Allowed extensions, ordered by preference.

    Returns:
        Optional[str]: Absolute path of the chosen file, or None.
    """
    exts = tuple(extensions)
    try:
        names = os.listdir(directory)
    except OSError as e:
        logger.debug(f"Could not read files in dir '{directory}': {e}")
        return None

    candidates = [
        n for n in names
        if is_loadable(n, exts) and os.path.isfile(os.path.join(directory, n))
    ]
    if not candidates:
        return None

    candidates.sort(key=lambda n: _candidate_rank(n, exts))
    if len(candidates) > 1:
        logger.debug(f"Several loadable files in '{directory}': {candidates}. Picked '{candidates[0]}'.")

    return os.path.join(directory, candidates[0])


def list_subdirectories(directory: str) -> List[str]:
    """Return the sorted absolute paths of a directory's child directories."""
    try:
        names = sorted(os.listdir(directory))
    except OSError as e:
        logger.debug(f"Can't walk path {directory}: {e}")
        return []
    return [os.path.join(directory, n) for n in names if os.path.isdir(os.path.join(directory, n))]


# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is blank.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.normpath(os.path.abspath(p))


def to_url_path(path: str) -> str:
    """Convert native separators to the forward slashes used in specifiers."""
    return path.replace(os.sep, "/")


def is_within(path: str, root: str) -> bool:
    """Return True if 'path' is 'root' itself or lies underneath it."""
    path_abs = os.path.normpath(os.path.abspath(path))
    root_abs = os.path.normpath(os.path.abspath(root))
    return path_abs == root_abs or path_abs.startswith(root_abs + os.sep)


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _candidate_rank(name: str, extensions: Tuple[str, ...]) -> Tuple[int, str, int]:
    stem, ext = os.path.splitext(name)
    ext_rank = extensions.index(ext.lower()) if ext.lower() in extensions else len(extensions)
    return (0 if stem == INDEX_STEM else 1), stem, ext_rank

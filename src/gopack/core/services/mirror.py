from __future__ import annotations

"""
Package Mirror Service.

Copies the browser-loadable files of one dependency from the dependency
cache (node_modules) into the web modules mirror tree, preserving their
relative layout. Everything else in the package is left behind, so the
mirror is always a filtered subset of the cache.
"""

import logging
import os
import shutil
from typing import Iterable, List, Optional

from gopack.domain.constants import LOADABLE_EXTENSIONS
from gopack.domain.resolution_models import FileFailure, MaterializationResult
from gopack.infra.fs import is_loadable, is_within, safe_mkdir

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def materialize_package(
        package_name: str,
        cache_root: str,
        mirror_root: str,
        extensions: Iterable[str] = LOADABLE_EXTENSIONS,
) -> MaterializationResult:
    """
    Mirror the loadable files of a cached package into the web modules tree.

    Walks '<cache_root>/<package_name>' and copies every loadable file to
    the same relative position under 'mirror_root'. Directories are created
    as needed and existing ones are reused. A failure on one file is logged
    and recorded; the remaining files are still copied.

    Args:
        package_name: Bare package name, optionally with a subpath or scope.
        cache_root: Dependency cache directory (read only).
        mirror_root: Destination root for mirrored files.
        extensions: Extensions considered browser-loadable.

    Returns:
        MaterializationResult: Copied destination paths and per-file failures.
    """
    exts = tuple(extensions)
    package_dir = os.path.normpath(os.path.join(cache_root, package_name))
    copied: List[str] = []
    failures: List[FileFailure] = []

    if not is_within(package_dir, cache_root):
        msg = f"Package name '{package_name}' escapes the dependency cache."
        logger.warning(msg)
        return MaterializationResult(package_name, copied, [FileFailure(package_dir, "walk", msg)])

    def _on_walk_error(err: OSError) -> None:
        path = err.filename or package_dir
        logger.warning(f"Could not get node module: can't stat {path}: {err}")
        failures.append(FileFailure(str(path), "walk", str(err)))

    for root, dirs, files in os.walk(package_dir, onerror=_on_walk_error):
        dirs.sort()
        files.sort()

        for file_name in files:
            if not is_loadable(file_name, exts):
                continue

            src = os.path.join(root, file_name)
            dst = os.path.join(mirror_root, os.path.relpath(src, cache_root))

            failure = copy_module_file(src, dst)
            if failure:
                failures.append(failure)
            else:
                copied.append(dst)

    logger.debug(f"Mirrored {len(copied)} file(s) of '{package_name}' into '{mirror_root}'.")
    return MaterializationResult(package_name, copied, failures)


def copy_module_file(src: str, dst: str) -> Optional[FileFailure]:
    """
    Copy one file byte-for-byte, creating the destination directories.

    Both file handles are closed before returning, on success and on error.

    Args:
        src: Source file in the dependency cache.
        dst: Destination file in the mirror tree.

    Returns:
        Optional[FileFailure]: None on success, otherwise the recorded failure.
    """
    ok, err = safe_mkdir(os.path.dirname(dst))
    if not ok:
        logger.error(f"Could not create subdirectories {os.path.dirname(dst)}: {err}")
        return FileFailure(dst, "copy", str(err))

    try:
        with open(src, "rb") as from_f, open(dst, "wb") as to_f:
            shutil.copyfileobj(from_f, to_f)
    except OSError as e:
        logger.error(f"Could not copy '{src}' to '{dst}': {e}")
        return FileFailure(src, "copy", str(e))

    return None

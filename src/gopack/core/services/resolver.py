from __future__ import annotations

"""
Bare Reference Resolution Service.

Maps a bare package specifier ('left-pad', 'svelte/internal',
'@scope/pkg') to a concrete loadable file inside the web modules mirror.
The package manifest's ES module entry is honoured when it was mirrored;
otherwise the package directory is searched level by level.
"""

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Tuple

from gopack.domain.constants import (
    LOADABLE_EXTENSIONS,
    PACKAGE_ENTRY_FIELDS,
    PACKAGE_MANIFEST,
)
from gopack.infra.fs import find_loadable_file, is_loadable, is_within, list_subdirectories

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve_bare(
        package_name: str,
        mirror_root: str,
        cache_root: Optional[str] = None,
        extensions: Iterable[str] = LOADABLE_EXTENSIONS,
) -> Optional[str]:
    """
    Find the loadable file a bare specifier should point at.

    Resolution order:
    1. The manifest's ES module entry, when it exists in the mirror.
    2. A loadable file directly inside the mirrored package directory.
    3. The first subdirectory, depth-first and pre-order in sorted name
       order, that directly contains a loadable file.

    Args:
        package_name: Bare specifier, optionally with a subpath.
        mirror_root: Root of the web modules mirror tree.
        cache_root: Dependency cache holding the package manifest, if any.
        extensions: Extensions considered browser-loadable.

    Returns:
        Optional[str]: Absolute path of the mirrored file, or None.
    """
    exts = tuple(extensions)
    named_path = os.path.normpath(os.path.join(mirror_root, package_name))

    if not is_within(named_path, mirror_root):
        logger.warning(f"Refusing to resolve '{package_name}' outside of '{mirror_root}'.")
        return None

    if cache_root:
        entry = _manifest_entry(package_name, cache_root, named_path, exts)
        if entry:
            return entry

    # Check all files in the package directory first.
    found = find_loadable_file(named_path, exts)
    if found:
        return found

    # Then check nested directories.
    return _search_nested(named_path, exts)


def read_manifest(package_dir: str) -> Dict[str, Any]:
    """
    Load a package manifest, returning an empty dict when absent or invalid.

    Args:
        package_dir: Directory expected to contain 'package.json'.

    Returns:
        Dict[str, Any]: Parsed manifest fields.
    """
    manifest_path = os.path.join(package_dir, PACKAGE_MANIFEST)
    if not os.path.isfile(manifest_path):
        return {}

    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.debug(f"Ignoring unreadable manifest '{manifest_path}': {e}")
        return {}

    return data if isinstance(data, dict) else {}


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _manifest_entry(
        package_name: str,
        cache_root: str,
        named_path: str,
        exts: Tuple[str, ...],
) -> Optional[str]:
    manifest = read_manifest(os.path.join(cache_root, package_name))
    for field in PACKAGE_ENTRY_FIELDS:
        value = manifest.get(field)
        if not isinstance(value, str) or not value.strip():
            continue

        candidate = os.path.normpath(os.path.join(named_path, value.strip()))
        if not is_within(candidate, named_path):
            continue
        if is_loadable(candidate, exts) and os.path.isfile(candidate):
            logger.debug(f"Resolved '{package_name}' through manifest field '{field}'.")
            return candidate
    return None


def _search_nested(named_path: str, exts: Tuple[str, ...]) -> Optional[str]:
    """Depth-first, pre-order walk stopping at the first level with a hit."""
    stack: List[str] = list(reversed(list_subdirectories(named_path)))
    while stack:
        sub_path = stack.pop()
        found = find_loadable_file(sub_path, exts)
        if found:
            return found
        stack.extend(reversed(list_subdirectories(sub_path)))
    return None

from __future__ import annotations

"""
Domain Constants and Build Layout Defaults.

Centralizes the filesystem layout contract of the build output (entry file,
mirror root, dependency cache) and the extension rules that decide which
files a browser can load as ES modules.
"""

from typing import Final, Tuple

# -----------------------------------------------------------------------------
# EXTENSION RULES
# -----------------------------------------------------------------------------

# Order matters: earlier entries win tie-breaks between files sharing a stem.
LOADABLE_EXTENSIONS: Final[Tuple[str, ...]] = (".mjs", ".js")

COMPONENT_EXTENSION: Final[str] = ".svelte"
SCRIPT_EXTENSION: Final[str] = ".js"

# -----------------------------------------------------------------------------
# BUILD LAYOUT
# -----------------------------------------------------------------------------

DEFAULT_BUILD_DIR: Final[str] = "public"
DEPENDENCY_CACHE_DIR: Final[str] = "node_modules"
MIRROR_SUBDIR: Final[str] = "spa/web_modules"
EJECTED_SUBDIR: Final[str] = "spa/ejected"
ENTRY_FILE: Final[str] = "main.js"

# Preferred file stem when several loadable files share a directory level.
INDEX_STEM: Final[str] = "index"

# package.json fields naming an ES module entry point, by priority.
PACKAGE_ENTRY_FIELDS: Final[Tuple[str, ...]] = ("module",)
PACKAGE_MANIFEST: Final[str] = "package.json"

from __future__ import annotations

"""
Configuration Domain Management.

Provides the default run configuration, optional JSON overrides from disk,
and the translation of a validated configuration into the absolute
directory layout consumed by the resolution pipeline.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from gopack.domain.constants import (
    COMPONENT_EXTENSION,
    DEFAULT_BUILD_DIR,
    DEPENDENCY_CACHE_DIR,
    EJECTED_SUBDIR,
    ENTRY_FILE,
    LOADABLE_EXTENSIONS,
    MIRROR_SUBDIR,
    SCRIPT_EXTENSION,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "gopack.json"


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Paths are relative to the current working directory, which is where
    the site build runs and where the dependency cache lives.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    base = os.getcwd()
    return {
        # IO Paths
        "build_path": os.path.join(base, DEFAULT_BUILD_DIR),
        "project_root": base,

        # Layout
        "entry_file": ENTRY_FILE,
        "ejected_subdir": EJECTED_SUBDIR,
        "mirror_subdir": MIRROR_SUBDIR,
        "dependency_cache_dir": DEPENDENCY_CACHE_DIR,

        # Extension Rules
        "loadable_extensions": list(LOADABLE_EXTENSIONS),
        "component_extension": COMPONENT_EXTENSION,
        "script_extension": SCRIPT_EXTENSION,

        # Behaviour
        "rewrite_dynamic_imports": True,
        "walk_dynamic_imports": False,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a JSON configuration file and merge it over the defaults.

    When no path is given, 'gopack.json' in the working directory is used
    if present. Missing or corrupted files fall back to defaults.

    Args:
        path: Optional explicit configuration file.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    target = path or os.path.join(os.getcwd(), CONFIG_FILE_NAME)

    if not os.path.exists(target):
        if path:
            logger.warning(f"Config file '{target}' not found. Using defaults.")
        else:
            logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{target}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Corrupted config file '{target}'. Using defaults.")
        return config

    config.update(data)
    return config


# -----------------------------------------------------------------------------
# Layout Model
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class BuildLayout:
    """
    Absolute directory layout for one resolution run.

    Attributes:
        build_path: Build output root; stripped from rewritten paths.
        entry_path: First module processed.
        cache_root: Read-only dependency cache (node_modules).
        mirror_root: Write target for browser-loadable package files.
        loadable_extensions: Extensions a browser may load as modules.
        component_extension: Foreign source extension to rewrite.
        script_extension: Replacement for the component extension.
        rewrite_dynamic_imports: Whether import() calls are rewritten.
        walk_dynamic_imports: Whether local import() targets are traversed.
    """
    build_path: str
    entry_path: str
    cache_root: str
    mirror_root: str
    loadable_extensions: Tuple[str, ...] = LOADABLE_EXTENSIONS
    component_extension: str = COMPONENT_EXTENSION
    script_extension: str = SCRIPT_EXTENSION
    rewrite_dynamic_imports: bool = True
    walk_dynamic_imports: bool = False

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "BuildLayout":
        """Build the layout from a validated configuration dictionary."""
        build_path = os.path.normpath(os.path.abspath(config["build_path"]))
        project_root = os.path.normpath(os.path.abspath(config["project_root"]))
        return cls(
            build_path=build_path,
            entry_path=os.path.normpath(
                os.path.join(build_path, config["ejected_subdir"], config["entry_file"])
            ),
            cache_root=os.path.normpath(os.path.join(project_root, config["dependency_cache_dir"])),
            mirror_root=os.path.normpath(os.path.join(build_path, config["mirror_subdir"])),
            loadable_extensions=tuple(config["loadable_extensions"]),
            component_extension=config["component_extension"],
            script_extension=config["script_extension"],
            rewrite_dynamic_imports=bool(config["rewrite_dynamic_imports"]),
            walk_dynamic_imports=bool(config.get("walk_dynamic_imports", False)),
        )

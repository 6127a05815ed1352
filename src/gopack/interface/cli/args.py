from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed argparse
namespace into configuration overrides understood by the domain layer.
"""

import argparse
from typing import Any, Dict, List, Optional

from gopack import __version__

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the gopack CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="gopack",
        description=(
            "Rewrite import/export paths of a compiled site into browser-loadable "
            "ES module paths and mirror npm dependencies into spa/web_modules."
        ),
    )

    # --- Path Management ---
    p.add_argument(
        "-b", "--build",
        dest="build_path",
        default=None,
        help="Build output directory (default: ./public).",
    )
    p.add_argument(
        "-p", "--project-root",
        dest="project_root",
        default=None,
        help="Directory containing node_modules (default: current directory).",
    )
    p.add_argument(
        "--entry",
        dest="entry_file",
        default=None,
        help="Entry file name inside spa/ejected (default: main.js).",
    )
    p.add_argument(
        "--ext",
        dest="loadable_extensions",
        default=None,
        help="Comma-separated loadable extensions, by preference (default: .mjs,.js).",
    )

    # --- Traversal Behaviour ---
    p.add_argument(
        "--no-dynamic-rewrite",
        action="store_true",
        help="Leave import() calls untouched.",
    )
    p.add_argument(
        "--walk-dynamic",
        action="store_true",
        help="Also traverse local modules loaded through import().",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="JSON configuration file (default: ./gopack.json when present).",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore configuration files and start from built-in defaults.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--fail-on-unresolved",
        action="store_true",
        help="Exit with status 1 when any import path could not be resolved.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write a rotating log to this file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the resolution report as JSON.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration overrides dict.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["build_path"] = args.build_path
    overrides["project_root"] = args.project_root
    overrides["entry_file"] = args.entry_file

    if args.loadable_extensions:
        overrides["loadable_extensions"] = _split_csv(args.loadable_extensions)
    if args.no_dynamic_rewrite:
        overrides["rewrite_dynamic_imports"] = False
    if args.walk_dynamic:
        overrides["walk_dynamic_imports"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]

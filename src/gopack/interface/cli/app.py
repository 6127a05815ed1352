from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merging
(defaults, JSON file, flag overrides), validation, the resolution run and
report rendering. Exit codes follow the best-effort contract of the build
stage: unresolved imports do not fail the run unless explicitly requested.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from gopack.core.pipeline.engine import run_layout
from gopack.core.pipeline.validator import validate_config
from gopack.domain.config import BuildLayout, get_default_config, load_config
from gopack.domain.resolution_models import ResolutionReport
from gopack.infra.logging import LoggingConfig, configure_logging, get_logger
from gopack.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad input, 130 interrupt).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    # 3. Resolve base configuration
    if args.use_defaults:
        base_conf = get_default_config()
    else:
        base_conf = load_config(args.config_file)

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 6. Pre-flight input verification
    build_path = clean_conf["build_path"]
    if not os.path.isdir(build_path):
        msg = f"Build directory does not exist: {build_path}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    # 7. Resolution phase
    try:
        report = run_layout(BuildLayout.from_config(clean_conf))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        return 130
    except Exception as e:
        logger.critical(f"gopack failed: {e}", exc_info=True)
        print(f"ERROR: gopack failed: {e}", file=sys.stderr)
        return 1

    # 8. Output rendering phase
    if args.json_output:
        print(json.dumps(_report_payload(report), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(report)

    if args.fail_on_unresolved and report.unresolved:
        return 1
    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys with a value are merged.
    """
    out = dict(base)
    keys_to_merge = [
        "build_path", "project_root", "entry_file", "loadable_extensions",
        "rewrite_dynamic_imports", "walk_dynamic_imports",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _report_payload(report: ResolutionReport) -> Dict[str, Any]:
    payload = asdict(report)
    payload["ok"] = report.ok
    return payload


def _print_human_summary(report: ResolutionReport) -> None:
    """Print the resolution report as a short terminal summary."""
    status = "OK" if report.ok else "COMPLETED WITH WARNINGS"
    print(f"gopack: {status}")
    print(f"Modules processed: {len(report.visited_modules)}")
    print(f"Paths rewritten: {report.rewritten_references}")
    print(f"Files mirrored: {len(report.materialized_files)}")

    if report.unresolved:
        print("\nUnresolved imports:")
        for item in report.unresolved:
            print(f"  - '{item.path}' in {item.module} ({item.reason})")

    if report.failures:
        print("\nFailed file operations:")
        for failure in report.failures:
            print(f"  - {failure.operation}: {failure.path}: {failure.error}")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

"""
Resolution Pipeline Engine.

Single entry point of the build stage: validates the configuration, fixes
the build layout, walks the module graph from the ejected entry file and
returns a structured report. Per-file problems never abort the run.
"""

import logging
import time
from typing import Any, Dict, Optional

from gopack.core.pipeline.validator import validate_config
from gopack.core.pipeline.walker import TraversalContext, walk_modules
from gopack.domain.config import BuildLayout, get_default_config
from gopack.domain.resolution_models import ResolutionReport

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_gopack(build_path: str, config: Optional[Dict[str, Any]] = None) -> ResolutionReport:
    """
    Run ESM link resolution over a build output directory.

    Starts at '<build>/spa/ejected/main.js', mirrors npm dependencies from
    '<project>/node_modules' into '<build>/spa/web_modules' and rewrites
    every reachable module in place.

    Args:
        build_path: Build output root.
        config: Optional configuration overrides; 'build_path' is replaced
                by the argument.

    Returns:
        ResolutionReport: Visited modules, rewrites and non-fatal problems.
    """
    raw_conf: Dict[str, Any] = dict(config) if config else get_default_config()
    raw_conf["build_path"] = build_path

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    layout = BuildLayout.from_config(clean_conf)
    return run_layout(layout)


def run_layout(layout: BuildLayout) -> ResolutionReport:
    """
    Walk the module graph described by an already-resolved layout.

    Args:
        layout: Absolute build layout and extension rules.

    Returns:
        ResolutionReport: Outcome of the run.
    """
    logger.info("Running gopack to build esm support for npm dependencies")
    logger.debug(f"Entry: {layout.entry_path} | cache: {layout.cache_root} | mirror: {layout.mirror_root}")

    start = time.perf_counter()
    context = walk_modules(layout.entry_path, layout, TraversalContext())
    elapsed = time.perf_counter() - start

    report = context.to_report(layout.entry_path, layout.build_path, elapsed)
    _log_summary(report)
    return report


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _log_summary(report: ResolutionReport) -> None:
    logger.info(
        f"Running gopack took {report.elapsed_seconds:.3f}s: "
        f"{len(report.visited_modules)} module(s), "
        f"{report.rewritten_references} rewrite(s), "
        f"{len(report.materialized_files)} mirrored file(s)"
    )
    if report.unresolved:
        logger.warning(f"{len(report.unresolved)} import path(s) left unresolved.")
    if report.failures:
        logger.warning(f"{len(report.failures)} file operation(s) failed.")

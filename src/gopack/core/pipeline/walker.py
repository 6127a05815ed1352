from __future__ import annotations

"""
Module Graph Walker.

Visits every module reachable from an entry file exactly once, rewrites
component extensions and import/export paths into browser-loadable
specifiers, mirrors the third-party packages it meets, and writes each
module back in place. Traversal uses an explicit work-list so long import
chains never grow the interpreter stack.
"""

import logging
import os
from typing import List, NamedTuple, Optional, Set, Tuple

from gopack.core.processing.statements import classify_path, extract_references
from gopack.core.services.mirror import materialize_package
from gopack.core.services.resolver import resolve_bare
from gopack.domain.config import BuildLayout
from gopack.domain.resolution_models import (
    FileFailure,
    MaterializationResult,
    PathKind,
    Reference,
    ResolutionReport,
    UnresolvedReference,
)
from gopack.infra.fs import path_exists, to_url_path

logger = logging.getLogger(__name__)

# Text edit: (start offset, end offset, replacement).
Edit = Tuple[int, int, str]


class _Resolution(NamedTuple):
    specifier: Optional[str]
    local_module: Optional[str] = None
    reason: str = ""


# -----------------------------------------------------------------------------
# TRAVERSAL CONTEXT
# -----------------------------------------------------------------------------

class TraversalContext:
    """
    Shared state of one resolution run.

    Holds the ordered set of visited modules and every diagnostic collected
    along the way. One instance is shared by reference across the whole
    traversal.
    """

    def __init__(self) -> None:
        self.visited: List[str] = []
        self._visited_set: Set[str] = set()
        self.rewritten_references = 0
        self.unresolved: List[UnresolvedReference] = []
        self.failures: List[FileFailure] = []
        self.materialized_files: List[str] = []
        self._materialized_packages: Set[str] = set()

    def is_visited(self, module_path: str) -> bool:
        return _key(module_path) in self._visited_set

    def mark_visited(self, module_path: str) -> bool:
        """Record a module as visited. Returns False if it already was."""
        key = _key(module_path)
        if key in self._visited_set:
            return False
        self._visited_set.add(key)
        self.visited.append(key)
        return True

    def needs_materialization(self, package_name: str) -> bool:
        return package_name not in self._materialized_packages

    def record_materialization(self, result: MaterializationResult) -> None:
        self._materialized_packages.add(result.package)
        self.materialized_files.extend(result.copied)
        self.failures.extend(result.failures)

    def record_failure(self, path: str, operation: str, error: str) -> None:
        self.failures.append(FileFailure(path, operation, error))

    def to_report(self, entry_path: str, build_path: str, elapsed_seconds: float) -> ResolutionReport:
        return ResolutionReport(
            entry_path=entry_path,
            build_path=build_path,
            visited_modules=list(self.visited),
            rewritten_references=self.rewritten_references,
            unresolved=list(self.unresolved),
            failures=list(self.failures),
            materialized_files=list(self.materialized_files),
            elapsed_seconds=elapsed_seconds,
        )


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def walk_modules(
        entry_path: str,
        layout: BuildLayout,
        context: Optional[TraversalContext] = None,
) -> TraversalContext:
    """
    Process the entry module and every local module it reaches.

    Modules are taken from a depth-first work-list in discovery order.
    A module already present in the context is skipped, which makes
    cyclic and diamond-shaped graphs safe.

    Args:
        entry_path: First module to process.
        layout: Absolute build layout and extension rules.
        context: Shared traversal state; a fresh one is created if omitted.

    Returns:
        TraversalContext: The context, updated with this traversal.
    """
    ctx = context if context is not None else TraversalContext()
    stack: List[str] = [_key(entry_path)]

    while stack:
        module_path = stack.pop()
        if not ctx.mark_visited(module_path):
            continue

        discovered = process_module(module_path, layout, ctx)
        stack.extend(reversed([m for m in discovered if not ctx.is_visited(m)]))

    return ctx


def process_module(module_path: str, layout: BuildLayout, ctx: TraversalContext) -> List[str]:
    """
    Rewrite the references of a single module and write it back.

    Read and write failures are logged and recorded in the context; they
    only affect this module.

    Args:
        module_path: Absolute path of the module.
        layout: Absolute build layout and extension rules.
        ctx: Shared traversal state.

    Returns:
        List[str]: Local modules discovered through static references, in
                   textual order, to be processed next.
    """
    try:
        text = _read_module(module_path)
    except OSError as e:
        logger.error(f"Could not read file {module_path} to convert to esm: {e}")
        ctx.record_failure(module_path, "read", str(e))
        return []

    refs = extract_references(text)
    edits: List[Edit] = []
    discovered: List[str] = []

    # 1. Dynamic imports: component extension -> script extension.
    for ref in refs.dynamic:
        fixed = _swap_component_extension(ref.path, layout)
        if layout.rewrite_dynamic_imports and fixed != ref.path:
            edits.append((ref.path_start, ref.path_end, _quote(fixed, ref.quote)))
        if layout.walk_dynamic_imports:
            target = os.path.normpath(os.path.join(os.path.dirname(module_path), fixed))
            if path_exists(target):
                discovered.append(target)

    # 2. Static imports and re-exports.
    for ref in refs.static:
        resolution = resolve_reference(ref, module_path, layout, ctx)

        if resolution.local_module:
            discovered.append(resolution.local_module)

        if resolution.specifier is None:
            logger.warning(f"Import path '{ref.path}' not resolvable from file '{module_path}'")
            ctx.unresolved.append(UnresolvedReference(module_path, ref.path, resolution.reason))
            continue

        replacement = _quote(_strip_build_root(resolution.specifier, layout.build_path), ref.quote)
        if replacement != text[ref.path_start:ref.path_end]:
            edits.append((ref.path_start, ref.path_end, replacement))

    if not edits:
        return discovered

    new_text = apply_edits(text, edits)
    try:
        _write_module(module_path, new_text)
    except OSError as e:
        logger.error(f"Could not overwrite {module_path} with new import: {e}")
        ctx.record_failure(module_path, "write", str(e))
        return discovered

    ctx.rewritten_references += len(edits)
    return discovered


def resolve_reference(
        ref: Reference,
        module_path: str,
        layout: BuildLayout,
        ctx: TraversalContext,
) -> _Resolution:
    """
    Decide what a static reference's path should become.

    Local paths that exist on disk (after swapping the component extension)
    resolve to themselves and are handed back for traversal. Bare package
    names are mirrored and resolved to a path relative to the module.

    Args:
        ref: Static reference to resolve.
        module_path: Module containing the reference.
        layout: Absolute build layout and extension rules.
        ctx: Shared traversal state.

    Returns:
        _Resolution: New specifier (None when unresolved), local module to
                     visit, and the reason for a failed resolution.
    """
    path_str = _swap_component_extension(ref.path, layout)
    if not path_str:
        return _Resolution(None, reason="empty path")

    module_dir = os.path.dirname(module_path)
    full_path = os.path.normpath(os.path.join(module_dir, path_str))

    if path_exists(full_path):
        logger.debug(f"Found local module '{full_path}' imported from '{module_path}'")
        return _Resolution(path_str, local_module=full_path)

    if classify_path(path_str) is not PathKind.BARE_PACKAGE:
        return _Resolution(None, reason="local file not found")

    if ctx.needs_materialization(path_str):
        result = materialize_package(
            path_str, layout.cache_root, layout.mirror_root, layout.loadable_extensions
        )
        ctx.record_materialization(result)
        if result.copied:
            logger.info(f"Mirrored {len(result.copied)} file(s) for npm dependency '{path_str}'")

    found = resolve_bare(
        path_str, layout.mirror_root, layout.cache_root, layout.loadable_extensions
    )
    if not found:
        return _Resolution(None, reason="no loadable file for package")

    try:
        rel = os.path.relpath(found, module_dir)
    except ValueError as e:
        logger.error(f"Could not make path to NPM dependency relative: {e}")
        ctx.record_failure(found, "relpath", str(e))
        return _Resolution(None, reason="relative path not computable")

    rel = to_url_path(rel)
    if not rel.startswith("."):
        rel = "./" + rel
    return _Resolution(rel)


def apply_edits(text: str, edits: List[Edit]) -> str:
    """
    Apply non-overlapping span replacements to a text.

    Edits are applied from the end of the text backwards so earlier offsets
    stay valid. Duplicate spans keep only their first replacement.

    Args:
        text: Original text the offsets refer to.
        edits: (start, end, replacement) triples.

    Returns:
        str: The edited text.
    """
    seen: Set[Tuple[int, int]] = set()
    unique: List[Edit] = []
    for start, end, replacement in edits:
        if (start, end) in seen:
            continue
        seen.add((start, end))
        unique.append((start, end, replacement))

    out = text
    for start, end, replacement in sorted(unique, key=lambda e: e[0], reverse=True):
        out = out[:start] + replacement + out[end:]
    return out


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _key(path: str) -> str:
    return os.path.normpath(os.path.abspath(path))


def _swap_component_extension(path: str, layout: BuildLayout) -> str:
    root, ext = os.path.splitext(path)
    if ext == layout.component_extension:
        return root + layout.script_extension
    return path


def _strip_build_root(specifier: str, build_path: str) -> str:
    """Remove the build output root from an absolute specifier."""
    root = to_url_path(build_path)
    if specifier.startswith(root):
        return specifier[len(root):]
    return specifier


def _quote(path: str, quote: str) -> str:
    return f"{quote}{path}{quote}"


def _read_module(path: str) -> str:
    # surrogateescape keeps non UTF-8 bytes intact through the round trip.
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        return f.read()


def _write_module(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(text)

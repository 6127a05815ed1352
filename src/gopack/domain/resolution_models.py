from __future__ import annotations

"""
Resolution Domain Data Models.

Defines the Data Transfer Objects exchanged between the statement extractor,
the graph walker and the interface layers: import/export references, path
classification, per-file failures and the final resolution report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

# -----------------------------------------------------------------------------
# CLASSIFICATION ENUMS
# -----------------------------------------------------------------------------

class ReferenceKind(str, Enum):
    """Syntactic form of an import/export occurrence."""
    DYNAMIC_CALL = "dynamic-call"
    STATIC_DECLARATION = "static-declaration"


class PathKind(str, Enum):
    """Resolution strategy derived from the referenced path string."""
    RELATIVE_LOCAL = "relative-local"
    BARE_PACKAGE = "bare-package"


# -----------------------------------------------------------------------------
# REFERENCE MODEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Reference:
    """
    A single import/export occurrence inside a module's text.

    Offsets are character indices into the text that was scanned, so a
    caller can substitute the path literal without searching for it again.

    Attributes:
        statement: Raw matched span, including surrounding syntax.
        kind: Dynamic call or static declaration.
        path: Path string with the quotes removed.
        quote: Quote character that delimited the path literal.
        start: Offset of the first character of the statement.
        end: Offset one past the last character of the statement.
        path_start: Offset of the opening quote of the path literal.
        path_end: Offset one past the closing quote of the path literal.
    """
    statement: str
    kind: ReferenceKind
    path: str
    quote: str
    start: int
    end: int
    path_start: int
    path_end: int

    @property
    def path_span(self) -> Tuple[int, int]:
        return self.path_start, self.path_end


@dataclass(frozen=True)
class ExtractedReferences:
    """Ordered dynamic and static references found in one module."""
    dynamic: List[Reference] = field(default_factory=list)
    static: List[Reference] = field(default_factory=list)


# -----------------------------------------------------------------------------
# ERROR TRACKING MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileFailure:
    """
    Encapsulates a filesystem failure that was logged and skipped.

    Attributes:
        path: File or directory the operation targeted.
        operation: One of 'read', 'write', 'walk', 'copy', 'relpath'.
        error: Descriptive exception message.
    """
    path: str
    operation: str
    error: str


@dataclass(frozen=True)
class UnresolvedReference:
    """An import path left untouched because nothing could be resolved."""
    module: str
    path: str
    reason: str = "not resolvable"


@dataclass(frozen=True)
class MaterializationResult:
    """Outcome of mirroring one package into the web modules tree."""
    package: str
    copied: List[str] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)


# -----------------------------------------------------------------------------
# RUN REPORT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolutionReport:
    """
    Structured result of one resolution run.

    Every per-file problem is recorded here instead of aborting the run, so
    callers can assert on outcomes without scraping log output.

    Attributes:
        entry_path: Absolute path of the entry module.
        build_path: Absolute build output root.
        visited_modules: Modules processed, in processing order.
        rewritten_references: Number of path literals substituted.
        unresolved: References left as they were.
        failures: Read, write, walk, copy and relative-path failures.
        materialized_files: Files copied into the mirror tree.
        elapsed_seconds: Wall-clock duration of the run.
    """
    entry_path: str
    build_path: str
    visited_modules: List[str] = field(default_factory=list)
    rewritten_references: int = 0
    unresolved: List[UnresolvedReference] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)
    materialized_files: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failures and not self.unresolved

    def failed_paths(self, operation: Optional[str] = None) -> List[str]:
        """Return the paths of recorded failures, optionally for one operation."""
        return [f.path for f in self.failures if operation is None or f.operation == operation]

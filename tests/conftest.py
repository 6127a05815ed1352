from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A throwaway project layout (node_modules + build output) per test.
"""

import os
import sys
from pathlib import Path
from typing import Callable

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from gopack.domain.config import BuildLayout  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create an empty project with a dependency cache and a build output.

    Structure:
    /project
      /node_modules
      /public/spa/ejected
      /public/spa/web_modules
    """
    root = tmp_path / "project"
    (root / "node_modules").mkdir(parents=True)
    (root / "public" / "spa" / "ejected").mkdir(parents=True)
    (root / "public" / "spa" / "web_modules").mkdir(parents=True)
    return root


@pytest.fixture
def layout(project: Path) -> BuildLayout:
    """Absolute layout matching the 'project' fixture."""
    build = project / "public"
    return BuildLayout(
        build_path=str(build),
        entry_path=str(build / "spa" / "ejected" / "main.js"),
        cache_root=str(project / "node_modules"),
        mirror_root=str(build / "spa" / "web_modules"),
    )


@pytest.fixture
def ejected(project: Path) -> Path:
    """Directory holding the compiled components and the entry file."""
    return project / "public" / "spa" / "ejected"


@pytest.fixture
def node_modules(project: Path) -> Path:
    return project / "node_modules"


@pytest.fixture
def web_modules(project: Path) -> Path:
    return project / "public" / "spa" / "web_modules"


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    """Return a helper writing a UTF-8 file and creating parent directories."""

    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write

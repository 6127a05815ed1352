from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Invokes 'python -m gopack' in a subprocess from inside a throwaway site,
validating exit codes, stream output and the rewritten build tree.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"


def run_cli(args: List[str], cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """
    Execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH so the package resolves
    without being installed.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")

    cmd = [sys.executable, "-m", "gopack"] + args

    return subprocess.run(
        cmd,
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
    )


@pytest.fixture
def sample_site(project: Path, write_file) -> Path:
    write_file(project / "node_modules" / "left-pad" / "index.mjs", "export default 1;\n")
    write_file(
        project / "public" / "spa" / "ejected" / "main.js",
        "import App from './App.svelte';\nimport pad from 'left-pad';\n",
    )
    write_file(project / "public" / "spa" / "ejected" / "App.js", "export default 2;\n")
    return project


def test_cli_happy_path_execution(sample_site: Path) -> None:
    """Default layout relative to the working directory (exit code 0)."""
    result = run_cli(["-b", "public"], cwd=sample_site)

    assert result.returncode == 0, f"CLI failed with stderr: {result.stderr}"
    assert "gopack: OK" in result.stdout

    main_js = sample_site / "public" / "spa" / "ejected" / "main.js"
    assert main_js.read_text(encoding="utf-8") == (
        "import App from './App.js';\n"
        "import pad from '../web_modules/left-pad/index.mjs';\n"
    )
    assert (sample_site / "public" / "spa" / "web_modules" / "left-pad" / "index.mjs").is_file()


def test_cli_handles_missing_build_directory(tmp_path: Path) -> None:
    result = run_cli(["-b", str(tmp_path / "nope")], cwd=tmp_path)

    assert result.returncode == 2
    assert "does not exist" in result.stderr


def test_cli_json_output_structure(sample_site: Path) -> None:
    result = run_cli(["--json"], cwd=sample_site)
    assert result.returncode == 0

    data = json.loads(result.stdout)
    for key in ["ok", "entry_path", "visited_modules", "rewritten_references",
                "unresolved", "failures", "materialized_files"]:
        assert key in data, f"JSON output missing key: {key}"
    assert data["ok"] is True
    assert data["rewritten_references"] == 2


def test_cli_fail_on_unresolved(project: Path, write_file) -> None:
    write_file(project / "public" / "spa" / "ejected" / "main.js", "import x from 'ghost';\n")

    result = run_cli(["--fail-on-unresolved"], cwd=project)

    assert result.returncode == 1
    assert "'ghost' not resolvable" in result.stderr


def test_cli_help_message() -> None:
    result = run_cli(["--help"])

    assert result.returncode == 0
    assert "usage: gopack" in result.stdout
    assert "--build" in result.stdout

from __future__ import annotations

"""
Unit tests for the Package Mirror Service.

Verifies that only loadable files are copied, byte-for-byte and at the same
relative position, and that per-file failures never abort the package.
"""

import os
from pathlib import Path
from unittest.mock import patch

from gopack.core.services.mirror import copy_module_file, materialize_package


def _make_package(node_modules: Path) -> Path:
    pkg = node_modules / "left-pad"
    (pkg / "dist").mkdir(parents=True)
    (pkg / "index.mjs").write_bytes(b"export default 1;\n\xff\xfe")
    (pkg / "dist" / "bundle.js").write_bytes(b"export const b = 2;\n")
    (pkg / "package.json").write_text("{}", encoding="utf-8")
    (pkg / "README.md").write_text("# left-pad", encoding="utf-8")
    return pkg


def test_copies_only_loadable_files(node_modules: Path, web_modules: Path) -> None:
    _make_package(node_modules)

    result = materialize_package("left-pad", str(node_modules), str(web_modules))

    assert result.failures == []
    assert sorted(result.copied) == sorted([
        str(web_modules / "left-pad" / "dist" / "bundle.js"),
        str(web_modules / "left-pad" / "index.mjs"),
    ])
    assert (web_modules / "left-pad" / "index.mjs").read_bytes() == b"export default 1;\n\xff\xfe"
    assert not (web_modules / "left-pad" / "package.json").exists()
    assert not (web_modules / "left-pad" / "README.md").exists()


def test_custom_extension_set(node_modules: Path, web_modules: Path) -> None:
    _make_package(node_modules)

    result = materialize_package("left-pad", str(node_modules), str(web_modules), (".mjs",))

    assert result.copied == [str(web_modules / "left-pad" / "index.mjs")]


def test_rerun_overwrites_in_place(node_modules: Path, web_modules: Path) -> None:
    _make_package(node_modules)

    first = materialize_package("left-pad", str(node_modules), str(web_modules))
    second = materialize_package("left-pad", str(node_modules), str(web_modules))

    assert first.copied == second.copied
    assert second.failures == []


def test_missing_package_is_a_walk_failure(node_modules: Path, web_modules: Path) -> None:
    result = materialize_package("no-such-pkg", str(node_modules), str(web_modules))

    assert result.copied == []
    assert len(result.failures) == 1
    assert result.failures[0].operation == "walk"
    assert result.failures[0].path.endswith("no-such-pkg")


def test_name_escaping_the_cache_is_refused(node_modules: Path, web_modules: Path, tmp_path: Path) -> None:
    (tmp_path / "outside").mkdir()
    (tmp_path / "outside" / "evil.js").write_text("x", encoding="utf-8")

    result = materialize_package("../../outside", str(node_modules), str(web_modules))

    assert result.copied == []
    assert [f.operation for f in result.failures] == ["walk"]
    assert os.listdir(web_modules) == []


def test_one_failing_copy_does_not_stop_the_others(node_modules: Path, web_modules: Path) -> None:
    pkg = node_modules / "pair"
    pkg.mkdir()
    (pkg / "a.mjs").write_text("a", encoding="utf-8")
    (pkg / "b.mjs").write_text("b", encoding="utf-8")

    with patch(
            "gopack.core.services.mirror.shutil.copyfileobj",
            side_effect=[OSError("disk full"), None],
    ):
        result = materialize_package("pair", str(node_modules), str(web_modules))

    assert result.copied == [str(web_modules / "pair" / "b.mjs")]
    assert len(result.failures) == 1
    assert result.failures[0].operation == "copy"
    assert result.failures[0].path == str(pkg / "a.mjs")
    assert "disk full" in result.failures[0].error


def test_copy_module_file_creates_parents(tmp_path: Path) -> None:
    src = tmp_path / "src.js"
    src.write_bytes(b"\x00\x01binary")
    dst = tmp_path / "a" / "b" / "dst.js"

    assert copy_module_file(str(src), str(dst)) is None
    assert dst.read_bytes() == b"\x00\x01binary"


def test_copy_module_file_reports_unreadable_source(tmp_path: Path) -> None:
    failure = copy_module_file(str(tmp_path / "missing.js"), str(tmp_path / "out" / "x.js"))

    assert failure is not None
    assert failure.operation == "copy"

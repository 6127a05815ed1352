from __future__ import annotations

"""
Unit tests for Configuration Domain Management.
"""

import json
import os

from gopack.domain.config import BuildLayout, get_default_config, load_config


def test_defaults_follow_working_directory(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    cfg = get_default_config()

    assert cfg["build_path"] == os.path.join(str(tmp_path), "public")
    assert cfg["project_root"] == str(tmp_path)
    assert cfg["mirror_subdir"] == "spa/web_modules"
    assert cfg["ejected_subdir"] == "spa/ejected"


def test_load_config_without_file_returns_defaults(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert load_config() == get_default_config()


def test_load_config_explicit_missing_file_warns(tmp_path, caplog) -> None:
    with caplog.at_level("WARNING"):
        cfg = load_config(str(tmp_path / "nope.json"))

    assert cfg["entry_file"] == "main.js"
    assert "not found" in caplog.text


def test_load_config_merges_over_defaults(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "gopack.json").write_text(
        json.dumps({"entry_file": "app.js", "walk_dynamic_imports": True}), encoding="utf-8"
    )

    cfg = load_config()

    assert cfg["entry_file"] == "app.js"
    assert cfg["walk_dynamic_imports"] is True
    assert cfg["mirror_subdir"] == "spa/web_modules"


def test_load_config_corrupt_file(tmp_path, caplog) -> None:
    target = tmp_path / "bad.json"
    target.write_text("{broken", encoding="utf-8")

    with caplog.at_level("ERROR"):
        cfg = load_config(str(target))

    assert cfg["entry_file"] == "main.js"
    assert "Failed to load config" in caplog.text


def test_load_config_non_object_json(tmp_path) -> None:
    target = tmp_path / "list.json"
    target.write_text("[1, 2]", encoding="utf-8")

    assert load_config(str(target))["entry_file"] == "main.js"


def test_layout_from_config(tmp_path) -> None:
    cfg = get_default_config()
    cfg["build_path"] = str(tmp_path / "site" / "public")
    cfg["project_root"] = str(tmp_path / "site")

    layout = BuildLayout.from_config(cfg)

    assert layout.entry_path == os.path.join(str(tmp_path), "site", "public", "spa", "ejected", "main.js")
    assert layout.cache_root == os.path.join(str(tmp_path), "site", "node_modules")
    assert layout.mirror_root == os.path.join(str(tmp_path), "site", "public", "spa", "web_modules")
    assert layout.loadable_extensions == (".mjs", ".js")
    assert layout.rewrite_dynamic_imports is True
    assert layout.walk_dynamic_imports is False

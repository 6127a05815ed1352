from __future__ import annotations

"""
Unit tests for the Import/Export Statement Extractor.

Verifies recognition of dynamic and static forms, multi-line brace lists,
offset bookkeeping, and immunity to quotes appearing in comments, strings,
templates and regular expressions.
"""

import pytest

from gopack.core.processing.statements import (
    classify_path,
    extract_quoted_path,
    extract_references,
)
from gopack.domain.resolution_models import PathKind, ReferenceKind

# -----------------------------------------------------------------------------
# STATIC DECLARATIONS
# -----------------------------------------------------------------------------

def test_static_imports_including_multiline_brace_list() -> None:
    """Default and multi-line named imports are both extracted in order."""
    text = (
        "import App from './App.svelte';\n"
        "import { a,\n"
        "  b } from \"left-pad\";\n"
    )
    refs = extract_references(text)

    assert [r.path for r in refs.static] == ["./App.svelte", "left-pad"]
    assert refs.dynamic == []

    second = refs.static[1]
    assert second.kind is ReferenceKind.STATIC_DECLARATION
    assert second.quote == '"'
    assert second.statement == 'import { a,\n  b } from "left-pad";'


def test_reference_offsets_point_at_the_quoted_literal() -> None:
    text = "const x = 1;\nimport App from './App.svelte';\n"
    ref = extract_references(text).static[0]

    assert text[ref.path_start:ref.path_end] == "'./App.svelte'"
    assert text[ref.start:ref.end] == ref.statement
    assert ref.statement.endswith(";")


def test_reexports_are_static_references() -> None:
    text = (
        "export * from './x.js';\n"
        "export { default as Y } from 'y';\n"
        "export * as ns from \"./ns.js\";\n"
        "export const z = 1;\n"
        "export { z };\n"
        "export default z;\n"
    )
    refs = extract_references(text)

    assert [r.path for r in refs.static] == ["./x.js", "y", "./ns.js"]


def test_local_export_list_does_not_swallow_following_import() -> None:
    """An 'export { a }' without 'from' must not claim the next statement's path."""
    text = "export { a }\nimport b from './b.js'\n"
    refs = extract_references(text)

    assert len(refs.static) == 1
    assert refs.static[0].statement.startswith("import b")


def test_side_effect_import() -> None:
    refs = extract_references("import './styles.js';\n")

    assert [r.path for r in refs.static] == ["./styles.js"]
    assert refs.static[0].statement == "import './styles.js';"


def test_identical_statements_are_reported_separately() -> None:
    text = "import x from 'left-pad';\nimport x from 'left-pad';\n"
    refs = extract_references(text)

    assert len(refs.static) == 2
    assert refs.static[0].path_start != refs.static[1].path_start


# -----------------------------------------------------------------------------
# DYNAMIC CALLS
# -----------------------------------------------------------------------------

def test_dynamic_import_call() -> None:
    refs = extract_references("const m = import('./Page.svelte');\n")

    assert refs.static == []
    assert len(refs.dynamic) == 1
    assert refs.dynamic[0].statement == "import('./Page.svelte')"
    assert refs.dynamic[0].kind is ReferenceKind.DYNAMIC_CALL


def test_dynamic_import_inside_template_substitution() -> None:
    text = "const t = `${await import('./lazy.js')}`;\n"
    refs = extract_references(text)

    assert [r.path for r in refs.dynamic] == ["./lazy.js"]


def test_dynamic_import_with_non_literal_argument_is_ignored() -> None:
    refs = extract_references("const m = import(name);\nconst n = import(`./${p}.js`);\n")

    assert refs.dynamic == []


@pytest.mark.parametrize("text", [
    "const u = import.meta.url;\n",
    "obj.import('./x.js');\n",
])
def test_non_import_uses_of_the_keyword(text: str) -> None:
    refs = extract_references(text)

    assert refs.dynamic == []
    assert refs.static == []


# -----------------------------------------------------------------------------
# QUOTES OUTSIDE PATH LITERALS
# -----------------------------------------------------------------------------

def test_quotes_in_comments_and_strings_are_ignored() -> None:
    text = (
        "// import x from 'fake';\n"
        "/* export * from \"nope\" */\n"
        "const s = \"import y from 'z'\";\n"
        "const t = `import a from 'b'`;\n"
        "import c from './c.js';\n"
    )
    refs = extract_references(text)

    assert [r.path for r in refs.static] == ["./c.js"]


def test_regex_literal_with_quote_does_not_break_scanning() -> None:
    text = "const re = /'/g;\nimport a from './a.js';\n"
    refs = extract_references(text)

    assert [r.path for r in refs.static] == ["./a.js"]


def test_division_is_not_mistaken_for_regex() -> None:
    text = "const x = a / b; const y = c / d;\nimport q from './q.js';\n"
    refs = extract_references(text)

    assert [r.path for r in refs.static] == ["./q.js"]


# -----------------------------------------------------------------------------
# PATH HELPERS
# -----------------------------------------------------------------------------

def test_extract_quoted_path() -> None:
    assert extract_quoted_path("import { a } from 'left-pad';") == "left-pad"
    assert extract_quoted_path('export * as "ns" from "./ns.js";') == "./ns.js"
    assert extract_quoted_path("import x") == ""


@pytest.mark.parametrize("path, expected", [
    ("left-pad", PathKind.BARE_PACKAGE),
    ("@scope/pkg", PathKind.BARE_PACKAGE),
    ("svelte/internal", PathKind.BARE_PACKAGE),
    ("./a.js", PathKind.RELATIVE_LOCAL),
    ("../x", PathKind.RELATIVE_LOCAL),
    ("lib.svelte", PathKind.RELATIVE_LOCAL),
])
def test_classify_path(path: str, expected: PathKind) -> None:
    assert classify_path(path) is expected

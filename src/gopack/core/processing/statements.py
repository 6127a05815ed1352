from __future__ import annotations

"""
Import/Export Statement Extraction.

Scans compiled module text for dynamic import() calls and for static
import/export-from declarations, including brace lists spanning several
lines. A lightweight tokenizer skips comments, template literals and regular
expression literals, so quote characters outside real path literals are
never mistaken for import paths. No semantic parsing is performed.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Final, Iterator, List, Optional, Tuple

from gopack.domain.resolution_models import (
    ExtractedReferences,
    PathKind,
    Reference,
    ReferenceKind,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# LEXICAL PATTERNS
# -----------------------------------------------------------------------------

_IDENT_START: Final[re.Pattern] = re.compile(r"[A-Za-z_$\u0080-\uffff]")
_IDENT: Final[re.Pattern] = re.compile(r"[A-Za-z0-9_$\u0080-\uffff]+")
_NUMBER: Final[re.Pattern] = re.compile(r"\d[\w.]*")

# Find the path specifically (part between single or double quotes).
_QUOTED_PATH: Final[re.Pattern] = re.compile(r"""(['"])((?:\\.|(?!\1)[^\\\n])*)\1""")

# After these keywords a '/' starts a regular expression, not a division.
_REGEX_PRECEDING_KEYWORDS: Final[frozenset] = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
})
_REGEX_PRECEDING_PUNCT: Final[str] = "(,=:[!&|?{};+-*%<>~^"

# Upper bound on tokens inspected while looking for a 'from' clause.
_MAX_CLAUSE_TOKENS: Final[int] = 4096


@dataclass(frozen=True)
class Token:
    """A lexical unit: 'name', 'string' or 'punct'."""
    kind: str
    value: str
    start: int
    end: int


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def extract_references(text: str) -> ExtractedReferences:
    """
    Find every dynamic import call and static import/export-from statement.

    Both sequences are ordered by position in the text. Each reference keeps
    the offsets of the statement and of its quoted path literal.

    Args:
        text: Full module source.

    Returns:
        ExtractedReferences: Dynamic and static references in textual order.
    """
    tokens = list(tokenize(text))
    dynamic: List[Reference] = []
    static: List[Reference] = []

    for i, tok in enumerate(tokens):
        if tok.kind != "name" or tok.value not in ("import", "export"):
            continue
        if _is_member_access(tokens, i):
            continue

        if tok.value == "import":
            ref = _match_import(text, tokens, i)
        else:
            ref = _match_export(text, tokens, i)

        if ref is None:
            continue
        if ref.kind is ReferenceKind.DYNAMIC_CALL:
            dynamic.append(ref)
        else:
            static.append(ref)

    logger.debug(f"Extracted {len(dynamic)} dynamic and {len(static)} static references.")
    return ExtractedReferences(dynamic=dynamic, static=static)


def extract_quoted_path(statement: str) -> str:
    """
    Return the quoted path inside a raw statement span, without its quotes.

    The last quoted literal is used, which is the module specifier in every
    recognized form ('import x from "y"', 'export * as "n" from "y"').

    Args:
        statement: Raw statement text.

    Returns:
        str: Unquoted path, or an empty string if no literal is present.
    """
    matches = list(_QUOTED_PATH.finditer(statement))
    if not matches:
        return ""
    return matches[-1].group(2)


def classify_path(path: str) -> PathKind:
    """
    Derive the resolution strategy from a path string.

    Paths without a leading dot and without a file extension name a package;
    everything else is resolved against the referencing module's directory.
    """
    if path and not path.startswith(".") and not os.path.splitext(path)[1]:
        return PathKind.BARE_PACKAGE
    return PathKind.RELATIVE_LOCAL


def tokenize(text: str) -> Iterator[Token]:
    """
    Split module text into names, string literals and punctuation.

    Whitespace, comments, numbers, template literals and regular expression
    literals are consumed without producing tokens, except for the
    expressions embedded in template substitutions, which are tokenized.
    """
    n = len(text)
    i = 0
    prev: Optional[Token] = None
    # Brace depths at which an enclosing template literal resumes.
    template_stack: List[int] = []
    depth = 0

    while i < n:
        ch = text[i]

        if ch.isspace():
            i += 1
            continue

        if text.startswith("//", i):
            nl = text.find("\n", i)
            i = n if nl == -1 else nl + 1
            continue

        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close == -1 else close + 2
            continue

        if ch in ("'", '"'):
            end = _scan_string(text, i, ch)
            prev = Token("string", text[i:end], i, end)
            yield prev
            i = end
            continue

        if ch == "`":
            i, resumed = _scan_template(text, i + 1)
            if resumed:
                template_stack.append(depth)
                depth += 1
            prev = Token("punct", "`", i - 1, i)
            continue

        if ch == "}" and template_stack and depth - 1 == template_stack[-1]:
            template_stack.pop()
            depth -= 1
            i, resumed = _scan_template(text, i + 1)
            if resumed:
                template_stack.append(depth)
                depth += 1
            prev = Token("punct", "`", i - 1, i)
            continue

        if ch == "/" and _regex_allowed(prev):
            end = _scan_regex(text, i)
            if end is not None:
                prev = Token("punct", "/", i, end)
                i = end
                continue

        if _IDENT_START.match(ch):
            m = _IDENT.match(text, i)
            end = m.end() if m else i + 1
            prev = Token("name", text[i:end], i, end)
            yield prev
            i = end
            continue

        if ch.isdigit():
            m = _NUMBER.match(text, i)
            end = m.end() if m else i + 1
            prev = Token("punct", "0", i, end)
            i = end
            continue

        if ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)

        prev = Token("punct", ch, i, i + 1)
        yield prev
        i += 1


# -----------------------------------------------------------------------------
# STATEMENT MATCHERS
# -----------------------------------------------------------------------------

def _match_import(text: str, tokens: List[Token], i: int) -> Optional[Reference]:
    nxt = _at(tokens, i + 1)
    if nxt is None:
        return None

    # import('...')
    if nxt.kind == "punct" and nxt.value == "(":
        lit = _at(tokens, i + 2)
        if not _is_path_literal(lit):
            return None
        close = _at(tokens, i + 3)
        if close is None or close.kind != "punct" or close.value not in (")", ","):
            return None
        end = close.end if close.value == ")" else lit.end
        return _build(text, tokens[i].start, end, lit, ReferenceKind.DYNAMIC_CALL)

    # import.meta
    if nxt.kind == "punct" and nxt.value == ".":
        return None

    # import '...';
    if _is_path_literal(nxt):
        return _build(text, tokens[i].start, _statement_end(tokens, i + 1), nxt,
                      ReferenceKind.STATIC_DECLARATION)

    # import <clause> from '...';
    lit_index = _find_from_clause(tokens, i + 1)
    if lit_index is None:
        return None
    return _build(text, tokens[i].start, _statement_end(tokens, lit_index), tokens[lit_index],
                  ReferenceKind.STATIC_DECLARATION)


def _match_export(text: str, tokens: List[Token], i: int) -> Optional[Reference]:
    nxt = _at(tokens, i + 1)
    if nxt is None or nxt.kind != "punct" or nxt.value not in ("*", "{"):
        return None

    lit_index = _find_from_clause(tokens, i + 1)
    if lit_index is None:
        return None
    return _build(text, tokens[i].start, _statement_end(tokens, lit_index), tokens[lit_index],
                  ReferenceKind.STATIC_DECLARATION)


def _find_from_clause(tokens: List[Token], j: int) -> Optional[int]:
    """Return the index of the string literal following 'from', if any."""
    limit = min(len(tokens), j + _MAX_CLAUSE_TOKENS)
    in_braces = False
    while j < limit:
        tok = tokens[j]
        if tok.kind == "punct":
            if tok.value == "{":
                if in_braces:
                    return None
                in_braces = True
            elif tok.value == "}":
                in_braces = False
            elif tok.value in (";", "(", ")", "=") and not in_braces:
                return None
        elif tok.kind == "string":
            # Quoted names are only legal inside brace lists or after 'as'.
            if not in_braces and not _is_name(_at(tokens, j - 1), "as"):
                return None
        elif tok.kind == "name" and tok.value == "from" and not in_braces:
            lit = _at(tokens, j + 1)
            if _is_path_literal(lit):
                return j + 1
        elif tok.kind == "name" and tok.value in ("import", "export") and not in_braces:
            return None
        j += 1
    return None


def _build(text: str, start: int, end: int, lit: Token, kind: ReferenceKind) -> Reference:
    return Reference(
        statement=text[start:end],
        kind=kind,
        path=lit.value[1:-1],
        quote=lit.value[0],
        start=start,
        end=end,
        path_start=lit.start,
        path_end=lit.end,
    )


def _statement_end(tokens: List[Token], lit_index: int) -> int:
    """End offset of a statement, including a trailing semicolon."""
    semi = _at(tokens, lit_index + 1)
    if semi is not None and semi.kind == "punct" and semi.value == ";":
        return semi.end
    return tokens[lit_index].end


# -----------------------------------------------------------------------------
# LEXER HELPERS
# -----------------------------------------------------------------------------

def _scan_string(text: str, i: int, quote: str) -> int:
    """Return the offset one past the closing quote (or the line end)."""
    j = i + 1
    n = len(text)
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == quote:
            return j + 1
        if c == "\n":
            return j
        j += 1
    return n


def _scan_template(text: str, j: int) -> Tuple[int, bool]:
    """
    Consume template literal text starting after a backtick or '}'.

    Returns the offset where scanning stopped and whether a '${'
    substitution was opened (True) or the literal was closed (False).
    """
    n = len(text)
    while j < n:
        c = text[j]
        if c == "\\":
            j += 2
            continue
        if c == "`":
            return j + 1, False
        if c == "$" and j + 1 < n and text[j + 1] == "{":
            return j + 2, True
        j += 1
    return n, False


def _scan_regex(text: str, i: int) -> Optional[int]:
    """Return the end of a regex literal at 'i', or None if it is not one."""
    j = i + 1
    n = len(text)
    in_class = False
    while j < n:
        c = text[j]
        if c == "\n":
            return None
        if c == "\\":
            j += 2
            continue
        if c == "[":
            in_class = True
        elif c == "]":
            in_class = False
        elif c == "/" and not in_class:
            j += 1
            m = _IDENT.match(text, j)
            return m.end() if m else j
        j += 1
    return None


def _regex_allowed(prev: Optional[Token]) -> bool:
    if prev is None:
        return True
    if prev.kind == "name":
        return prev.value in _REGEX_PRECEDING_KEYWORDS
    if prev.kind == "punct":
        return prev.value in _REGEX_PRECEDING_PUNCT
    return False


def _is_member_access(tokens: List[Token], i: int) -> bool:
    before = _at(tokens, i - 1)
    return before is not None and before.kind == "punct" and before.value == "."


def _is_name(tok: Optional[Token], value: str) -> bool:
    return tok is not None and tok.kind == "name" and tok.value == value


def _at(tokens: List[Token], i: int) -> Optional[Token]:
    if 0 <= i < len(tokens):
        return tokens[i]
    return None


def _is_path_literal(tok: Optional[Token]) -> bool:
    """True for a terminated single- or double-quoted string token."""
    return (
        tok is not None
        and tok.kind == "string"
        and len(tok.value) >= 2
        and tok.value[-1] == tok.value[0]
    )

"""Perl syntax tree provider using tree-sitter.

The tree-sitter parse tree is flattened into an immutable arena of tokens in
source order. Literals, heredocs and variables are kept whole; every other
leaf becomes one token. Text the grammar hides (the Perl statement
terminator is an external, invisible token) is re-tokenized from the gaps
between visible nodes, so every non-blank, non-comment byte of the file is
covered by exactly one token.

Navigation is by index: tokens never hold references to each other.
"""

import bisect
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from sqlaudit.exceptions import ParseFailure
from sqlaudit.utils.logging import logger


class TokenKind(Enum):
    """Coarse token classes the scanner cares about."""

    LITERAL = "literal"
    MULTILINE_LITERAL = "multiline_literal"
    VARIABLE = "variable"
    WORD = "word"
    OPERATOR = "operator"
    DELIMITER = "delimiter"


class DeclarationForm(Enum):
    """Perl variable declaration keywords."""

    MY = "my"
    OUR = "our"
    LOCAL = "local"
    STATE = "state"

    @classmethod
    def from_word(cls, word: str) -> "DeclarationForm | None":
        try:
            return cls(word)
        except ValueError:
            return None


@dataclass(frozen=True)
class Token:
    """One entry of the token arena."""

    index: int
    kind: TokenKind
    content: str
    line: int
    value: str | None = None
    declaration: DeclarationForm | None = None

    @property
    def text(self) -> str:
        """Decoded literal value when there is one, else the raw content."""
        return self.value if self.value is not None else self.content


class SyntaxTree:
    """Token arena for one parsed file."""

    def __init__(self, tokens: tuple[Token, ...], has_error: bool = False):
        self.tokens = tokens
        self.has_error = has_error

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    def __iter__(self):
        return iter(self.tokens)

    def previous(self, index: int) -> Token | None:
        return self.tokens[index - 1] if index > 0 else None

    def next(self, index: int) -> Token | None:
        return self.tokens[index + 1] if index + 1 < len(self.tokens) else None

    def find_all(self, *kinds: TokenKind) -> list[Token]:
        """All tokens of the given kinds, in source order."""
        return [t for t in self.tokens if t.kind in kinds]


# ============================================================================
# NODE CLASSIFICATION
# ============================================================================

ATOMIC_NODES = {
    "string_literal": TokenKind.LITERAL,
    "interpolated_string_literal": TokenKind.LITERAL,
    "heredoc_token": TokenKind.MULTILINE_LITERAL,
    "command_heredoc_token": TokenKind.OPERATOR,
    "scalar": TokenKind.VARIABLE,
    "array": TokenKind.VARIABLE,
    "hash": TokenKind.VARIABLE,
    "arraylen": TokenKind.VARIABLE,
    "glob": TokenKind.VARIABLE,
    "container_variable": TokenKind.VARIABLE,
    "slice_container_variable": TokenKind.VARIABLE,
    "keyval_container_variable": TokenKind.VARIABLE,
}

# Covered but never tokenized
SKIPPED_NODES = {"comment", "pod", "heredoc_content", "__DATA__", "__END__"}

DELIMITERS = frozenset({";", ",", "{", "}", "(", ")", "[", "]"})

_WORD_RE = re.compile(r"\A[A-Za-z_]\w*(?:::\w+)*\Z")
_VARIABLE_HEAD_RE = re.compile(r"\A[\$@%&]#?(?:\{\^?\w+(?:::\w+)*\}|\^?\w+(?:::\w+)*|[^\w\s{])")
_QUOTED_RE = re.compile(r"\A(?:qq|q)?\s*([^\w\s])(.*)([^\w\s])\Z", re.S)
_HEREDOC_OPENER_RE = re.compile(rb"<<(~?)(?:\s*\"([^\"]*)\"|\s*'([^']*)'|([A-Za-z_]\w*))")

_GAP_TOKEN_RE = re.compile(
    rb"""
      (?P<space>\s+)
    | (?P<comment>\#[^\n]*)
    | (?P<token>
          [\$@%][A-Za-z_]\w*(?:::\w+)*
        | [A-Za-z_]\w*(?:::\w+)*
        | =>|->|==|!=|<=|>=|=~|!~|&&
        | (?:\|\||//|[.+\-*/|&])?=
        | \S
      )
    """,
    re.X,
)


@dataclass
class _Span:
    start: int
    end: int
    kind: TokenKind | None
    value: str | None = None


@lru_cache(maxsize=1)
def _perl_language() -> Any:
    from tree_sitter_language_pack import get_language

    return get_language("perl")


def _new_parser() -> Any:
    """Fresh parser per call; tree-sitter parsers are not shared across threads."""
    from tree_sitter import Parser

    return Parser(_perl_language())


def classify_text(text: str) -> tuple[TokenKind, DeclarationForm | None]:
    """Classify a single leaf by its text."""
    if text in DELIMITERS:
        return TokenKind.DELIMITER, None
    if _WORD_RE.match(text):
        return TokenKind.WORD, DeclarationForm.from_word(text)
    if text[:1] in "$@%" and len(text) > 1:
        return TokenKind.VARIABLE, None
    return TokenKind.OPERATOR, None


def decode_literal(text: str) -> str:
    """Strip the quote delimiters ('', "", q{}, qq{}) from a literal."""
    match = _QUOTED_RE.match(text)
    return match.group(2) if match else text


def _collect(node: Any, spans: list[_Span]) -> None:
    if node.end_byte <= node.start_byte:
        return

    node_type = node.type
    if node_type in SKIPPED_NODES:
        spans.append(_Span(node.start_byte, node.end_byte, None))
        return

    kind = ATOMIC_NODES.get(node_type)
    if kind is not None:
        spans.append(_Span(node.start_byte, node.end_byte, kind))
        return

    if node.child_count == 0:
        spans.append(_Span(node.start_byte, node.end_byte, TokenKind.OPERATOR))
        return

    for child in node.children:
        _collect(child, spans)


def _gap_spans(source: bytes, start: int, end: int) -> list[_Span]:
    spans = []
    for match in _GAP_TOKEN_RE.finditer(source, start, end):
        if match.lastgroup == "token":
            spans.append(_Span(match.start(), match.end(), TokenKind.OPERATOR))
    return spans


def _fill_gaps(source: bytes, spans: list[_Span]) -> list[_Span]:
    spans.sort(key=lambda s: s.start)
    filled = []
    pos = 0
    for span in spans:
        if span.start > pos:
            filled.extend(_gap_spans(source, pos, span.start))
        filled.append(span)
        pos = max(pos, span.end)
    if pos < len(source):
        filled.extend(_gap_spans(source, pos, len(source)))
    return filled


def _heredoc_body(source: bytes, marker: bytes, indented: bool, opener_end: int, cursor: int):
    """Locate a heredoc body after its opener line.

    Returns (body_start, body_end, terminator_end) as byte offsets.
    """
    newline = source.find(b"\n", opener_end)
    if newline == -1:
        return None
    # Several heredocs opened on one line are stacked one after another
    body_start = max(newline + 1, cursor)

    pos = body_start
    while pos < len(source):
        nl = source.find(b"\n", pos)
        line_end = nl if nl != -1 else len(source)
        line = source[pos:line_end].rstrip(b"\r")
        if (line.strip() if indented else line) == marker:
            return body_start, pos, min(line_end + 1, len(source))
        pos = line_end + 1

    return body_start, len(source), len(source)


def _attach_heredoc_bodies(source: bytes, spans: list[_Span]) -> list[_Span]:
    skip: list[tuple[int, int]] = []
    cursor = 0
    body = (0, 0)
    for span in spans:
        if span.kind not in (TokenKind.MULTILINE_LITERAL, TokenKind.OPERATOR):
            continue
        if body[0] <= span.start < body[1]:
            continue
        opener = _HEREDOC_OPENER_RE.match(source, span.start)
        if opener is None:
            continue
        # A bare << leaf followed by a marker is an opener too
        span.kind = TokenKind.MULTILINE_LITERAL
        if opener.end() > span.end:
            # Grammar split the delimiter off the opener; fold it back in
            skip.append((span.end, opener.end()))
            span.end = opener.end()

        marker = next(g for g in opener.groups()[1:] if g is not None)
        found = _heredoc_body(source, marker, opener.group(1) == b"~", span.end, cursor)
        if found is None:
            continue
        body_start, body_end, terminator_end = found
        span.value = source[body_start:body_end].decode("utf-8", errors="replace")
        body = (body_start, terminator_end)
        skip.append(body)
        cursor = terminator_end

    if not skip:
        return spans

    skip.sort()
    starts = [s for s, _ in skip]

    def skipped(offset: int) -> bool:
        i = bisect.bisect_right(starts, offset) - 1
        return i >= 0 and skip[i][0] <= offset < skip[i][1]

    return [s for s in spans if not skipped(s.start)]


def parse_perl(source: bytes, path: str = "") -> SyntaxTree:
    """Parse Perl source into a token arena.

    Raises:
        ParseFailure: binary input, missing grammar, or no tree produced
    """
    if b"\x00" in source:
        raise ParseFailure(path, "binary content")

    try:
        parser = _new_parser()
    except (ImportError, LookupError, ValueError) as e:
        raise ParseFailure(path, f"tree-sitter perl grammar unavailable: {e}") from e

    tree = parser.parse(source)
    if tree is None:
        raise ParseFailure(path, "parser returned no tree")

    root = tree.root_node
    if root.has_error:
        logger.debug(f"{path or '<memory>'}: partial parse, continuing with recovered tree")

    spans: list[_Span] = []
    _collect(root, spans)
    spans = _attach_heredoc_bodies(source, _fill_gaps(source, spans))

    newlines = [m.start() for m in re.finditer(rb"\n", source)]
    tokens = []
    for span in spans:
        if span.kind is None:
            continue
        raw = source[span.start : span.end].decode("utf-8", errors="replace")
        line = bisect.bisect_left(newlines, span.start) + 1
        index = len(tokens)

        if span.kind is TokenKind.LITERAL:
            token = Token(index, span.kind, raw, line, value=decode_literal(raw))
        elif span.kind is TokenKind.MULTILINE_LITERAL:
            token = Token(index, span.kind, raw, line, value=span.value)
        elif span.kind is TokenKind.VARIABLE:
            head = _VARIABLE_HEAD_RE.match(raw)
            token = Token(index, span.kind, head.group(0) if head else raw, line)
        else:
            kind, declaration = classify_text(raw)
            token = Token(index, kind, raw, line, declaration=declaration)
        tokens.append(token)

    return SyntaxTree(tuple(tokens), has_error=root.has_error)

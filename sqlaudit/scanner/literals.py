"""Literal locator and SQL classifier."""

import re

from sqlaudit.parsers.perl_tree import SyntaxTree, Token, TokenKind

from .assignment import find_assigned_variable
from .models import HeredocFinding, LiteralFinding, StringFinding
from .vocabulary import ScanVocabulary

_WHITESPACE_RE = re.compile(r"\s+")


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut with a trailing '...'."""
    return text[:limit] + ("..." if len(text) > limit else "")


def snippet(text: str, limit: int = 200) -> str:
    """Whitespace-collapsed, truncated, double quotes rewritten to single."""
    return truncate(_WHITESPACE_RE.sub(" ", text), limit).replace('"', "'")


def is_sql(text: str, vocabulary: ScanVocabulary) -> bool:
    return vocabulary.sql_re.search(text) is not None


def _finding_for(tree: SyntaxTree, token: Token, vocabulary: ScanVocabulary) -> LiteralFinding:
    variable = find_assigned_variable(tree, token.index)
    finding_cls = StringFinding if token.kind is TokenKind.LITERAL else HeredocFinding
    return finding_cls(
        line=token.line,
        snippet=snippet(token.text, vocabulary.snippet_max_chars),
        variable=variable,
        statement=token.text,
    )


def locate_sql_literals(tree: SyntaxTree, vocabulary: ScanVocabulary) -> list[LiteralFinding]:
    """String findings in source order, followed by heredoc findings in source order."""
    findings: list[LiteralFinding] = []
    for kind in (TokenKind.LITERAL, TokenKind.MULTILINE_LITERAL):
        for token in tree.find_all(kind):
            if is_sql(token.text, vocabulary):
                findings.append(_finding_for(tree, token, vocabulary))
    return findings

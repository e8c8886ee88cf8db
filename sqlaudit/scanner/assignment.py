"""Assignment resolver: which variable does a literal get assigned to?

Single-statement heuristic over the token arena, not data-flow analysis.
Only direct ``target = literal`` forms are recognized:

    my $sql = "SELECT ...";          -> $sql
    $self->{sql} = "SELECT ...";     -> $self
    our ($q) = <<SQL;                -> $q
    my ($a, $b) = (1, "SELECT ...")  -> $b
    $dbh->do("SELECT ...");          -> None
"""

from sqlaudit.parsers.perl_tree import SyntaxTree, TokenKind

ASSIGNMENT_OPERATORS = frozenset({"=", ".=", "||=", "//="})
STATEMENT_BOUNDARIES = frozenset({";", "{", "}"})
TERMINATOR = ";"
LIST_SEPARATOR = ","


def find_assignment_operator(tree: SyntaxTree, index: int) -> int | None:
    """Index of the assignment operator left of index within the same statement."""
    token = tree.previous(index)
    while token is not None:
        if token.content in STATEMENT_BOUNDARIES:
            return None
        if token.kind is TokenKind.OPERATOR and token.content in ASSIGNMENT_OPERATORS:
            return token.index
        token = tree.previous(token.index)
    return None


def _declared_variable(tree: SyntaxTree, keyword_index: int) -> str | None:
    token = tree.next(keyword_index)
    while token is not None:
        if token.content == TERMINATOR:
            return None
        if token.kind is TokenKind.VARIABLE:
            return token.content
        token = tree.next(token.index)
    return None


def find_assigned_variable(tree: SyntaxTree, index: int) -> str | None:
    """Variable the token at index is assigned to, or None when unresolved."""
    operator = find_assignment_operator(tree, index)
    if operator is None:
        return None

    token = tree.previous(operator)
    while token is not None:
        if token.kind is TokenKind.VARIABLE:
            return token.content
        if token.declaration is not None:
            return _declared_variable(tree, token.index)
        if token.content == LIST_SEPARATOR:
            return None
        token = tree.previous(token.index)
    return None

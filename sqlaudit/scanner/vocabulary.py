"""Fixed vocabularies used by the scanner, frozen once per run."""

import re
from dataclasses import dataclass, field

SQL_KEYWORDS = (
    "SELECT",
    "INSERT",
    "UPDATE",
    "DELETE",
    "CREATE",
    "ALTER",
    "DROP",
    "FROM",
    "WHERE",
    "JOIN",
    "INTO",
)

NAME_VERBS = ("SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "ALTER", "DROP")

CALL_VERBS = (
    "prepare",
    "prepare_cached",
    "do",
    "execute",
    "selectall_arrayref",
    "selectall_hashref",
    "selectrow_array",
    "selectrow_arrayref",
    "selectrow_hashref",
    "selectcol_arrayref",
)

# Common DBI handles and obvious non-SQL variables
IGNORE_VARIABLES = ("$dbh", "$sth", "$_", "$self", "$0")


def _alternation(words) -> str:
    # Longest first so prepare_cached is not shadowed by prepare
    return "|".join(re.escape(w) for w in sorted(set(words), key=lambda w: (-len(w), w)))


@dataclass(frozen=True)
class ScanVocabulary:
    """Keyword sets and compiled patterns shared by every scanner component."""

    sql_keywords: tuple[str, ...] = SQL_KEYWORDS
    name_verbs: tuple[str, ...] = NAME_VERBS
    call_verbs: tuple[str, ...] = CALL_VERBS
    ignore_variables: frozenset[str] = frozenset(IGNORE_VARIABLES)
    snippet_max_chars: int = 200
    context_radius: int = 40

    sql_re: re.Pattern = field(init=False, repr=False, compare=False)
    name_verb_re: re.Pattern = field(init=False, repr=False, compare=False)
    call_re: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(
            self, "sql_re", re.compile(rf"\b(?:{_alternation(self.sql_keywords)})\b", re.I)
        )
        object.__setattr__(
            self, "name_verb_re", re.compile(rf"\b({_alternation(self.name_verbs)})\b", re.I)
        )
        object.__setattr__(
            self,
            "call_re",
            re.compile(rf"->\s*({_alternation(self.call_verbs)})\b", re.I),
        )


DEFAULT_VOCABULARY = ScanVocabulary()

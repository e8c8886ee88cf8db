"""Finding records produced by the scanner.

Findings form a closed sum type: StringFinding, HeredocFinding, CallFinding
and MissingVariableFinding. They are frozen and copy every piece of text they
keep, so they outlive the token arena they came from.
"""

from dataclasses import dataclass, field, replace

MISSING_VARIABLE_NOTE = (
    "variable used in dbi_call but no string/heredoc declaration found in this file"
)


@dataclass(frozen=True)
class StringFinding:
    """SQL-bearing quoted literal."""

    line: int | None
    snippet: str
    variable: str | None = None
    name: str | None = None
    statement: str = field(default="", repr=False)

    type_tag = "string"

    def with_name(self, name: str) -> "StringFinding":
        return replace(self, name=name)


@dataclass(frozen=True)
class HeredocFinding:
    """SQL-bearing heredoc body."""

    line: int | None
    snippet: str
    variable: str | None = None
    name: str | None = None
    statement: str = field(default="", repr=False)

    type_tag = "heredoc"

    def with_name(self, name: str) -> "HeredocFinding":
        return replace(self, name=name)


@dataclass(frozen=True)
class CallFinding:
    """DBI method call located by text pattern."""

    line: int
    verb: str
    context: str

    type_tag = "dbi_call"


@dataclass(frozen=True)
class MissingVariableFinding:
    """Variable used at a call site without an in-file SQL declaration."""

    variable: str
    used_in_line: int
    context: str
    note: str = MISSING_VARIABLE_NOTE

    type_tag = "missing_variable"


LiteralFinding = StringFinding | HeredocFinding
Finding = StringFinding | HeredocFinding | CallFinding | MissingVariableFinding

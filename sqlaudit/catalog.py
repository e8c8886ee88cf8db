"""Statement catalog export.

Turns every named string/heredoc finding into an entry the runtime statement
store can load by id:

    - id: users.sql_14_SELECT
      sql: |
        SELECT
        id,
        name
        FROM users
        WHERE id = ?
      meta:
        db: rep
        file: lib/Users.pl
        line: 14
        command: SELECT
        tables: [users]
        placeholders: {}
        bind_values: [__id__]

``__NAME__`` markers in the SQL are template slots. ``__ENTITY__`` stays in
place as an identifier placeholder; every other marker becomes a ``?`` bind
parameter, listed in first-appearance order.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import sqlparse
import yaml

from sqlaudit.scanner.models import Finding, HeredocFinding, StringFinding
from sqlaudit.utils.logging import logger

FORMATS = ("yaml", "jsonl")

ENTITY_PLACEHOLDER = "ENTITY"

KEYWORDS = (
    "group by",
    "order by",
    "left join",
    "right join",
    "inner join",
    "select",
    "from",
    "where",
    "having",
    "join",
    "on",
    "and",
    "or",
    "limit",
    "as",
)

_KEYWORD_RES = [
    re.compile(r"\b(" + r"\s+".join(kw.split()) + r")\b", re.I)
    for kw in sorted(KEYWORDS, key=len, reverse=True)
]
_CLAUSE_RE = re.compile(
    r"\s+\b(LEFT JOIN|RIGHT JOIN|INNER JOIN|GROUP BY|ORDER BY|FROM|WHERE|HAVING|LIMIT|JOIN|ON)\b",
    re.I,
)
_SELECT_COLUMNS_RE = re.compile(r"SELECT\s+(.*?)\s+FROM\s+", re.S)
_MARKER_RE = re.compile(r"__(.+?)__")


@dataclass
class CatalogEntry:
    """One statement ready for the runtime store."""

    id: str
    sql: str
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "sql": self.sql, "meta": self.meta}


def _split_top_level(columns: str) -> list[str]:
    """Split on commas outside parentheses."""
    cells, current, depth = [], [], 0
    for ch in columns:
        if ch == "(":
            depth += 1
        elif ch == ")" and depth > 0:
            depth -= 1
        if ch == "," and depth == 0:
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
    if current or not cells:
        cells.append("".join(current))
    return [c.strip() for c in cells]


def pretty_sql(sql: str | None) -> str:
    """Reflow SQL one clause per line with upper-cased keywords."""
    if not sql:
        return ""

    sql = re.sub(r"\s+", " ", sql).strip()

    for pattern in _KEYWORD_RES:
        sql = pattern.sub(lambda m: m.group(1).upper(), sql)

    sql = _CLAUSE_RE.sub(lambda m: "\n" + m.group(1).upper(), sql)

    match = _SELECT_COLUMNS_RE.search(sql)
    if match:
        parts = _split_top_level(match.group(1))
        if len(parts) > 1:
            block = ",\n  ".join(parts)
            sql = sql[: match.start()] + f"SELECT\n  {block}\nFROM " + sql[match.end() :]

    sql = re.sub(r"\s+\bAND\b\s+", "\n  AND ", sql, flags=re.I)
    sql = re.sub(r"\s+\bOR\b\s+", "\n  OR ", sql, flags=re.I)

    # Horizontal whitespace only; newlines carry the layout
    sql = re.sub(r"[ \t]+,", ",", sql)
    sql = re.sub(r",[ \t]+", ", ", sql)
    sql = re.sub(r"[ \t]+\(", " (", sql)
    sql = re.sub(r"\([ \t]+", "(", sql)
    sql = re.sub(r"[ \t]+\)", ")", sql)

    return "\n".join(line.strip() for line in sql.split("\n"))


def extract_markers(sql: str, entity_value: str = "BR") -> tuple[str, dict[str, str], list[str]]:
    """Replace __x__ bind markers with '?'.

    Returns:
        (sql, placeholders, bind_values)
    """
    ordered = list(dict.fromkeys(_MARKER_RE.findall(sql)))

    placeholders: dict[str, str] = {}
    bind_values: list[str] = []
    for marker in ordered:
        if marker == ENTITY_PLACEHOLDER:
            placeholders[ENTITY_PLACEHOLDER] = entity_value
        else:
            bind_values.append(f"__{marker}__")

    def substitute(match: re.Match) -> str:
        return match.group(0) if match.group(1) == ENTITY_PLACEHOLDER else "?"

    return _MARKER_RE.sub(substitute, sql), placeholders, bind_values


def _qualified_tail(tokens: list, start: int) -> str:
    """Last part of a dotted name (schema.table -> table) starting at tokens[start]."""
    name = tokens[start].value
    i = start + 1
    while (
        i + 1 < len(tokens)
        and tokens[i].value == "."
        and tokens[i + 1].ttype in (None, sqlparse.tokens.Name)
    ):
        name = tokens[i + 1].value
        i += 2
    return name


def parse_sql_query(query_text: str) -> tuple[str, list[str]] | None:
    """Parse SQL query to extract command type and table names.

    Returns:
        (command, tables) if parseable, None if unparseable
    """
    try:
        parsed = sqlparse.parse(query_text)
    except Exception as e:  # sqlparse raises bare Exceptions on pathological input
        logger.debug(f"sqlparse failed: {e}")
        return None
    if not parsed:
        return None

    statement = parsed[0]
    command = statement.get_type()
    if not command or command == "UNKNOWN":
        return None

    tables = []
    tokens = list(statement.flatten())
    for i, token in enumerate(tokens):
        if not token.is_keyword:
            continue
        if token.normalized in ("FROM", "INTO", "UPDATE", "TABLE") or token.normalized.endswith("JOIN"):
            for j in range(i + 1, len(tokens)):
                next_token = tokens[j]
                if next_token.is_whitespace:
                    continue
                if next_token.ttype in (None, sqlparse.tokens.Name):
                    table_name = _qualified_tail(tokens, j).strip("\"'`")
                    if table_name and table_name.upper() not in ("SELECT", "WHERE", "SET", "VALUES"):
                        tables.append(table_name)
                break

    return command, list(dict.fromkeys(tables))


def build_catalog(
    results: dict[str, list[Finding]],
    namespace: str | None = None,
    db: str = "rep",
    entity_value: str = "BR",
) -> list[CatalogEntry]:
    """Catalog entries for every named literal finding, in report order."""
    entries: list[CatalogEntry] = []
    seen: dict[str, int] = {}

    for path, findings in results.items():
        for finding in findings:
            if not isinstance(finding, (StringFinding, HeredocFinding)) or finding.name is None:
                continue

            entry_id = f"{namespace}.{finding.name}" if namespace else finding.name
            if entry_id in seen:
                seen[entry_id] += 1
                logger.warning(f"Duplicate statement id {entry_id} in {path}, suffixing")
                entry_id = f"{entry_id}_{seen[entry_id]}"
            else:
                seen[entry_id] = 1

            sql, placeholders, bind_values = extract_markers(finding.statement, entity_value)
            meta: dict[str, Any] = {"db": db, "file": path, "line": finding.line}
            parsed = parse_sql_query(sql)
            if parsed:
                meta["command"], meta["tables"] = parsed
            meta["placeholders"] = placeholders
            meta["bind_values"] = bind_values

            entries.append(CatalogEntry(id=entry_id, sql=pretty_sql(sql), meta=meta))

    return entries


class _CatalogDumper(yaml.SafeDumper):
    """SafeDumper emitting multi-line strings as literal blocks."""


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_CatalogDumper.add_representer(str, _str_representer)


def render_catalog(entries: list[CatalogEntry], fmt: str = "yaml") -> str:
    if fmt == "yaml":
        return yaml.dump(
            [e.to_dict() for e in entries],
            Dumper=_CatalogDumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    if fmt == "jsonl":
        return "".join(json.dumps(e.to_dict()) + "\n" for e in entries)
    raise ValueError(f"Unsupported catalog format: {fmt}")


def write_catalog(entries: list[CatalogEntry], output_file: Path | str, fmt: str = "yaml") -> str:
    text = render_catalog(entries, fmt)
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding="utf-8")
    logger.info(f"Catalog with {len(entries)} statements written to {output_file}")
    return text

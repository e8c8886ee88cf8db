"""Tests for report serialization and the statement catalog."""

import json

import pytest
import yaml

from sqlaudit.catalog import (
    build_catalog,
    extract_markers,
    parse_sql_query,
    pretty_sql,
    render_catalog,
    write_catalog,
)
from sqlaudit.reporter import build_report, render_report, to_record, write_report
from sqlaudit.scanner import CallFinding, HeredocFinding, MissingVariableFinding, StringFinding


@pytest.fixture
def results():
    return {
        "lib/Users.pl": [
            StringFinding(
                line=2,
                snippet="SELECT id, name FROM users WHERE id = __id__",
                variable="$sql",
                name="sql_2_SELECT",
                statement="SELECT id, name FROM users WHERE id = __id__",
            ),
            StringFinding(line=9, snippet="DELETE FROM t"),
            CallFinding(line=3, verb="prepare", context="$sth = $dbh->prepare($sql);"),
            MissingVariableFinding(variable="$id", used_in_line=4, context="$sth->execute($id)"),
        ],
        "lib/Empty.pl": [],
    }


class TestRecords:
    def test_attributed_literal(self, results):
        assert to_record(results["lib/Users.pl"][0]) == {
            "type": "string",
            "line": 2,
            "variable": "$sql",
            "snippet": "SELECT id, name FROM users WHERE id = __id__",
            "name": "sql_2_SELECT",
        }

    def test_unattributed_literal_has_null_variable_and_no_name(self, results):
        record = to_record(results["lib/Users.pl"][1])
        assert record["variable"] is None
        assert "name" not in record

    def test_heredoc_tag(self):
        record = to_record(HeredocFinding(line=1, snippet="SELECT 1", variable="$q", name="q_1_SELECT"))
        assert record["type"] == "heredoc"

    def test_call_record(self, results):
        assert to_record(results["lib/Users.pl"][2]) == {
            "type": "dbi_call",
            "method": "prepare",
            "line": 3,
            "context": "$sth = $dbh->prepare($sql);",
        }

    def test_missing_variable_record(self, results):
        record = to_record(results["lib/Users.pl"][3])
        assert record["type"] == "missing_variable"
        assert record["variable"] == "$id"
        assert record["used_in_line"] == 4
        assert "no string/heredoc declaration" in record["note"]

    def test_unknown_finding_type_is_rejected(self):
        with pytest.raises(TypeError):
            to_record({"type": "string"})


class TestReport:
    def test_files_without_findings_are_omitted(self, results):
        assert list(build_report(results)) == ["lib/Users.pl"]

    def test_json_round_trip(self, results):
        report = json.loads(render_report(results, "json"))
        assert [r["type"] for r in report["lib/Users.pl"]] == [
            "string",
            "string",
            "dbi_call",
            "missing_variable",
        ]

    def test_yaml_keeps_record_key_order(self, results):
        text = render_report(results, "yaml")
        first = yaml.safe_load(text)["lib/Users.pl"][0]
        assert list(first) == ["type", "line", "variable", "snippet", "name"]

    def test_unsupported_format(self, results):
        with pytest.raises(ValueError):
            render_report(results, "xml")

    def test_write_creates_parent_dirs(self, results, tmp_path):
        out = tmp_path / "nested" / "report.json"
        write_report(results, out)
        assert json.loads(out.read_text(encoding="utf-8"))["lib/Users.pl"][0]["line"] == 2


class TestPrettySql:
    def test_empty(self):
        assert pretty_sql("") == ""
        assert pretty_sql(None) == ""

    def test_clauses_on_own_lines(self):
        sql = "select id,name from users where id = 1 and active = 1 order by name"
        assert pretty_sql(sql) == (
            "SELECT\n"
            "id,\n"
            "name\n"
            "FROM users\n"
            "WHERE id = 1\n"
            "AND active = 1\n"
            "ORDER BY name"
        )

    def test_function_arguments_stay_on_one_column(self):
        result = pretty_sql("SELECT COALESCE(a, b), c FROM t")
        assert "COALESCE(a, b)," in result.splitlines()

    def test_single_column_is_not_split(self):
        assert pretty_sql("SELECT * FROM t") == "SELECT *\nFROM t"


class TestMarkers:
    def test_binds_in_first_appearance_order(self):
        sql, placeholders, binds = extract_markers(
            "UPDATE t SET a = __a__ WHERE id = __id__ AND a <> __a__"
        )
        assert sql == "UPDATE t SET a = ? WHERE id = ? AND a <> ?"
        assert placeholders == {}
        assert binds == ["__a__", "__id__"]

    def test_entity_stays_in_place(self):
        sql, placeholders, binds = extract_markers(
            "SELECT * FROM __ENTITY__.users WHERE id = __id__", entity_value="XY"
        )
        assert sql == "SELECT * FROM __ENTITY__.users WHERE id = ?"
        assert placeholders == {"ENTITY": "XY"}
        assert binds == ["__id__"]


class TestSqlParse:
    def test_select_tables(self):
        assert parse_sql_query("SELECT a FROM users JOIN orders ON 1 = 1") == (
            "SELECT",
            ["users", "orders"],
        )

    def test_insert_table(self):
        command, tables = parse_sql_query("INSERT INTO audit_log (a) VALUES (?)")
        assert command == "INSERT"
        assert tables == ["audit_log"]

    def test_schema_prefix_is_dropped(self):
        assert parse_sql_query("DELETE FROM app.sessions")[1] == ["sessions"]

    def test_unparseable(self):
        assert parse_sql_query("hello there") is None


class TestCatalog:
    def test_only_named_literals(self, results):
        entries = build_catalog(results)
        assert [e.id for e in entries] == ["sql_2_SELECT"]

    def test_entry_contents(self, results):
        entry = build_catalog(results, namespace="user", db="main")[0]
        assert entry.id == "user.sql_2_SELECT"
        assert entry.sql == "SELECT\nid,\nname\nFROM users\nWHERE id = ?"
        assert entry.meta == {
            "db": "main",
            "file": "lib/Users.pl",
            "line": 2,
            "command": "SELECT",
            "tables": ["users"],
            "placeholders": {},
            "bind_values": ["__id__"],
        }

    def test_duplicate_ids_are_suffixed(self):
        finding = StringFinding(line=1, snippet="SELECT 1", variable="$q", name="q_1_SELECT", statement="SELECT 1")
        entries = build_catalog({"a.pl": [finding], "b.pl": [finding]})
        assert [e.id for e in entries] == ["q_1_SELECT", "q_1_SELECT_2"]

    def test_yaml_uses_literal_blocks(self, results):
        text = render_catalog(build_catalog(results), "yaml")
        assert "sql: |" in text
        loaded = yaml.safe_load(text)
        assert loaded[0]["sql"].startswith("SELECT\nid,")
        assert loaded[0]["meta"]["db"] == "rep"

    def test_jsonl_one_entry_per_line(self, results, tmp_path):
        out = tmp_path / "catalog.jsonl"
        write_catalog(build_catalog(results), out, "jsonl")
        lines = out.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["id"] == "sql_2_SELECT"

    def test_unsupported_format(self):
        with pytest.raises(ValueError):
            render_catalog([], "csv")

"""Pytest configuration and fixtures."""

import textwrap
from pathlib import Path

import pytest

from sqlaudit.parsers import parse_perl
from sqlaudit.scanner import DEFAULT_VOCABULARY, scan_source


def perl(code: str) -> bytes:
    """Dedent a Perl snippet and encode it the way files are read."""
    return textwrap.dedent(code).lstrip("\n").encode("utf-8")


@pytest.fixture
def vocabulary():
    return DEFAULT_VOCABULARY


@pytest.fixture
def parse():
    """Parse a Perl snippet into a token arena."""

    def _parse(code: str):
        return parse_perl(perl(code), "test.pl")

    return _parse


@pytest.fixture
def scan():
    """Run the full per-file pipeline over a Perl snippet."""

    def _scan(code: str):
        return scan_source(perl(code), "test.pl")

    return _scan


@pytest.fixture
def perl_project(tmp_path: Path) -> Path:
    """Small Perl tree with one file per interesting shape."""
    lib = tmp_path / "lib"
    lib.mkdir()

    (lib / "Users.pl").write_text(
        perl(
            """
            use strict;
            my $sql = "SELECT id, name FROM users WHERE id = __id__";
            my $sth = $dbh->prepare($sql);
            $sth->execute($id);
            """
        ).decode(),
        encoding="utf-8",
    )
    (lib / "Orders.pl").write_text(
        perl(
            """
            my $rows = $dbh->selectall_arrayref($orders_query);
            """
        ).decode(),
        encoding="utf-8",
    )
    (tmp_path / "plain.pl").write_text('print "hello world\\n";\n', encoding="utf-8")
    (tmp_path / "README.md").write_text("SELECT * FROM nowhere\n", encoding="utf-8")
    return tmp_path

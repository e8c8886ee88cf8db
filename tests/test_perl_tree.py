"""Tests for the tree-sitter backed Perl token arena."""

import pytest

from sqlaudit.exceptions import ParseFailure
from sqlaudit.parsers import DeclarationForm, TokenKind, parse_perl
from sqlaudit.parsers.perl_tree import classify_text, decode_literal


class TestTokenArena:
    """Flattening, navigation and line numbers."""

    def test_tokens_are_indexed_in_source_order(self, parse):
        tree = parse('my $x = "a";\n')
        assert [t.index for t in tree] == list(range(len(tree)))
        contents = [t.content for t in tree]
        assert contents.index("my") < contents.index("$x") < contents.index("=")

    def test_statement_terminator_is_a_token(self, parse):
        tree = parse('my $x = "a";\nmy $y = "b";\n')
        terminators = [t for t in tree if t.content == ";"]
        assert len(terminators) == 2
        assert all(t.kind is TokenKind.DELIMITER for t in terminators)

    def test_previous_and_next_stop_at_edges(self, parse):
        tree = parse("my $x;\n")
        assert tree.previous(0) is None
        assert tree.next(len(tree) - 1) is None
        assert tree.next(0) is tree[1]
        assert tree.previous(1) is tree[0]

    def test_line_numbers_are_one_based(self, parse):
        tree = parse('my $a = 1;\n\nmy $b = "SELECT 1";\n')
        literal = tree.find_all(TokenKind.LITERAL)[0]
        assert literal.line == 3
        assert tree[0].line == 1

    def test_comments_and_pod_are_not_tokens(self, parse):
        tree = parse(
            """
            # SELECT * FROM commented_out
            my $x = 1;

            =pod

            SELECT * FROM documented

            =cut
            """
        )
        assert not any("SELECT" in t.content for t in tree)

    def test_declaration_keywords_are_classified(self, parse):
        tree = parse("my $a; our $b; local $c; state $d; foo $e;\n")
        forms = [t.declaration for t in tree if t.declaration is not None]
        assert forms == [
            DeclarationForm.MY,
            DeclarationForm.OUR,
            DeclarationForm.LOCAL,
            DeclarationForm.STATE,
        ]

    def test_find_all_filters_by_kind(self, parse):
        tree = parse('my $a = "x"; my $b = \'y\';\n')
        literals = tree.find_all(TokenKind.LITERAL)
        assert [t.text for t in literals] == ["x", "y"]
        assert all(t.kind is TokenKind.VARIABLE for t in tree.find_all(TokenKind.VARIABLE))


class TestLiterals:
    """Quoted literal decoding."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('"SELECT 1"', "SELECT 1"),
            ("'SELECT 1'", "SELECT 1"),
            ("q{SELECT 1}", "SELECT 1"),
            ("qq(SELECT $x)", "SELECT $x"),
            ("bare", "bare"),
        ],
    )
    def test_decode_literal(self, raw, expected):
        assert decode_literal(raw) == expected

    def test_literal_keeps_raw_content(self, parse):
        tree = parse('my $sql = "SELECT * FROM t";\n')
        literal = tree.find_all(TokenKind.LITERAL)[0]
        assert literal.content == '"SELECT * FROM t"'
        assert literal.text == "SELECT * FROM t"


class TestHeredocs:
    """Heredoc openers carry their body as the token value."""

    def test_heredoc_body_is_attached(self, parse):
        tree = parse(
            """
            my $q = <<SQL;
            SELECT id
              FROM users
            SQL
            print $q;
            """
        )
        heredocs = tree.find_all(TokenKind.MULTILINE_LITERAL)
        assert len(heredocs) == 1
        assert heredocs[0].line == 1
        assert "SELECT id" in heredocs[0].text
        assert "FROM users" in heredocs[0].text

    def test_heredoc_body_is_not_tokenized(self, parse):
        tree = parse(
            """
            my $q = <<"SQL";
            SELECT $x FROM users
            SQL
            """
        )
        assert not any(t.content == "$x" for t in tree)
        assert "SELECT" not in [t.content for t in tree]

    def test_code_after_heredoc_is_tokenized(self, parse):
        tree = parse(
            """
            my $q = <<SQL;
            DELETE FROM t
            SQL
            my $after = 1;
            """
        )
        after = [t for t in tree if t.content == "$after"]
        assert len(after) == 1
        assert after[0].line == 4


class TestClassification:
    @pytest.mark.parametrize(
        "text, kind",
        [
            (";", TokenKind.DELIMITER),
            ("{", TokenKind.DELIMITER),
            ("prepare", TokenKind.WORD),
            ("DBI::connect", TokenKind.WORD),
            ("$sql", TokenKind.VARIABLE),
            ("=", TokenKind.OPERATOR),
            (".=", TokenKind.OPERATOR),
        ],
    )
    def test_classify_text(self, text, kind):
        assert classify_text(text)[0] is kind

    def test_my_is_a_declaration(self):
        assert classify_text("my") == (TokenKind.WORD, DeclarationForm.MY)


class TestParseFailure:
    def test_binary_content_is_rejected(self):
        with pytest.raises(ParseFailure) as exc_info:
            parse_perl(b"\x7fELF\x00\x00binary", "a.pl")
        assert exc_info.value.path == "a.pl"
        assert exc_info.value.reason == "binary content"

    def test_empty_source_yields_empty_arena(self):
        tree = parse_perl(b"", "empty.pl")
        assert len(tree) == 0

    def test_syntax_errors_still_produce_tokens(self):
        tree = parse_perl(b'my $sql = "SELECT 1";\n)))\n', "broken.pl")
        assert any(t.text == "SELECT 1" for t in tree)

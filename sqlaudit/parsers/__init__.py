"""Source parsers that turn raw file bytes into navigable token arenas."""

from .perl_tree import DeclarationForm, SyntaxTree, Token, TokenKind, parse_perl

__all__ = ["DeclarationForm", "SyntaxTree", "Token", "TokenKind", "parse_perl"]

"""Embedded SQL scanner for Perl source files.

Package Structure:
- vocabulary.py - Keyword sets and compiled patterns (ScanVocabulary)
- models.py - Finding sum type
- literals.py - Literal locator and SQL classifier
- assignment.py - Assignment target resolver over the token arena
- call_sites.py - DBI call-site scanner with context windows
- correlator.py - Drops unattributed literals visible at call sites
- namer.py - <var>_<line>_<VERB> names
- missing.py - Variables used at call sites without an in-file declaration
- file_scanner.py - The per-file pipeline
"""

from .file_scanner import scan_source, scan_tree
from .models import (
    CallFinding,
    Finding,
    HeredocFinding,
    MissingVariableFinding,
    StringFinding,
)
from .vocabulary import DEFAULT_VOCABULARY, ScanVocabulary

__all__ = [
    "CallFinding",
    "DEFAULT_VOCABULARY",
    "Finding",
    "HeredocFinding",
    "MissingVariableFinding",
    "ScanVocabulary",
    "StringFinding",
    "scan_source",
    "scan_tree",
]

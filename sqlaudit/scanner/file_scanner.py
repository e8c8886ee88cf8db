"""Single-pass scan of one Perl file.

locate literals -> classify -> resolve assignment -> scan call sites ->
correlate -> name -> detect missing declarations.
"""

from sqlaudit.parsers.perl_tree import SyntaxTree, parse_perl
from sqlaudit.utils.logging import logger

from .call_sites import scan_call_sites
from .correlator import deduplicate
from .literals import locate_sql_literals
from .missing import detect_missing
from .models import Finding
from .namer import name_findings
from .vocabulary import DEFAULT_VOCABULARY, ScanVocabulary


def scan_tree(
    content: str, tree: SyntaxTree, vocabulary: ScanVocabulary = DEFAULT_VOCABULARY
) -> list[Finding]:
    """Pure function from (raw text, token arena) to the file's findings."""
    found: list[Finding] = []
    found.extend(locate_sql_literals(tree, vocabulary))
    found.extend(scan_call_sites(content, vocabulary))

    filtered = name_findings(deduplicate(found), vocabulary)
    missing = detect_missing(filtered, vocabulary)

    if missing:
        logger.debug(f"{len(missing)} undeclared variables at DBI call sites")
    return filtered + missing


def scan_source(
    source: bytes, path: str = "", vocabulary: ScanVocabulary = DEFAULT_VOCABULARY
) -> list[Finding]:
    """Parse and scan raw file bytes.

    Raises:
        ParseFailure: the source could not be parsed
    """
    tree = parse_perl(source, path)
    content = source.decode("utf-8", errors="replace")
    findings = scan_tree(content, tree, vocabulary)
    logger.debug(f"{path or '<memory>'}: {len(tree)} tokens, {len(findings)} findings")
    return findings

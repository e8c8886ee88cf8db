"""Stable names for attributed findings: <var>_<line>_<VERB>."""

import re

from .models import Finding, HeredocFinding, StringFinding
from .vocabulary import ScanVocabulary

_SIGILS_RE = re.compile(r"^[$@%&]+")
_BRACES_RE = re.compile(r"^\{(.*)\}$")


def bare_variable(variable: str) -> str:
    """'$sql' -> 'sql', '${sql}' -> 'sql'."""
    return _BRACES_RE.sub(r"\1", _SIGILS_RE.sub("", variable))


def sql_verb(text: str, vocabulary: ScanVocabulary) -> str:
    """First statement verb in text order, or UNKNOWN."""
    match = vocabulary.name_verb_re.search(text or "")
    return match.group(1).upper() if match else "UNKNOWN"


def synthesize_name(variable: str, line: int | None, text: str, vocabulary: ScanVocabulary) -> str:
    line_part = line if line is not None else "?"
    return f"{bare_variable(variable)}_{line_part}_{sql_verb(text, vocabulary)}"


def name_findings(findings: list[Finding], vocabulary: ScanVocabulary) -> list[Finding]:
    named = []
    for finding in findings:
        if isinstance(finding, (StringFinding, HeredocFinding)) and finding.variable is not None:
            finding = finding.with_name(
                synthesize_name(finding.variable, finding.line, finding.snippet, vocabulary)
            )
        named.append(finding)
    return named

"""Correlator: drop unattributed literals already visible at a call site.

A literal passed inline to a DBI call shows up twice, once as a literal and
once inside the call's context window. Only the unattributed copy is dropped;
a literal bound to a variable is always kept next to the call finding.
"""

import re

from .models import CallFinding, Finding, HeredocFinding, StringFinding

_QUOTED_RE = re.compile(r"'([^']*)'|\"([^\"]*)\"")
_LEADING_WRAP_RE = re.compile(r"^[(\[\"']+")
_TRAILING_WRAP_RE = re.compile(r"[)\]\"']+$")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_for_match(text: str | None) -> str:
    """Trim, collapse whitespace, lowercase and strip wrapping brackets/quotes."""
    if text is None:
        return ""
    text = _WHITESPACE_RE.sub(" ", text.strip()).lower()
    text = _LEADING_WRAP_RE.sub("", text)
    return _TRAILING_WRAP_RE.sub("", text)


def quoted_literals(context: str) -> list[str]:
    """Quoted substrings ('...' or "...") of a call context."""
    literals = []
    for match in _QUOTED_RE.finditer(context):
        literal = match.group(1) if match.group(1) is not None else match.group(2)
        if literal:
            literals.append(literal)
    return literals


def deduplicate(findings: list[Finding]) -> list[Finding]:
    """Filter findings, keeping order."""
    contexts = [f.context for f in findings if isinstance(f, CallFinding) and f.context]
    call_literals = {normalize_for_match(lit) for ctx in contexts for lit in quoted_literals(ctx)}
    lowered_contexts = [ctx.lower() for ctx in contexts]

    kept = []
    for finding in findings:
        if isinstance(finding, (StringFinding, HeredocFinding)) and finding.variable is None:
            normalized = normalize_for_match(finding.snippet)
            if normalized and normalized in call_literals:
                continue
            needle = finding.snippet.lower()
            if any(needle in ctx for ctx in lowered_contexts):
                continue
        kept.append(finding)
    return kept

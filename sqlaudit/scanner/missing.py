"""Missing-declaration detector.

Precision over recall: a variable declared through an idiom the resolver
does not recognize is reported as missing. The signal is a hint, not proof.
"""

import re

from .models import CallFinding, Finding, HeredocFinding, MissingVariableFinding, StringFinding
from .vocabulary import ScanVocabulary

# (?!\w) pins the whole identifier so (?!::) cannot be dodged by backtracking
VARIABLE_RE = re.compile(r"\$[A-Za-z_]\w*(?!\w)(?!::)")


def declared_variables(findings: list[Finding]) -> set[str]:
    return {
        f.variable
        for f in findings
        if isinstance(f, (StringFinding, HeredocFinding)) and f.variable is not None
    }


def detect_missing(findings: list[Finding], vocabulary: ScanVocabulary) -> list[MissingVariableFinding]:
    """One finding per undeclared variable per file, in call order."""
    declared = declared_variables(findings)
    seen: set[str] = set()
    missing = []

    for finding in findings:
        if not isinstance(finding, CallFinding) or not finding.context:
            continue
        for match in VARIABLE_RE.finditer(finding.context):
            variable = match.group(0)
            if variable in vocabulary.ignore_variables or variable in declared or variable in seen:
                continue
            seen.add(variable)
            missing.append(
                MissingVariableFinding(
                    variable=variable,
                    used_in_line=finding.line,
                    context=finding.context,
                )
            )
    return missing

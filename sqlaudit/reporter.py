"""Serialize scan results as JSON or YAML.

Record layout per finding type:

    string / heredoc:  type, line, variable, snippet[, name]
    dbi_call:          type, method, line, context
    missing_variable:  type, variable, used_in_line, context, note
"""

import json
from pathlib import Path
from typing import Any

import yaml

from sqlaudit.scanner.models import (
    CallFinding,
    Finding,
    HeredocFinding,
    MissingVariableFinding,
    StringFinding,
)
from sqlaudit.utils.logging import logger

FORMATS = ("json", "yaml")


def to_record(finding: Finding) -> dict[str, Any]:
    """Convert one finding to its serializable record."""
    if isinstance(finding, (StringFinding, HeredocFinding)):
        record = {
            "type": finding.type_tag,
            "line": finding.line,
            "variable": finding.variable,
            "snippet": finding.snippet,
        }
        if finding.name is not None:
            record["name"] = finding.name
        return record
    if isinstance(finding, CallFinding):
        return {
            "type": finding.type_tag,
            "method": finding.verb,
            "line": finding.line,
            "context": finding.context,
        }
    if isinstance(finding, MissingVariableFinding):
        return {
            "type": finding.type_tag,
            "variable": finding.variable,
            "used_in_line": finding.used_in_line,
            "context": finding.context,
            "note": finding.note,
        }
    raise TypeError(f"Unknown finding type: {type(finding).__name__}")


def build_report(results: dict[str, list[Finding]]) -> dict[str, list[dict[str, Any]]]:
    """Path -> records, leaving out files without findings."""
    return {
        path: [to_record(f) for f in findings] for path, findings in results.items() if findings
    }


def render_report(results: dict[str, list[Finding]], fmt: str = "json") -> str:
    report = build_report(results)
    if fmt == "json":
        return json.dumps(report, indent=2) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(report, sort_keys=False, allow_unicode=True, width=120)
    raise ValueError(f"Unsupported report format: {fmt}")


def write_report(results: dict[str, list[Finding]], output_file: Path | str, fmt: str = "json") -> str:
    """Render and write the report, creating parent directories."""
    text = render_report(results, fmt)
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(text, encoding="utf-8")
    logger.info(f"Report written to {output_file}")
    return text

"""Central UI handler for sqlaudit.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from sqlaudit.ui import console, summary_table

    console.print("[success]Report written[/success]")
    console.print(summary_table(run.get_summary_stats()))
"""

import sys

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

AUDIT_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

console = Console(
    theme=AUDIT_THEME,
    force_terminal=sys.stdout.isatty()
)

err_console = Console(theme=AUDIT_THEME, stderr=True)

TYPE_LABELS = {
    "string": "SQL strings",
    "heredoc": "SQL heredocs",
    "dbi_call": "DBI calls",
    "missing_variable": "Undeclared variables",
}


def summary_table(stats: dict) -> Table:
    """Rich table of per-type finding counts from ScanRun.get_summary_stats()."""
    table = Table(title="SQL inventory", show_header=True, header_style="bold")
    table.add_column("Finding type")
    table.add_column("Count", justify="right")

    for type_tag, label in TYPE_LABELS.items():
        table.add_row(label, str(stats["by_type"].get(type_tag, 0)))

    table.add_section()
    table.add_row("Files scanned", str(stats["files_scanned"]))
    table.add_row("Files with findings", str(stats["files_with_findings"]))
    table.add_row("Files skipped", str(stats["files_skipped"]))
    return table

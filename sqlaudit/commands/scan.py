"""Inventory embedded SQL, DBI call sites and undeclared SQL variables."""

import sys
from pathlib import Path

import click

from sqlaudit.reporter import FORMATS
from sqlaudit.utils.error_handler import handle_exceptions
from sqlaudit.utils.exit_codes import ExitCodes


@click.command("scan")
@handle_exceptions
@click.argument("root", default=".", type=click.Path(exists=True, file_okay=True, dir_okay=True))
@click.option("--out", default=None, help="Report file path (default: .sqlaudit/sql_report.json)")
@click.option(
    "--format", "fmt", type=click.Choice(FORMATS), default="json", help="Report format"
)
@click.option("--exclude", multiple=True, help="Glob of root-relative paths to skip")
@click.option("--workers", default=None, type=int, help="Number of scan worker threads")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the report instead of writing it")
@click.option("--print-stats", is_flag=True, help="Print summary statistics")
@click.option(
    "--fail-on-missing", is_flag=True, help="Exit 1 when undeclared SQL variables are found"
)
@click.option("--log-dir", default=None, help="Also write a rotating log file to this directory")
def scan(root, out, fmt, exclude, workers, to_stdout, print_stats, fail_on_missing, log_dir):
    """Scan Perl sources for embedded SQL.

    Every string or heredoc that reads like SQL is reported with the
    variable it is assigned to. DBI method calls (prepare, do, execute,
    selectall_arrayref, ...) are reported with a window of surrounding
    text. Variables passed to those calls that never receive a SQL
    literal in the same file are flagged as missing declarations.

    Examples:
      sqlaudit scan                         # Scan current directory
      sqlaudit scan lib/ --format yaml      # YAML report
      sqlaudit scan . --exclude "t/*"       # Skip test scripts
      sqlaudit scan . --stdout | jq .       # Pipe the JSON report

    Output:
      .sqlaudit/sql_report.json   # {path: [finding, ...]}

    Finding types:
      string / heredoc   SQL literal (name = <var>_<line>_<VERB> when assigned)
      dbi_call           DBI method call with context
      missing_variable   Variable used in a call without an in-file declaration"""
    from sqlaudit.config_runtime import load_runtime_config
    from sqlaudit.reporter import render_report, write_report
    from sqlaudit.runner import run_scan
    from sqlaudit.ui import console, err_console, summary_table
    from sqlaudit.utils.logging import configure_file_logging

    root_path = Path(root).resolve()
    config = load_runtime_config(str(root_path if root_path.is_dir() else root_path.parent))

    if log_dir:
        configure_file_logging(Path(log_dir))

    run = run_scan(
        root_path,
        config=config,
        exclude_patterns=list(exclude),
        max_workers=workers,
    )

    if to_stdout:
        click.echo(render_report(run.results, fmt), nl=False)
    else:
        if out is None:
            out = config["paths"]["report"]
            if fmt == "yaml":
                out = str(Path(out).with_suffix(".yml"))
        write_report(run.results, out, fmt)
        console.print(f"[success]SQL report saved to {out}[/success]", highlight=False)

    # Keep stdout clean for the piped report
    out_console = err_console if to_stdout else console

    if print_stats or not to_stdout:
        out_console.print(summary_table(run.get_summary_stats()))

    for skipped in run.skipped:
        out_console.print(
            f"[warning]Skipped {skipped['path']}: {skipped['reason']}[/warning]", highlight=False
        )

    exit_code = ExitCodes.SUCCESS
    if run.files_scanned == 0 and run.skipped:
        exit_code = ExitCodes.TASK_INCOMPLETE
    elif fail_on_missing and run.has_missing_declarations:
        exit_code = ExitCodes.MISSING_DECLARATIONS

    if exit_code != ExitCodes.SUCCESS:
        err_console.print(f"[error]{ExitCodes.get_description(exit_code)}[/error]", highlight=False)
        sys.exit(exit_code)

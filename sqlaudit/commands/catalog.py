"""Export named SQL statements as a catalog for the runtime statement store."""

from pathlib import Path

import click

from sqlaudit.catalog import FORMATS
from sqlaudit.utils.error_handler import handle_exceptions


@click.command("catalog")
@handle_exceptions
@click.argument("root", default=".", type=click.Path(exists=True, file_okay=True, dir_okay=True))
@click.option("--out", default=None, help="Catalog file path (default: .sqlaudit/sql_catalog.yml)")
@click.option(
    "--format", "fmt", type=click.Choice(FORMATS), default="yaml", help="Catalog format"
)
@click.option("--namespace", default=None, help="Prefix for statement ids (e.g. 'user')")
@click.option("--db", default=None, help="Database alias recorded in each entry's meta")
@click.option("--exclude", multiple=True, help="Glob of root-relative paths to skip")
@click.option("--workers", default=None, type=int, help="Number of scan worker threads")
def catalog(root, out, fmt, namespace, db, exclude, workers):
    """Write every named SQL literal as a loadable statement catalog.

    Only literals assigned to a variable get a name (<var>_<line>_<VERB>)
    and therefore a catalog entry. The SQL is reflowed one clause per
    line; __marker__ slots become '?' binds listed under meta.bind_values,
    except __ENTITY__ which stays as an identifier placeholder.

    Examples:
      sqlaudit catalog                              # YAML catalog of cwd
      sqlaudit catalog lib/ --namespace user        # ids like user.sql_12_SELECT
      sqlaudit catalog . --format jsonl --out q.jsonl

    Output:
      .sqlaudit/sql_catalog.yml"""
    from sqlaudit.catalog import build_catalog, write_catalog
    from sqlaudit.config_runtime import load_runtime_config
    from sqlaudit.runner import run_scan
    from sqlaudit.ui import console

    root_path = Path(root).resolve()
    config = load_runtime_config(str(root_path if root_path.is_dir() else root_path.parent))

    run = run_scan(root_path, config=config, exclude_patterns=list(exclude), max_workers=workers)

    entries = build_catalog(
        run.results,
        namespace=namespace,
        db=db or config["catalog"]["db"],
        entity_value=config["catalog"]["entity_value"],
    )

    if out is None:
        out = config["paths"]["catalog"]
        if fmt == "jsonl":
            out = str(Path(out).with_suffix(".jsonl"))
    write_catalog(entries, out, fmt)

    console.print(
        f"[success]{len(entries)} statements from {len(run.results)} files saved to {out}[/success]",
        highlight=False,
    )

"""Click-based CLI for metastock-catalog.

Thin wrapper around the Extractor. Zero business logic; every operation
delegates to catalog, output, or sources modules.
"""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from metastock_catalog.core import ConfigurationError, load_config

        try:
            ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
        except ConfigurationError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise SystemExit(1)
    return ctx.obj["config"]


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _build_extractor(config, decoders_path: str | None, separator: str | None):
    """Resolve the decoder set and create an Extractor."""
    from metastock_catalog.core import ConfigurationError
    from metastock_catalog.extractor import Extractor
    from metastock_catalog.output import FieldSelection
    from metastock_catalog.sources import load_decoder_set

    path = decoders_path or config.decoders.factory
    if not path:
        console.print(
            "[red]No decoders configured. Use --decoders package.module:attribute "
            "or set decoders.factory in the config file.[/red]"
        )
        raise SystemExit(1)
    try:
        decoders = load_decoder_set(path)
        selection = FieldSelection(separator=separator or config.output.separator)
    except ConfigurationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)
    return Extractor(decoders, selection)


def _check(extractor, ok: bool) -> None:
    if not ok:
        console.print(f"[red]{escape(extractor.last_error)}[/red]")
        raise SystemExit(1)


def _apply_filters(extractor, config, file_number, older_than, newer_than) -> None:
    file_number = file_number if file_number is not None else config.filters.file_number
    older_than = older_than or config.filters.exclude_older_than
    newer_than = newer_than or config.filters.exclude_newer_than

    if file_number is not None:
        _check(extractor, extractor.select_only(file_number))
    if older_than:
        _check(extractor, extractor.exclude_by_age(older_than))
    if newer_than:
        _check(extractor, extractor.exclude_by_age(newer_than, reverse=True))


_REPORT_OPTIONS = (
    click.argument("directory", type=click.Path(exists=True, file_okay=False)),
    click.option(
        "--format",
        "-f",
        "fmt",
        type=str,
        default=None,
        help="Field list (e.g. 'symbol,date,close' or '+all,-long_name') or bitset.",
    ),
    click.option("--separator", "-s", type=str, default=None, help="Field separator."),
    click.option("--header/--no-header", default=None, help="Print a header line."),
    click.option(
        "--file-number",
        "-n",
        type=click.IntRange(1, 65535),
        default=None,
        help="Only report F<n>.",
    ),
    click.option(
        "--exclude-older-than",
        type=str,
        default=None,
        help="Skip data files modified before this date/time.",
    ),
    click.option(
        "--exclude-newer-than",
        type=str,
        default=None,
        help="Skip data files modified at or after this date/time.",
    ),
    click.option(
        "--decoders",
        type=str,
        default=None,
        help="Decoder set as package.module:attribute.",
    ),
    click.option(
        "--output",
        "-o",
        type=click.File("w"),
        default="-",
        help="Output file (default: stdout).",
    ),
)


def report_options(func):
    """Attach the options shared by the report commands."""
    for decorator in reversed(_REPORT_OPTIONS):
        func = decorator(func)
    return func


def _run_report(ctx: click.Context, mode_name: str, **opts) -> None:
    from metastock_catalog.core import ReportMode

    config = _load_config(ctx)
    mode = ReportMode(mode_name)
    extractor = _build_extractor(config, opts["decoders"], opts["separator"])

    _check(extractor, extractor.open_directory(opts["directory"]))
    fmt = opts["fmt"] if opts["fmt"] is not None else config.output.format
    _check(extractor, extractor.set_output_format(fmt, mode))
    _apply_filters(
        extractor,
        config,
        opts["file_number"],
        opts["exclude_older_than"],
        opts["exclude_newer_than"],
    )

    header = opts["header"] if opts["header"] is not None else config.output.header
    out = opts["output"]
    if mode is ReportMode.CATALOG:
        _check(extractor, extractor.dump_catalog(out, header))
    else:
        _check(extractor, extractor.dump_data(out, header))
    out.flush()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="METASTOCK_CATALOG_CONFIG",
    default=None,
    help="Path to metastock-catalog.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="metastock-catalog")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """MetaStock catalog: extract symbols and quotes from MetaStock directories."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    level = "DEBUG" if verbose else _load_config(ctx).logging.level
    _setup_logging(level)


# ---------------------------------------------------------------------------
# symbols
# ---------------------------------------------------------------------------


@cli.command()
@report_options
@click.pass_context
def symbols(ctx: click.Context, **opts) -> None:
    """Print one line of catalog fields per data file."""
    _run_report(ctx, "catalog", **opts)


# ---------------------------------------------------------------------------
# data
# ---------------------------------------------------------------------------


@cli.command()
@report_options
@click.pass_context
def data(ctx: click.Context, **opts) -> None:
    """Print quote rows of every data file, prefixed by catalog fields."""
    _run_report(ctx, "combined", **opts)


# ---------------------------------------------------------------------------
# scan
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--decoders",
    type=str,
    default=None,
    help="Decoder set as package.module:attribute.",
)
@click.pass_context
def scan(ctx: click.Context, directory: str, decoders: str | None) -> None:
    """Show index files, record counts, and catalog coverage."""
    from metastock_catalog.core import IndexKind

    config = _load_config(ctx)
    extractor = _build_extractor(config, decoders, None)
    _check(extractor, extractor.open_directory(directory))

    listing = extractor.directory.listing
    counts = extractor.index_counts
    catalog = extractor.catalog

    table = Table(title=f"MetaStock directory {escape(directory)}")
    table.add_column("Item", style="bold")
    table.add_column("Value", justify="right")

    for kind in IndexKind:
        name = listing.index_files.get(kind, "missing")
        count = counts.get(kind)
        table.add_row(kind.file_name, name if count is None else f"{name} ({count} records)")
    table.add_section()
    table.add_row("Quote files", str(len(listing.quote_files)))
    table.add_row("Catalog entries", str(sum(1 for _ in catalog.entries())))
    table.add_row(
        "Entries without data",
        str(sum(1 for e in catalog.entries() if not e.quote_file_name)),
    )
    table.add_row("Highest file number", f"F{catalog.highest_identifier_seen}")

    console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    sys.exit(main())

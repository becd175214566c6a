"""
Command-line interface for PLW Recovery.

Usage:
    python -m plw_recovery info /path/to/log.plw
    python -m plw_recovery decode /path/to/log.plw --head 10
    python -m plw_recovery validate /path/to/log.plw
"""

import logging
from pathlib import Path

import typer

from .decoder import decode_file, read_header, validate_file
from .errors import PLWError
from .header import HEADER_LAYOUT, MIN_FORMAT_VERSION
from .models import SAMPLING_UNITS

app = typer.Typer(
    name="plw-recovery",
    help="Recover time-series data from truncated or corrupted PLW logger files",
    add_completion=False,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(error: Exception) -> None:
    typer.echo(typer.style(f"ERROR: {error}", fg=typer.colors.RED), err=True)
    typer.echo("PLW Import Failed.", err=True)
    raise typer.Exit(1)


def _plw_file(help_text: str):
    return typer.Argument(
        ...,
        help=help_text,
        exists=True,
        dir_okay=False,
        file_okay=True,
    )


@app.command()
def info(
    plw_file: Path = _plw_file("Path to the PLW file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every header field"),
):
    """
    Print the header summary without decoding the data section.
    """
    _configure_logging(verbose)
    try:
        header = read_header(plw_file)
    except (PLWError, OSError) as e:
        _fail(e)
    typer.echo(header.summary(plw_file.name))


@app.command()
def decode(
    plw_file: Path = _plw_file("Path to the PLW file"),
    head: int = typer.Option(
        0,
        "--head", "-n",
        min=0,
        help="Print the first N recovered rows",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print verbose output"),
):
    """
    Decode the file and report how much data could be recovered.
    """
    _configure_logging(verbose)
    try:
        log = decode_file(plw_file)
    except (PLWError, OSError) as e:
        _fail(e)

    typer.echo(log.summary())
    typer.echo(f"Recovered Records: {log.rows_produced}")
    if log.stats.is_set:
        typer.echo(f"Sample Range: {log.minimum_sample} .. {log.maximum_sample}")
    if log.rows_produced < log.valid_record_count:
        missing = log.valid_record_count - log.rows_produced
        typer.echo(typer.style(
            f"WARNING: file ends {missing} records short of the declared count",
            fg=typer.colors.YELLOW,
        ))
    if head:
        typer.echo(log.table.head(head).to_string(index=False))
    typer.echo("PLW Import Finished.")


@app.command()
def validate(
    plw_file: Path = _plw_file("Path to the PLW file to validate"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print verbose output"),
):
    """
    Validate a PLW file's header against its size on disk.

    Checks that the header is readable and supported, and compares the
    declared record count with the complete records actually present.
    """
    _configure_logging(verbose)
    typer.echo(f"Validating: {plw_file}")

    results = validate_file(plw_file)

    header = results["header"]
    if header is not None:
        typer.echo(f"  Version {header.format_version}, {header.channel_count} channels, "
                   f"{header.record_size} bytes/record")
        typer.echo(f"  Declared records: {header.valid_record_count} "
                   f"(A={header.sample_count_primary}, B={header.sample_count_secondary})")
        typer.echo(f"  Complete records on disk: {results['physical_records']}")

    for warning in results["warnings"]:
        typer.echo(typer.style(f"  WARNING: {warning}", fg=typer.colors.YELLOW))

    for error in results["errors"]:
        typer.echo(typer.style(f"  ERROR: {error}", fg=typer.colors.RED))

    if results["valid"]:
        typer.echo(typer.style("Validation passed", fg=typer.colors.GREEN))
    else:
        typer.echo(typer.style("Validation failed", fg=typer.colors.RED))
        raise typer.Exit(1)


@app.command()
def units():
    """
    Display PLW format information.
    """
    typer.echo(f"Header fields (little-endian, version >= {MIN_FORMAT_VERSION}):")
    for field in HEADER_LAYOUT:
        kind = "uint16" if field.width == 2 else "uint32"
        typer.echo(f"  {field.offset:>4}  {kind:<6}  {field.label}")
    typer.echo("")
    typer.echo("Records (from header size offset):")
    typer.echo("  Format: <i Nf (int32 time marker, N float32 samples)")
    typer.echo("")
    typer.echo("Sampling units:")
    for unit in SAMPLING_UNITS:
        typer.echo(f"  {unit.header_index}={unit.value} ({unit.seconds:g} s)")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""fastld command-line interface.

This module provides a Typer-based CLI with two commands. ``r2`` takes one
positional input path, writes the report to stdout (or -o), and exits
with code 1 on any fatal error. ``compare`` checks a report against a
reference report within tolerances.
"""

import sys
import time
from pathlib import Path
from typing import Annotated

import typer

import fastld
from fastld.core.config import DEFAULT_MAX_DISTANCE, DEFAULT_MIN_R2, MALFORMED_POLICIES
from fastld.pipeline import PipelineConfig, PipelineRunner
from fastld.utils import setup_logging, write_run_log
from fastld.validation import ToleranceConfig, compare_ld_report_files

TOLERANCE_PRESETS = {
    "default": ToleranceConfig,
    "strict": ToleranceConfig.strict,
    "relaxed": ToleranceConfig.relaxed,
}

# Create Typer app
app = typer.Typer(
    name="fastld",
    help=(
        "fastld: haplotype linkage disequilibrium (r², D, D') from phased VCFs.\n\n"
        "Scan with: fastld r2 INPUT"
    ),
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"fastld version {fastld.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Verbose output"),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Write DEBUG logs as JSON to this file"),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """fastld: fast haplotype-based linkage disequilibrium.

    Streams a phased VCF once and reports variant pairs on the same
    chromosome whose r² passes a threshold. The input path follows the
    command name (`fastld r2 INPUT`); there is no bare `fastld INPUT` form.
    """
    setup_logging(verbose=verbose, log_file=log_file)


@app.command("r2")
def r2_command(
    input_path: Annotated[
        str,
        typer.Argument(
            help="Phased VCF path, '-' for stdin, or a .gz/.bgz path",
            metavar="INPUT",
        ),
    ],
    max_distance: Annotated[
        int,
        typer.Option("--max-distance", help="Maximum pair distance in bp"),
    ] = DEFAULT_MAX_DISTANCE,
    min_r2: Annotated[
        float,
        typer.Option("--min-r2", help="Minimum r² for a pair to be reported"),
    ] = DEFAULT_MIN_R2,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Report file (default: stdout)"),
    ] = None,
    on_malformed: Annotated[
        str,
        typer.Option(
            "--on-malformed",
            help="Malformed record handling: 'fail' aborts, 'skip' logs and continues",
        ),
    ] = "fail",
    check_order: Annotated[
        bool,
        typer.Option(
            "--check-order/--no-check-order",
            help="Fail on input not sorted by position (default: enabled)",
        ),
    ] = True,
    header: Annotated[
        bool,
        typer.Option("--header/--no-header", help="Write a column header line"),
    ] = False,
    progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Show a progress counter"),
    ] = False,
) -> None:
    """Compute haplotype r², D and D' for nearby variant pairs.

    Writes one tab-separated line per pair with r² >= --min-r2:
    chromosome, position 1, position 2, haplotype count, r², D, D'.
    """
    start_time = time.perf_counter()

    # Validate options
    if on_malformed not in MALFORMED_POLICIES:
        typer.echo(
            f"Error: --on-malformed must be one of {', '.join(MALFORMED_POLICIES)} "
            f"(got {on_malformed})",
            err=True,
        )
        raise typer.Exit(code=1)

    config = PipelineConfig(
        input_path=input_path,
        output_path=output,
        max_distance=max_distance,
        min_r2=min_r2,
        on_malformed=on_malformed,
        check_order=check_order,
        header=header,
        show_progress=progress,
    )

    try:
        result = PipelineRunner(config).run()
    except (ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    if output is None:
        return

    typer.echo(f"LD report written to {output}", err=True)

    # Write log file
    params = {
        "input": input_path,
        "output": str(output),
        "max_distance": max_distance,
        "min_r2": min_r2,
        "on_malformed": on_malformed,
        "check_order": check_order,
        **result.summary(),
    }
    timing = {"total": time.perf_counter() - start_time}
    log_path = write_run_log(output, params, timing, " ".join(sys.argv))
    typer.echo(f"Log written to {log_path}", err=True)


@app.command("compare")
def compare_command(
    actual: Annotated[
        Path,
        typer.Argument(help="LD report to check", metavar="ACTUAL"),
    ],
    expected: Annotated[
        Path,
        typer.Argument(help="Reference LD report", metavar="EXPECTED"),
    ],
    tolerance: Annotated[
        str,
        typer.Option(
            "--tolerance",
            help="Tolerance preset: 'default', 'strict' (exact) or 'relaxed'",
        ),
    ] = "default",
) -> None:
    """Compare two LD reports pair by pair.

    Pairs are matched on chromosome and positions. Exits with code 1 if
    any pair is missing or unexpected, or a statistic is out of tolerance.
    """
    if tolerance not in TOLERANCE_PRESETS:
        typer.echo(
            f"Error: --tolerance must be one of {', '.join(TOLERANCE_PRESETS)} "
            f"(got {tolerance})",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        result = compare_ld_report_files(
            actual, expected, TOLERANCE_PRESETS[tolerance]()
        )
    except (ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(result.message)
    if not result.passed:
        for chromosome, anchor, partner in result.missing[:10]:
            typer.echo(f"  missing: {chromosome}:{anchor}-{partner}", err=True)
        for chromosome, anchor, partner in result.unexpected[:10]:
            typer.echo(f"  unexpected: {chromosome}:{anchor}-{partner}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

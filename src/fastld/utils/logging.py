"""Logging utilities for fastld.

This module provides loguru-based logging configuration and the
"##"-prefixed run log written next to report files.
"""

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

import fastld


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure loguru for fastld.

    Sets up console logging on stderr with INFO level (or DEBUG if
    verbose), and optional file logging with JSON serialization.

    Args:
        verbose: If True, set console logging to DEBUG level.
        log_file: Optional path to log file. If provided, DEBUG-level
            logs are written with JSON serialization.
    """
    # Remove default handler
    logger.remove()

    # Console handler on stderr; stdout carries the LD report
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        level=level,
        format="{time:HH:mm:ss} | <level>{level: <8}</level> | {message}",
        colorize=True,
    )

    # File handler with JSON (DEBUG level)
    if log_file:
        logger.add(
            log_file,
            serialize=True,
            level="DEBUG",
        )


def run_log_path(output_path: Path) -> Path:
    """Path of the run log for a report file: <output>.log.txt"""
    output_path = Path(output_path)
    return output_path.with_name(output_path.name + ".log.txt")


def write_run_log(
    output_path: Path,
    params: dict,
    timing: dict,
    command_line: str,
) -> Path:
    """Write a run log next to a report file.

    Args:
        output_path: Path of the LD report; the log goes to
            <output_path>.log.txt.
        params: Dictionary of parameters and counts to log.
        timing: Dictionary of timing information in seconds.
        command_line: The command line used to invoke the program.

    Returns:
        Path to the written log file.

    Example output format:
        ##
        ## fastld Version = 0.1.0
        ## Date = 2026-01-31T10:30:00
        ##
        ## Command Line Input = fastld r2 chr22.vcf.gz -o chr22.ld.txt
        ##
        ## Summary Statistics:
        ## n_samples = 2504
        ## n_variants = 1055454
        ##
        ## Computation Time:
        ## total time = 81.23 seconds
        ##
    """
    log_path = run_log_path(output_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    with open(log_path, "w") as f:
        # Header
        f.write("##\n")
        f.write(f"## fastld Version = {fastld.__version__}\n")
        f.write(f"## Date = {datetime.now().isoformat()}\n")
        f.write("##\n")

        # Command line
        f.write(f"## Command Line Input = {command_line}\n")
        f.write("##\n")

        # Parameters
        f.write("## Summary Statistics:\n")
        for key, value in params.items():
            f.write(f"## {key} = {value}\n")
        f.write("##\n")

        # Timing
        f.write("## Computation Time:\n")
        for key, value in timing.items():
            if isinstance(value, float):
                f.write(f"## {key} time = {value:.2f} seconds\n")
            else:
                f.write(f"## {key} time = {value} seconds\n")
        f.write("##\n")

    return log_path


def log_rss_memory(phase: str, checkpoint: str) -> float:
    """Log current RSS memory usage with phase context.

    Uses loguru's bind() for structured logging so memory readings
    can be filtered/searched by phase and checkpoint.

    Args:
        phase: Workflow phase name (e.g., "scan")
        checkpoint: Checkpoint within phase (e.g., "start", "end")

    Returns:
        Current RSS in GB (for chaining/testing).

    Example:
        >>> log_rss_memory("scan", "end")
        DEBUG    | RSS memory: 0.12GB (phase=scan, checkpoint=end)
    """
    import psutil

    rss_gb = psutil.Process().memory_info().rss / 1e9
    logger.bind(phase=phase, checkpoint=checkpoint).debug(
        f"RSS memory: {rss_gb:.2f}GB (phase={phase}, checkpoint={checkpoint})"
    )
    return rss_gb

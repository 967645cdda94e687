"""Top-level r² API for fastld.

Provides single-call entry points for a complete LD scan:

- compute_r2: scan a VCF and write the report (file or stdout)
- iter_ld_pairs: scan a VCF and yield reported pairs as PairStatistics

Example:
    >>> from fastld import compute_r2
    >>> result = compute_r2("data/chr22.vcf.gz", output_path="chr22.ld.txt")
    >>> print(f"{result.n_pairs_reported} pairs, {result.timing['total_s']:.1f}s")
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from fastld.core.config import DEFAULT_MAX_DISTANCE, DEFAULT_MIN_R2
from fastld.ld.stats import PairStatistic
from fastld.pipeline import PipelineConfig, PipelineRunner


@dataclass
class R2Result:
    """Result of an r² scan.

    Attributes:
        n_samples: Samples in the VCF header.
        n_variants: Variants scanned.
        n_pairs_tested: Pairs within the window.
        n_pairs_reported: Pairs written to the output.
        output_path: Report path, or None when written to a stream.
        timing: Timing breakdown with key 'total_s'.
    """

    n_samples: int
    n_variants: int
    n_pairs_tested: int
    n_pairs_reported: int
    output_path: Path | None = None
    timing: dict[str, float] = field(default_factory=dict)


def compute_r2(
    input_path: str | Path,
    *,
    output_path: str | Path | None = None,
    max_distance: int = DEFAULT_MAX_DISTANCE,
    min_r2: float = DEFAULT_MIN_R2,
    on_malformed: str = "fail",
    check_order: bool = True,
    header: bool = False,
    show_progress: bool = False,
    stream: TextIO | None = None,
) -> R2Result:
    """Run a complete haplotype r² scan in a single call.

    Equivalent to the CLI ``fastld r2`` command but as a Python function.

    Args:
        input_path: Phased VCF path, "-" for stdin, or a .gz/.bgz path.
        output_path: Report path. If None, the report goes to stream.
        max_distance: Largest anchor-to-partner distance (bp), inclusive.
        min_r2: Minimum r² for a pair to be reported, inclusive.
        on_malformed: "fail" to abort on a malformed record, "skip" to
            log and drop it.
        check_order: Reject input not sorted by position.
        header: Write a column header line.
        show_progress: Show a variant counter on stderr.
        stream: Report stream when output_path is None (default stdout).

    Returns:
        R2Result with counts and timing.

    Raises:
        InputError: If the input cannot be opened or decompressed.
        HeaderError: If the #CHROM header is missing or malformed.
        MalformedRecordError: On a malformed record with on_malformed="fail".
        UnsortedInputError: If check_order=True and the input is unsorted.
        ValueError: If a threshold or policy is out of range.
    """
    config = PipelineConfig(
        input_path=input_path,
        output_path=Path(output_path) if output_path is not None else None,
        max_distance=max_distance,
        min_r2=min_r2,
        on_malformed=on_malformed,
        check_order=check_order,
        header=header,
        show_progress=show_progress,
    )
    result = PipelineRunner(config).run(stream=stream)
    return R2Result(
        n_samples=result.n_samples,
        n_variants=result.n_variants,
        n_pairs_tested=result.n_pairs_tested,
        n_pairs_reported=result.n_pairs_reported,
        output_path=result.output_path,
        timing=result.timing,
    )


def iter_ld_pairs(
    input_path: str | Path,
    *,
    max_distance: int = DEFAULT_MAX_DISTANCE,
    min_r2: float = DEFAULT_MIN_R2,
    on_malformed: str = "fail",
    check_order: bool = True,
) -> Iterator[PairStatistic]:
    """Yield reported pairs from a VCF without writing a report.

    Example:
        >>> for stat in iter_ld_pairs("chr22.vcf", min_r2=0.8):
        ...     print(stat.anchor_position, stat.partner_position, stat.r2)
    """
    config = PipelineConfig(
        input_path=input_path,
        max_distance=max_distance,
        min_r2=min_r2,
        on_malformed=on_malformed,
        check_order=check_order,
    )
    runner = PipelineRunner(config)
    runner.validate_inputs()
    yield from runner.iter_pairs()

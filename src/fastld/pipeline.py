"""Pipeline orchestration for fastld LD scans.

Provides a single PipelineRunner service class that encapsulates the
shared scan: validate parameters, open the VCF, stream variants through
the window scanner, compute LD per pair and write the reported pairs.
Both the CLI (cli.py) and Python API (r2.py) delegate to this runner.

Example:
    >>> from fastld.pipeline import PipelineConfig, PipelineRunner
    >>> config = PipelineConfig(input_path=Path("chr22.vcf.gz"))
    >>> result = PipelineRunner(config).run()
    >>> print(f"Reported {result.n_pairs_reported} pairs")
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from loguru import logger

from fastld.core.config import DEFAULT_MAX_DISTANCE, DEFAULT_MIN_R2, LDConfig
from fastld.core.errors import InputError
from fastld.core.progress import progress_iterator
from fastld.io.vcf import STDIN_SENTINEL, VCFReader
from fastld.ld.io import IncrementalPairWriter
from fastld.ld.stats import LDCalculator, PairStatistic
from fastld.ld.window import WindowScanner
from fastld.utils.logging import log_rss_memory


@dataclass
class PipelineConfig:
    """Configuration for an LD scan.

    Attributes:
        input_path: VCF path, "-" for stdin, or a .gz/.bgz path.
        output_path: Report path, or None to write to stdout.
        max_distance: Largest anchor-to-partner distance (bp), inclusive.
        min_r2: Minimum r² for a pair to be reported, inclusive.
        on_malformed: "fail" or "skip" for malformed data lines.
        check_order: Reject input not sorted by position within contiguous
            chromosomes.
        header: Write a column header line before the pairs.
        show_progress: Show a variant counter on stderr.
    """

    input_path: Path | str
    output_path: Path | None = None
    max_distance: int = DEFAULT_MAX_DISTANCE
    min_r2: float = DEFAULT_MIN_R2
    on_malformed: str = "fail"
    check_order: bool = True
    header: bool = False
    show_progress: bool = False

    @property
    def ld_config(self) -> LDConfig:
        """Thresholds and policies as an LDConfig."""
        return LDConfig(
            max_distance=self.max_distance,
            min_r2=self.min_r2,
            on_malformed=self.on_malformed,
            check_order=self.check_order,
        )


@dataclass
class PipelineResult:
    """Result of a pipeline run.

    Attributes:
        n_samples: Samples in the VCF header.
        n_variants: Variants that entered the window scanner.
        n_pairs_tested: In-window pairs for which LD was computed.
        n_pairs_reported: Pairs with r² >= min_r2 written to the output.
        n_undefined: Pairs with undefined r² (suppressed).
        n_malformed_skipped: Data lines dropped under on_malformed="skip".
        n_same_position: In-window pairs skipped for sharing a position.
        n_backward_skipped: Partners skipped for lying before their anchor
            (unsorted input with check_order=False).
        max_window: Peak number of variants held in the window.
        output_path: Report path, or None when written to stdout.
        timing: Timing breakdown in seconds.
    """

    n_samples: int
    n_variants: int
    n_pairs_tested: int
    n_pairs_reported: int
    n_undefined: int
    n_malformed_skipped: int
    n_same_position: int
    max_window: int
    n_backward_skipped: int = 0
    output_path: Path | None = None
    timing: dict[str, float] = field(default_factory=dict)

    def summary(self) -> dict:
        """Counts as a flat dict for run logs."""
        return {
            "n_samples": self.n_samples,
            "n_variants": self.n_variants,
            "n_pairs_tested": self.n_pairs_tested,
            "n_pairs_reported": self.n_pairs_reported,
            "n_undefined": self.n_undefined,
            "n_malformed_skipped": self.n_malformed_skipped,
            "n_same_position": self.n_same_position,
            "max_window": self.max_window,
            "n_backward_skipped": self.n_backward_skipped,
        }


class PipelineRunner:
    """Orchestrates a complete LD scan.

    Raises exceptions (FastLDError subclasses, ValueError) rather than
    calling sys.exit or typer.Exit. The CLI wrapper catches these and
    converts to user-friendly error messages.

    Args:
        config: Pipeline configuration.

    Example:
        >>> runner = PipelineRunner(PipelineConfig(input_path=Path("in.vcf")))
        >>> result = runner.run()
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self._reader: VCFReader | None = None
        self._scanner: WindowScanner | None = None
        self._calculator: LDCalculator | None = None

    def validate_inputs(self) -> None:
        """Validate thresholds and that the input exists.

        Raises:
            InputError: If input_path does not exist.
            ValueError: If a threshold or policy is out of range.
        """
        self.config.ld_config.validate()

        input_path = self.config.input_path
        if str(input_path) != STDIN_SENTINEL and not Path(input_path).exists():
            raise InputError(f"Input file not found: {input_path}")

    def _open_reader(self) -> VCFReader:
        config = self.config
        return VCFReader(config.input_path, on_malformed=config.on_malformed)

    def _scan(self, reader: VCFReader) -> Iterator[PairStatistic]:
        """Scan an entered reader, yielding pairs with r² >= min_r2."""
        config = self.config
        self._reader = reader
        variants = reader.variants()
        if config.show_progress:
            variants = progress_iterator(variants, desc="Variants")

        scanner = WindowScanner(
            variants,
            max_distance=config.max_distance,
            check_order=config.check_order,
        )
        calculator = LDCalculator(min_r2=config.min_r2)
        self._scanner = scanner
        self._calculator = calculator

        for anchor, partner in scanner.pairs():
            stat = calculator.compute(anchor, partner)
            if stat is not None and calculator.passes(stat):
                yield stat

    def iter_pairs(self) -> Iterator[PairStatistic]:
        """Stream reported pairs without writing them.

        Opens the input, runs the scanner and yields every pair with
        r² >= min_r2, in anchor-major order. Counters are available on
        the runner afterwards via result().
        """
        with self._open_reader() as reader:
            yield from self._scan(reader)

    def result(
        self, n_reported: int, timing: dict[str, float] | None = None
    ) -> PipelineResult:
        """Build a PipelineResult from the counters of the last scan."""
        reader, scanner, calculator = self._reader, self._scanner, self._calculator
        if reader is None or scanner is None or calculator is None:
            raise RuntimeError("No scan has been run yet")
        return PipelineResult(
            n_samples=reader.n_samples,
            n_variants=scanner.n_variants,
            n_pairs_tested=calculator.n_computed,
            n_pairs_reported=n_reported,
            n_undefined=calculator.n_undefined,
            n_malformed_skipped=reader.n_malformed,
            n_same_position=scanner.skipped_same_position,
            max_window=scanner.max_window,
            n_backward_skipped=scanner.skipped_backward,
            output_path=self.config.output_path,
            timing=timing or {},
        )

    def run(self, stream: TextIO | None = None) -> PipelineResult:
        """Execute the scan and write the report.

        Args:
            stream: Stream for the report when output_path is None
                (default sys.stdout).

        Returns:
            PipelineResult with counts and timing.
        """
        t_start = time.perf_counter()
        self.validate_inputs()

        config = self.config
        destination = config.output_path if config.output_path else "stdout"
        logger.info(
            f"Scanning {config.input_path}: max distance {config.max_distance} bp, "
            f"min r2 {config.min_r2}, output {destination}"
        )
        log_rss_memory("scan", "start")

        # The header is read before the output file is created or truncated
        with self._open_reader() as reader, IncrementalPairWriter(
            config.output_path, stream=stream, header=config.header
        ) as writer:
            for stat in self._scan(reader):
                writer.write(stat)

        t_end = time.perf_counter()
        log_rss_memory("scan", "end")

        result = self.result(writer.count, timing={"total_s": t_end - t_start})
        logger.info(
            f"Scanned {result.n_variants} variants ({result.n_samples} samples): "
            f"{result.n_pairs_tested} pairs tested, "
            f"{result.n_pairs_reported} reported in {result.timing['total_s']:.2f}s"
        )
        if result.n_undefined:
            logger.info(f"{result.n_undefined} pairs had undefined r2 (monomorphic)")
        if result.n_malformed_skipped:
            logger.warning(f"Skipped {result.n_malformed_skipped} malformed records")
        if result.n_backward_skipped:
            logger.warning(
                f"Skipped {result.n_backward_skipped} pairs from unsorted input"
            )
        logger.debug(f"Peak window size: {result.max_window} variants")
        return result

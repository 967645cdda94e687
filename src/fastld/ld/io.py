"""I/O module for LD pair reports.

Writes one tab-separated line per reported pair:

    chromosome  anchor_pos  partner_pos  n_haps  r2  D  Dprime

r², D and D' are printed with 6 decimal places. No header is
written unless requested.
"""

import sys
from pathlib import Path
from typing import TextIO

from fastld.ld.stats import PairStatistic

HEADER = "CHR\tPOS1\tPOS2\tN_HAPS\tR2\tD\tDPRIME"


def format_pair_line(stat: PairStatistic) -> str:
    """Format a single pair as a tab-separated line (no newline).

    Args:
        stat: PairStatistic to format.

    Returns:
        Tab-separated string.
    """
    return "\t".join(
        [
            stat.chromosome,
            str(stat.anchor_position),
            str(stat.partner_position),
            str(stat.total),
            f"{stat.r2:.6f}",
            f"{stat.d:.6f}",
            f"{stat.d_prime:.6f}",
        ]
    )


def write_pair_results(
    stats: list[PairStatistic], path: Path, header: bool = False
) -> None:
    """Write a list of pairs to a report file.

    Args:
        stats: Pairs to write, in order.
        path: Output file path (parent directories created if needed).
        header: Write the column header line first.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        if header:
            f.write(HEADER + "\n")
        for stat in stats:
            f.write(format_pair_line(stat) + "\n")


def read_pair_results(path: Path) -> list[PairStatistic]:
    """Read a pair report written by this module (header optional).

    Contingency counts are not part of the report and are left at 0.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a line does not have 7 columns.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"LD report not found: {path}")

    stats = []
    with open(path) as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip() or line.rstrip("\r\n") == HEADER:
                continue
            fields = line.split()
            if len(fields) != 7:
                raise ValueError(
                    f"{path}:{line_number}: expected 7 columns, found {len(fields)}"
                )
            stats.append(
                PairStatistic(
                    chromosome=fields[0],
                    anchor_position=int(fields[1]),
                    partner_position=int(fields[2]),
                    total=int(fields[3]),
                    r2=float(fields[4]),
                    d=float(fields[5]),
                    d_prime=float(fields[6]),
                )
            )
    return stats


class IncrementalPairWriter:
    """Write LD pairs to disk or a stream as they are produced.

    Context manager that writes each pair immediately, so the report never
    accumulates in memory. Output matches write_pair_results exactly.

    Example:
        with IncrementalPairWriter(Path("chr22.ld.txt")) as writer:
            for stat in reported_pairs():
                writer.write(stat)
        print(f"Wrote {writer.count} pairs")

        # To stdout:
        with IncrementalPairWriter() as writer:
            ...
    """

    def __init__(
        self,
        path: Path | None = None,
        stream: TextIO | None = None,
        header: bool = False,
    ):
        """Initialize writer.

        Args:
            path: Output file path. Parent directories created if needed.
                If None, pairs go to stream (default sys.stdout).
            stream: Text stream used when path is None. Not closed on exit.
            header: Write the column header line on open.
        """
        self.path = Path(path) if path is not None else None
        self.stream = stream
        self.header = header
        self._file: TextIO | None = None
        self._owns_file = False
        self._count = 0

    def __enter__(self) -> "IncrementalPairWriter":
        """Open output and write header if requested."""
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "w")
            self._owns_file = True
        else:
            self._file = self.stream if self.stream is not None else sys.stdout
        if self.header:
            self._file.write(HEADER + "\n")
        return self

    def write(self, stat: PairStatistic) -> None:
        """Write a single pair immediately.

        Args:
            stat: PairStatistic to write.
        """
        if self._file is None:
            raise RuntimeError("Writer not opened. Use as context manager.")
        self._file.write(format_pair_line(stat) + "\n")
        self._count += 1

    def write_batch(self, stats: list[PairStatistic]) -> None:
        """Write multiple pairs at once (convenience method)."""
        for stat in stats:
            self.write(stat)

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close file, or flush a borrowed stream."""
        if self._file is not None:
            if self._owns_file:
                self._file.close()
            else:
                self._file.flush()
            self._file = None

    @property
    def count(self) -> int:
        """Number of pairs written."""
        return self._count

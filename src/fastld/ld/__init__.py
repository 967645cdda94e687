"""Linkage disequilibrium computation.

Key pieces:
- WindowScanner: enumerate same-chromosome pairs within max_distance
- LDCalculator: 2x2 haplotype table via bitset popcount, then r², D, D'
- IncrementalPairWriter: stream reported pairs to a file or stdout
"""

from fastld.ld.io import (
    IncrementalPairWriter,
    format_pair_line,
    read_pair_results,
    write_pair_results,
)
from fastld.ld.stats import LDCalculator, PairStatistic, compute_pair, ld_from_counts
from fastld.ld.window import WindowScanner

__all__ = [
    "IncrementalPairWriter",
    "LDCalculator",
    "PairStatistic",
    "WindowScanner",
    "compute_pair",
    "format_pair_line",
    "ld_from_counts",
    "read_pair_results",
    "write_pair_results",
]

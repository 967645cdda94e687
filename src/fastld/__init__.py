"""fastld: fast haplotype-based linkage disequilibrium for phased VCFs.

fastld streams a phased VCF, packs each variant's haplotypes into bitsets,
and reports r², D and D' for every pair of variants on the same chromosome
within a fixed physical distance.

Key features:
- Single pass over the input with memory bounded by the window width
- Bitset intersection and population count for the 2x2 haplotype table
- Plain-text, tab-separated report with one line per reported pair

Example:
    >>> from fastld import compute_r2
    >>> result = compute_r2("data/chr22.phased.vcf.gz", output_path="chr22.ld.txt")
    >>> print(f"{result.n_pairs_reported} pairs in {result.timing['total_s']:.1f}s")
"""

import sys
from importlib.metadata import version

from loguru import logger

__version__ = version("fastld")

# Configure loguru with sensible defaults on import
# Uses stderr so the LD report can own stdout
# Users can override by calling logger.remove()/add()
logger.remove()  # Remove default handler
logger.add(
    sys.stderr,
    level="INFO",
    format="{time:HH:mm:ss} | <level>{level: <8}</level> | {message}",
    colorize=True,
)

from fastld.r2 import R2Result, compute_r2, iter_ld_pairs  # noqa: E402

__all__ = ["compute_r2", "iter_ld_pairs", "R2Result", "__version__"]

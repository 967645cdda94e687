"""Haplotype-based LD statistics for a pair of variants.

The 2x2 haplotype table is built from bitset intersections:

    x11 = |a.zero & b.zero|    x12 = |a.zero & b.one|
    x21 = |a.one  & b.zero|    x22 = |a.one  & b.one|

Only haplotypes with a recognized allele at both sites are counted. With
frequencies taken over the informative total:

    p1 = x11 + x12, p2 = x21 + x22   (allele frequencies at a)
    q1 = x11 + x21, q2 = x12 + x22   (allele frequencies at b)
    D  = x11 - p1*q1
    D' = D / Dmax,  Dmax = min(p1*q1, p2*q2) if D < 0 else min(p1*q2, p2*q1)
    r² = D² / (p1*p2*q1*q2)

Swapping a and b transposes the table (x12 <-> x21, p <-> q). total, D,
D' and r² are unchanged by the transpose.

A pair with no informative haplotypes, or where either site is
monomorphic among them, has no defined r²; compute() returns None for
it instead of propagating NaN or infinity.
"""

from dataclasses import dataclass

import numpy as np
from loguru import logger

from fastld.core.config import DEFAULT_MIN_R2
from fastld.genotype.codec import count_set_bits
from fastld.genotype.variant import Variant


@dataclass
class PairStatistic:
    """LD between an anchor variant and a later partner on the same chromosome."""

    chromosome: str
    anchor_position: int
    partner_position: int
    total: int  # haplotypes with a recognized allele at both sites
    r2: float
    d: float
    d_prime: float
    x11: int = 0
    x12: int = 0
    x21: int = 0
    x22: int = 0


def ld_from_counts(
    x11: int, x12: int, x21: int, x22: int
) -> tuple[float, float, float] | None:
    """Compute (r², D, D') from haplotype counts.

    Each statistic is a ratio of exact integer expressions in the counts,
    so it is correctly rounded once: a table whose r² is exactly 1/10
    yields the float 0.1.

    Args:
        x11: Count of 0/0 haplotypes.
        x12: Count of 0/1 haplotypes.
        x21: Count of 1/0 haplotypes.
        x22: Count of 1/1 haplotypes.

    Returns:
        (r2, d, d_prime), or None if the statistic is undefined
        (zero total or a zero marginal frequency).
    """
    total = x11 + x12 + x21 + x22
    if total == 0:
        return None

    # Marginal counts; frequencies are these divided by total
    p1 = x11 + x12
    p2 = x21 + x22
    q1 = x11 + x21
    q2 = x12 + x22

    denominator = p1 * p2 * q1 * q2
    if denominator == 0:
        return None

    # total² * D
    cross = x11 * x22 - x12 * x21
    if cross < 0:
        d_max = min(p1 * q1, p2 * q2)
    else:
        d_max = min(p1 * q2, p2 * q1)

    return cross * cross / denominator, cross / (total * total), cross / d_max


class LDCalculator:
    """Computes PairStatistics with a reusable intersection workspace.

    The workspace is sized from the first variant seen; every later
    variant must have the same word count (guaranteed when all come from
    one header).

    Attributes:
        min_r2: Reporting threshold used by passes().
        n_computed: Number of compute() calls.
        n_undefined: Number of pairs with undefined statistics.
    """

    def __init__(self, min_r2: float = DEFAULT_MIN_R2):
        self.min_r2 = min_r2
        self.n_computed = 0
        self.n_undefined = 0
        self._workspace: np.ndarray | None = None

    def _intersect_count(self, a: np.ndarray, b: np.ndarray) -> int:
        np.bitwise_and(a, b, out=self._workspace)
        return count_set_bits(self._workspace)

    def contingency_table(self, a: Variant, b: Variant) -> tuple[int, int, int, int]:
        """Return (x11, x12, x21, x22) for variants a and b.

        Raises:
            ValueError: If the variants have different bitset sizes.
        """
        if a.n_words != b.n_words:
            raise ValueError(
                f"Variants {a!r} and {b!r} have different bitset sizes "
                f"({a.n_words} vs {b.n_words} words)"
            )
        if self._workspace is None:
            self._workspace = np.empty(a.n_words, dtype=np.uint64)
        elif self._workspace.shape[0] != a.n_words:
            raise ValueError(
                f"Variant {a!r} has {a.n_words} words, "
                f"workspace was sized for {self._workspace.shape[0]}"
            )

        return (
            self._intersect_count(a.zero_bits, b.zero_bits),
            self._intersect_count(a.zero_bits, b.one_bits),
            self._intersect_count(a.one_bits, b.zero_bits),
            self._intersect_count(a.one_bits, b.one_bits),
        )

    def compute(self, a: Variant, b: Variant) -> PairStatistic | None:
        """Compute LD between anchor a and partner b.

        Returns:
            PairStatistic, or None when r² is undefined for the pair.
        """
        self.n_computed += 1
        x11, x12, x21, x22 = self.contingency_table(a, b)
        stats = ld_from_counts(x11, x12, x21, x22)
        if stats is None:
            self.n_undefined += 1
            logger.debug(
                f"Undefined LD for {a.chromosome}:{a.position}-{b.position} "
                f"(counts {x11},{x12},{x21},{x22})"
            )
            return None

        r2, d, d_prime = stats
        return PairStatistic(
            chromosome=a.chromosome,
            anchor_position=a.position,
            partner_position=b.position,
            total=x11 + x12 + x21 + x22,
            r2=r2,
            d=d,
            d_prime=d_prime,
            x11=x11,
            x12=x12,
            x21=x21,
            x22=x22,
        )

    def passes(self, stat: PairStatistic) -> bool:
        """True if the pair meets the reporting threshold."""
        return stat.r2 >= self.min_r2


def compute_pair(a: Variant, b: Variant) -> PairStatistic | None:
    """Compute LD for a single pair without a reporting threshold."""
    return LDCalculator(min_r2=0.0).compute(a, b)

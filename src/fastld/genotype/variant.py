"""Variant record: one VCF data line reduced to position plus haplotype bitsets."""

from dataclasses import dataclass

import numpy as np


@dataclass(eq=False)
class Variant:
    """One biallelic, phased variant.

    Attributes:
        chromosome: Chromosome identifier as written in the input.
        position: 1-based genomic coordinate as written in the input.
        zero_bits: uint64 bitset of haplotypes carrying allele '0'.
        one_bits: uint64 bitset of haplotypes carrying allele '1'.
        line_number: 1-based source line, for diagnostics.
    """

    chromosome: str
    position: int
    zero_bits: np.ndarray
    one_bits: np.ndarray
    line_number: int | None = None

    @property
    def n_words(self) -> int:
        """Number of 64-bit words per bitset."""
        return self.zero_bits.shape[0]

    def __repr__(self) -> str:
        return f"<Variant {self.chromosome}:{self.position}>"

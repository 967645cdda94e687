"""Genotype representation.

Key pieces:
- Variant: chromosome, position and the two haplotype bitsets
- encode / decode: per-sample bit packing
- pack_haplotypes: vectorized packing of a whole record
- count_set_bits: population count over a bitset
"""

from fastld.genotype.codec import (
    WORD_BITS,
    count_set_bits,
    decode,
    empty_bitsets,
    encode,
    n_words,
    pack_haplotypes,
)
from fastld.genotype.variant import Variant

__all__ = [
    "WORD_BITS",
    "Variant",
    "count_set_bits",
    "decode",
    "empty_bitsets",
    "encode",
    "n_words",
    "pack_haplotypes",
]

"""Bit-packed storage for phased biallelic genotypes.

Each variant keeps two bitsets over the 2n haplotypes of n samples: a
"zero" set (haplotype carries allele '0') and a "one" set (allele '1').
Haplotype k = 2*i + h (sample i, allele h) lives in word k // 64, bit
k % 64. An unrecognized allele ('.', '2', ...) sets neither bit, so the
two sets never overlap.

Allele frequencies are never read from a single bitset. LD counts come
from popcount(a AND b) over pairs of variants (see fastld.ld.stats).
"""

import numpy as np

WORD_BITS = 64

_ZERO = ord("0")
_ONE = ord("1")


def n_words(n_samples: int) -> int:
    """Number of 64-bit words needed for 2 * n_samples haplotypes.

    Always at least one word so that empty sample sets still produce
    valid (all-zero) bitsets.
    """
    return max(1, -(-2 * n_samples // WORD_BITS))


def empty_bitsets(n_samples: int) -> tuple[np.ndarray, np.ndarray]:
    """Allocate zeroed (zero_bits, one_bits) for n_samples samples."""
    size = n_words(n_samples)
    return np.zeros(size, dtype=np.uint64), np.zeros(size, dtype=np.uint64)


def _set_bit(bits: np.ndarray, index: int) -> None:
    bits[index // WORD_BITS] |= np.uint64(1 << (index % WORD_BITS))


def _set_allele(
    zero_bits: np.ndarray, one_bits: np.ndarray, index: int, allele: str
) -> None:
    if allele == "0":
        _set_bit(zero_bits, index)
    elif allele == "1":
        _set_bit(one_bits, index)


def encode(
    zero_bits: np.ndarray,
    one_bits: np.ndarray,
    sample_index: int,
    allele_a: str,
    allele_b: str,
) -> None:
    """Record one sample's phased genotype allele_a|allele_b in place.

    Args:
        zero_bits: Bitset of haplotypes carrying '0' (modified in place).
        one_bits: Bitset of haplotypes carrying '1' (modified in place).
        sample_index: 0-based sample column.
        allele_a: First (left of '|') allele character.
        allele_b: Second allele character.
    """
    _set_allele(zero_bits, one_bits, 2 * sample_index, allele_a)
    _set_allele(zero_bits, one_bits, 2 * sample_index + 1, allele_b)


def decode(
    zero_bits: np.ndarray, one_bits: np.ndarray, haplotype_index: int
) -> str | None:
    """Return the allele stored for one haplotype.

    Returns:
        '0', '1', or None if the allele was unrecognized.
    """
    word, bit = divmod(haplotype_index, WORD_BITS)
    if (int(zero_bits[word]) >> bit) & 1:
        return "0"
    if (int(one_bits[word]) >> bit) & 1:
        return "1"
    return None


def _pack_mask(mask: np.ndarray, size: int) -> np.ndarray:
    # packbits(little) puts haplotype k at byte k // 8, bit k % 8; reading the
    # bytes back as little-endian words gives word k // 64, bit k % 64
    packed = np.packbits(mask, bitorder="little")
    buf = np.zeros(size * 8, dtype=np.uint8)
    buf[: packed.size] = packed
    return buf.view("<u8").astype(np.uint64)


def pack_haplotypes(alleles: str, size: int) -> tuple[np.ndarray, np.ndarray]:
    """Encode a whole record's haplotype alleles in one vectorized step.

    Equivalent to calling encode() for every sample, but without a Python
    loop over bits.

    Args:
        alleles: Allele characters in haplotype order
            (sample 0 first allele, sample 0 second allele, sample 1, ...).
        size: Number of words per bitset (see n_words()).

    Returns:
        Tuple of (zero_bits, one_bits) uint64 arrays of length size.

    Raises:
        ValueError: If alleles does not fit in size words.
    """
    if len(alleles) > size * WORD_BITS:
        raise ValueError(
            f"{len(alleles)} haplotypes do not fit in {size} words "
            f"of {WORD_BITS} bits"
        )
    codes = np.frombuffer(alleles.encode("ascii", errors="replace"), dtype=np.uint8)
    return _pack_mask(codes == _ZERO, size), _pack_mask(codes == _ONE, size)


def count_set_bits(vector: np.ndarray) -> int:
    """Total population count across all words of a bitset."""
    return int(np.bitwise_count(vector).sum())

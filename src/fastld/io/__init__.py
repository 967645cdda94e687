"""I/O modules for fastld.

This package contains the VCF record source and variant parser:
- open_vcf_stream: plain, stdin or externally decompressed text stream
- read_header: sample list from the #CHROM line
- parse_variant: one data line to a bit-packed Variant
- VCFReader: context manager combining the above
"""

from fastld.io.vcf import (
    VCFReader,
    is_compressed,
    open_vcf_stream,
    parse_variant,
    read_header,
)

__all__ = [
    "VCFReader",
    "is_compressed",
    "open_vcf_stream",
    "parse_variant",
    "read_header",
]

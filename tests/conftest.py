"""Pytest fixtures for the fastld test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from fastld.genotype.variant import Variant
from fastld.io.vcf import parse_variant

# =============================================================================
# Test Tier System
# =============================================================================
#
# tier0 - Fast Unit Tests
#   - Pure computation (codec, LD statistics, window scanner, formatting)
#   - No subprocesses
#   - Run: pytest -m tier0
#
# tier1 - End-to-End Tests
#   - VCF files on disk, CLI invocation, external decompressor
#   - Run: pytest -m tier1
#
# Quick reference:
#   pytest -m tier0             # Fast tests only
#   pytest                      # All tests
# =============================================================================

FIXED_COLUMNS = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT"

Record = tuple[str, int, Sequence[str]]


def record_line(chromosome: str, position: int, genotypes: Sequence[str]) -> str:
    """Build a VCF data line from phased genotypes such as "0|1"."""
    fields = [chromosome, str(position), ".", "A", "G", ".", "PASS", ".", "GT:DS"]
    fields.extend(f"{gt}:0" for gt in genotypes)
    return "\t".join(fields)


def vcf_text(samples: Sequence[str], records: Sequence[Record]) -> str:
    """Build a complete phased VCF document."""
    lines = [
        "##fileformat=VCFv4.2",
        "##source=fastld-tests",
        FIXED_COLUMNS + "\t" + "\t".join(samples),
    ]
    lines.extend(record_line(*record) for record in records)
    return "\n".join(lines) + "\n"


@pytest.fixture(scope="session")
def make_variant() -> Callable[..., Variant]:
    """Factory building a Variant from phased genotype strings.

    Example:
        >>> v = make_variant("1", 100, ["0|0", "1|1"])
    """

    def _make(
        chromosome: str, position: int, genotypes: Sequence[str]
    ) -> Variant:
        return parse_variant(
            record_line(chromosome, position, genotypes), len(genotypes)
        )

    return _make


@pytest.fixture
def write_vcf(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a phased VCF into tmp_path.

    Example:
        >>> path = write_vcf(["S1", "S2"], [("1", 100, ["0|0", "1|1"])])
    """

    def _write(
        samples: Sequence[str],
        records: Sequence[Record],
        name: str = "test.vcf",
    ) -> Path:
        path = tmp_path / name
        path.write_text(vcf_text(samples, records))
        return path

    return _write


@pytest.fixture
def two_sample_vcf(write_vcf) -> Path:
    """Small two-sample VCF with one linked pair and one out-of-window variant.

    Pairs (max distance 1 Mb):
        1:100 - 1:200      r2 = 1.0 (identical haplotypes)
        1:100 - 1:300      r2 = 1/3
        1:200 - 1:300      r2 = 1/3
        1:300 - 1:2000000  out of range
        2:50               different chromosome
    """
    return write_vcf(
        ["S1", "S2"],
        [
            ("1", 100, ["0|0", "1|1"]),
            ("1", 200, ["0|0", "1|1"]),
            ("1", 300, ["0|1", "1|1"]),
            ("1", 2_000_000, ["0|1", "1|0"]),
            ("2", 50, ["0|0", "1|1"]),
        ],
    )


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Create temporary output directory for test results."""
    out = tmp_path / "output"
    out.mkdir()
    return out

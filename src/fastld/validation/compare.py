"""Comparison utilities for validating LD reports against a reference.

Reports are matched pair by pair on (chromosome, position 1, position 2).
The comparison returns structured results instead of raising, so it can
drive scripted regression checks against another tool's output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from numpy.testing import assert_allclose

from fastld.ld.io import read_pair_results
from fastld.ld.stats import PairStatistic
from fastld.validation.tolerances import ToleranceConfig

PairKey = tuple[str, int, int]


@dataclass
class ComparisonResult:
    """Result of a numerical array comparison.

    Attributes:
        passed: Whether the comparison passed within tolerance.
        max_abs_diff: Maximum absolute difference found.
        max_rel_diff: Maximum relative difference found.
        worst_location: Index of the worst mismatch, or None if passed.
        message: Human-readable description of the result.
    """

    passed: bool
    max_abs_diff: float
    max_rel_diff: float
    worst_location: int | None
    message: str


@dataclass
class LDComparisonResult:
    """Result of comparing two LD reports.

    Attributes:
        passed: True if both reports contain the same pairs, haplotype
            counts agree, and every statistic is within tolerance.
        n_shared: Number of pairs present in both reports.
        missing: Pairs in the expected report but not the actual one.
        unexpected: Pairs in the actual report but not the expected one.
        total_mismatches: Shared pairs whose haplotype counts differ.
        columns: Per-statistic comparison results keyed by "r2", "d",
            "d_prime".
    """

    passed: bool
    n_shared: int
    missing: list[PairKey] = field(default_factory=list)
    unexpected: list[PairKey] = field(default_factory=list)
    total_mismatches: list[PairKey] = field(default_factory=list)
    columns: dict[str, ComparisonResult] = field(default_factory=dict)

    @property
    def message(self) -> str:
        """One-line summary of the comparison."""
        if self.passed:
            return f"LD reports match ({self.n_shared} pairs)"
        parts = []
        if self.missing:
            parts.append(f"{len(self.missing)} missing pairs")
        if self.unexpected:
            parts.append(f"{len(self.unexpected)} unexpected pairs")
        if self.total_mismatches:
            parts.append(f"{len(self.total_mismatches)} haplotype count mismatches")
        parts.extend(c.message for c in self.columns.values() if not c.passed)
        return "LD reports differ: " + "; ".join(parts)


def compare_arrays(
    actual: np.ndarray,
    expected: np.ndarray,
    rtol: float,
    atol: float,
    name: str = "array",
) -> ComparisonResult:
    """Compare two 1-D arrays with tolerance and return a structured result.

    Uses numpy.testing.assert_allclose internally but catches the assertion
    to return a ComparisonResult instead of raising.

    Example:
        >>> a = np.array([0.5, 1.0])
        >>> compare_arrays(a, a.copy(), rtol=1e-6, atol=0.0, name="r2").passed
        True
    """
    if actual.shape != expected.shape:
        return ComparisonResult(
            passed=False,
            max_abs_diff=np.inf,
            max_rel_diff=np.inf,
            worst_location=None,
            message=(
                f"{name} shape mismatch: "
                f"actual {actual.shape} vs expected {expected.shape}"
            ),
        )

    if actual.size == 0:
        return ComparisonResult(
            passed=True,
            max_abs_diff=0.0,
            max_rel_diff=0.0,
            worst_location=None,
            message=f"{name} comparison passed (no values)",
        )

    abs_diff = np.abs(actual - expected)
    with np.errstate(divide="ignore", invalid="ignore"):
        rel_diff = abs_diff / np.abs(expected)
    # 0/0 is a perfect match; x/0 is an unbounded relative error
    rel_diff = np.where(abs_diff == 0, 0.0, rel_diff)
    rel_diff = np.where(np.isnan(rel_diff), np.inf, rel_diff)
    max_abs_diff = float(np.max(abs_diff))
    max_rel_diff = float(np.max(rel_diff))

    try:
        assert_allclose(actual, expected, rtol=rtol, atol=atol, err_msg=name)
    except AssertionError:
        worst = int(np.argmax(abs_diff))
        return ComparisonResult(
            passed=False,
            max_abs_diff=max_abs_diff,
            max_rel_diff=max_rel_diff,
            worst_location=worst,
            message=f"{name} comparison failed at {worst}: "
            f"actual={actual[worst]:.10e}, expected={expected[worst]:.10e}, "
            f"abs_diff={abs_diff[worst]:.2e} (rtol={rtol}, atol={atol})",
        )

    return ComparisonResult(
        passed=True,
        max_abs_diff=max_abs_diff,
        max_rel_diff=max_rel_diff,
        worst_location=None,
        message=(
            f"{name} comparison passed "
            f"(max abs diff: {max_abs_diff:.2e}, max rel diff: {max_rel_diff:.2e})"
        ),
    )


def _key(stat: PairStatistic) -> PairKey:
    return (stat.chromosome, stat.anchor_position, stat.partner_position)


def compare_ld_reports(
    actual: list[PairStatistic],
    expected: list[PairStatistic],
    config: ToleranceConfig | None = None,
) -> LDComparisonResult:
    """Compare two LD reports pair by pair.

    Args:
        actual: Pairs produced by fastld.
        expected: Reference pairs.
        config: Tolerance configuration. Uses default if None.

    Returns:
        LDComparisonResult listing missing/unexpected pairs and
        per-statistic diagnostics over the shared pairs.
    """
    if config is None:
        config = ToleranceConfig()

    actual_by_key = {_key(s): s for s in actual}
    expected_by_key = {_key(s): s for s in expected}

    missing = [k for k in expected_by_key if k not in actual_by_key]
    unexpected = [k for k in actual_by_key if k not in expected_by_key]
    shared = [k for k in expected_by_key if k in actual_by_key]

    total_mismatches = [
        k for k in shared if actual_by_key[k].total != expected_by_key[k].total
    ]

    columns = {}
    for name, rtol in (
        ("r2", config.r2_rtol),
        ("d", config.d_rtol),
        ("d_prime", config.dprime_rtol),
    ):
        a = np.array([getattr(actual_by_key[k], name) for k in shared], dtype=float)
        e = np.array([getattr(expected_by_key[k], name) for k in shared], dtype=float)
        columns[name] = compare_arrays(a, e, rtol=rtol, atol=config.atol, name=name)

    passed = (
        not missing
        and not unexpected
        and not total_mismatches
        and all(c.passed for c in columns.values())
    )
    return LDComparisonResult(
        passed=passed,
        n_shared=len(shared),
        missing=missing,
        unexpected=unexpected,
        total_mismatches=total_mismatches,
        columns=columns,
    )


def compare_ld_report_files(
    actual_path: Path,
    expected_path: Path,
    config: ToleranceConfig | None = None,
) -> LDComparisonResult:
    """Load two report files and compare them with compare_ld_reports."""
    return compare_ld_reports(
        read_pair_results(actual_path), read_pair_results(expected_path), config
    )

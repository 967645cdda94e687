"""Validation modules for fastld.

This package contains utilities for validating LD reports, used by the
`fastld compare` command:
- tolerances: Configurable tolerance thresholds for r², D and D'
- compare: Pair-matched report comparison with tolerance configuration
"""

from fastld.validation.compare import (
    ComparisonResult,
    LDComparisonResult,
    compare_arrays,
    compare_ld_report_files,
    compare_ld_reports,
)
from fastld.validation.tolerances import ToleranceConfig

__all__ = [
    "ToleranceConfig",
    "ComparisonResult",
    "LDComparisonResult",
    "compare_arrays",
    "compare_ld_report_files",
    "compare_ld_reports",
]

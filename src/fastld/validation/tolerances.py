"""Tolerance configuration for comparing LD reports.

Reports are compared after a round trip through text, so every value is
rounded to 6 decimal places ("%f"). Tolerances therefore default to a
small absolute slack on top of a relative one.

Value types and tolerances:
- **r²**: bounded in [0, 1]; printed rounding dominates (5e-7 absolute)
- **D**: bounded in [-0.25, 0.25]; same rounding as r²
- **D'**: ratio of two small numbers; more sensitive near monomorphic sites
"""

from dataclasses import dataclass


@dataclass
class ToleranceConfig:
    """Configuration for numerical comparison tolerances.

    Attributes:
        r2_rtol: Relative tolerance for r².
        d_rtol: Relative tolerance for D.
        dprime_rtol: Relative tolerance for D'.
        atol: Absolute tolerance, covering "%f" rounding (half of 1e-6).

    Example:
        >>> config = ToleranceConfig()
        >>> config.r2_rtol
        1e-06
        >>> ToleranceConfig.strict().atol
        0.0
    """

    r2_rtol: float = 1e-6
    d_rtol: float = 1e-6
    dprime_rtol: float = 1e-5
    atol: float = 1e-6

    @classmethod
    def strict(cls) -> "ToleranceConfig":
        """Exact match of printed values.

        Use when comparing two reports produced by the same formatter.
        """
        return cls(r2_rtol=0.0, d_rtol=0.0, dprime_rtol=0.0, atol=0.0)

    @classmethod
    def relaxed(cls) -> "ToleranceConfig":
        """Looser tolerances for reports produced by other tools.

        Other LD tools may print fewer digits or accumulate in a different
        order.
        """
        return cls(r2_rtol=1e-3, d_rtol=1e-3, dprime_rtol=1e-2, atol=1e-4)

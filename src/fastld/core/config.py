"""Configuration dataclasses for fastld.

This module contains the tunable thresholds of an LD scan and the
malformed-record policy. Defaults are a 1 Mb window, r² >= 0.1, and
aborting on any malformed record.
"""

from dataclasses import dataclass

# Maximum anchor-to-partner distance in base pairs (inclusive)
DEFAULT_MAX_DISTANCE = 1_000_000

# Minimum r² for a pair to be reported (inclusive)
DEFAULT_MIN_R2 = 0.1

MALFORMED_POLICIES = ("fail", "skip")


@dataclass
class LDConfig:
    """Thresholds and policies for one LD scan.

    Attributes:
        max_distance: Largest partner - anchor distance (bp) still paired.
        min_r2: Pairs with r² below this are not reported.
        on_malformed: "fail" aborts on the first malformed record,
            "skip" logs it and continues with the next line.
        check_order: Reject input that is not sorted by position within
            each chromosome, or whose chromosomes are not contiguous.
    """

    max_distance: int = DEFAULT_MAX_DISTANCE
    min_r2: float = DEFAULT_MIN_R2
    on_malformed: str = "fail"
    check_order: bool = True

    def validate(self) -> None:
        """Check parameter ranges.

        Raises:
            ValueError: If any parameter is out of range.
        """
        if self.max_distance < 0:
            raise ValueError(f"max_distance must be >= 0, got {self.max_distance}")
        if not 0.0 <= self.min_r2 <= 1.0:
            raise ValueError(f"min_r2 must be in [0, 1], got {self.min_r2}")
        if self.on_malformed not in MALFORMED_POLICIES:
            raise ValueError(
                f"on_malformed must be one of {MALFORMED_POLICIES}, "
                f"got {self.on_malformed!r}"
            )

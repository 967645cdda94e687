"""Sliding-window enumeration of variant pairs.

The window is a deque holding the current anchor followed by every later
variant already read. For each anchor the scanner walks right, pulling new
variants from the source only when the buffered ones are exhausted, and
stops at the first partner on another chromosome or more than
max_distance away. The anchor is then popped and the next buffered
variant becomes the anchor.

Memory: the deque never holds more than the variants within max_distance
of one anchor, plus the single variant that closed its window.
"""

from collections import deque
from collections.abc import Iterable, Iterator

from loguru import logger

from fastld.core.config import DEFAULT_MAX_DISTANCE
from fastld.core.errors import UnsortedInputError
from fastld.genotype.variant import Variant


class WindowScanner:
    """Enumerate (anchor, partner) pairs within max_distance.

    Every yielded pair satisfies: same chromosome, partner read after
    anchor, and 0 < partner.position - anchor.position <= max_distance.
    Pairs at identical positions are counted in skipped_same_position
    and partners at a lower position (only possible with check_order=False)
    in skipped_backward; neither is yielded.

    Example:
        scanner = WindowScanner(reader.variants(), max_distance=500_000)
        for anchor, partner in scanner.pairs():
            ...
        print(f"peak window: {scanner.max_window}")

    Attributes:
        max_distance: Largest distance (bp) still paired, inclusive.
        check_order: Raise UnsortedInputError on out-of-order input.
        n_variants: Variants ingested so far.
        n_pairs: Pairs yielded so far.
        max_window: Peak number of variants held in the window.
        skipped_same_position: In-range pairs skipped for having distance 0.
        skipped_backward: Partners skipped for lying before their anchor.
    """

    def __init__(
        self,
        variants: Iterable[Variant],
        max_distance: int = DEFAULT_MAX_DISTANCE,
        check_order: bool = True,
    ):
        self.max_distance = max_distance
        self.check_order = check_order
        self.n_variants = 0
        self.n_pairs = 0
        self.max_window = 0
        self.skipped_same_position = 0
        self.skipped_backward = 0
        self._source = iter(variants)
        self._window: deque[Variant] = deque()
        self._last: Variant | None = None
        self._closed_chromosomes: set[str] = set()
        self._exhausted = False

    def __len__(self) -> int:
        """Number of variants currently held in the window."""
        return len(self._window)

    def _check_order(self, variant: Variant) -> None:
        last = self._last
        if last is None:
            return
        if variant.chromosome == last.chromosome:
            if variant.position < last.position:
                raise UnsortedInputError(
                    f"line {variant.line_number}: position {variant.position} "
                    f"on chromosome {variant.chromosome} follows "
                    f"{last.position}; input must be sorted by position"
                )
            return
        self._closed_chromosomes.add(last.chromosome)
        if variant.chromosome in self._closed_chromosomes:
            raise UnsortedInputError(
                f"line {variant.line_number}: chromosome {variant.chromosome} "
                f"appears again after {last.chromosome}; "
                "chromosomes must be contiguous"
            )

    def _pull(self) -> bool:
        """Append the next source variant to the window. False at end of input."""
        if self._exhausted:
            return False
        variant = next(self._source, None)
        if variant is None:
            self._exhausted = True
            return False
        if self.check_order:
            self._check_order(variant)
        self._last = variant
        self._window.append(variant)
        self.n_variants += 1
        if len(self._window) > self.max_window:
            self.max_window = len(self._window)
        return True

    def _in_range(self, anchor: Variant, partner: Variant) -> bool:
        return (
            partner.chromosome == anchor.chromosome
            and partner.position - anchor.position <= self.max_distance
        )

    def pairs(self) -> Iterator[tuple[Variant, Variant]]:
        """Yield (anchor, partner) pairs in anchor-major, arrival order."""
        window = self._window
        if not window:
            self._pull()

        while window:
            anchor = window[0]
            i = 1
            while True:
                if i == len(window) and not self._pull():
                    break
                partner = window[i]
                if not self._in_range(anchor, partner):
                    break
                if partner.position == anchor.position:
                    self.skipped_same_position += 1
                elif partner.position < anchor.position:
                    self.skipped_backward += 1
                else:
                    self.n_pairs += 1
                    yield anchor, partner
                i += 1
            window.popleft()

        logger.debug(
            f"Window scan finished: {self.n_variants} variants, "
            f"{self.n_pairs} pairs, peak window {self.max_window}"
        )

"""Exception types raised by fastld.

All errors derive from FastLDError, itself a ValueError, so callers that
already catch ValueError for bad input keep working. The CLI converts any
of these into an "Error: ..." message and exit code 1.
"""


class FastLDError(ValueError):
    """Base class for fastld input errors."""


class InputError(FastLDError):
    """Input path is missing, unreadable, or its decompressor failed."""


class HeaderError(FastLDError):
    """The #CHROM header line is absent or malformed."""


class UnsortedInputError(FastLDError):
    """Variants are not sorted by position within contiguous chromosomes."""


class MalformedRecordError(FastLDError):
    """A data line does not match the expected phased-genotype layout.

    Attributes:
        line_number: 1-based line number in the input, or None if unknown.
        line: The raw offending line (trailing newline stripped).
        field: The offending field, if one was identified.
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        line: str = "",
        field: str | None = None,
    ) -> None:
        self.line_number = line_number
        self.line = line
        self.field = field
        location = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"{location}{message}")

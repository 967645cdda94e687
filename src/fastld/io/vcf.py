"""Streaming reader for phased VCF text.

This module opens plain, compressed or standard-input VCF streams, parses
the #CHROM header into the sample list, and turns each data line into a
bit-packed Variant. Lines are consumed one at a time; nothing beyond the
current line is buffered here.

Compressed inputs are not decoded in-process: they are piped through an
external decompressor (``gzip -dc`` unless FASTLD_DECOMPRESSOR is set).
"""

import os
import shlex
import subprocess
import sys
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from pathlib import Path
from typing import TextIO

from loguru import logger

from fastld.core.errors import (
    HeaderError,
    InputError,
    MalformedRecordError,
)
from fastld.genotype.codec import n_words, pack_haplotypes
from fastld.genotype.variant import Variant

STDIN_SENTINEL = "-"
COMPRESSED_SUFFIXES = (".gz", ".bgz")
DEFAULT_DECOMPRESSOR = "gzip -dc"

# CHROM POS ID REF ALT QUAL FILTER INFO FORMAT
N_FIXED_COLUMNS = 9
PHASE_SEPARATOR = "|"
SUBFIELD_DELIMITER = ":"


def get_decompressor_command() -> list[str]:
    """Resolve the external decompressor command.

    Priority:
    1. FASTLD_DECOMPRESSOR env var (e.g. "zcat" or "bgzip -dc")
    2. DEFAULT_DECOMPRESSOR

    Returns:
        Command as an argv list; the input path is appended by the caller.
    """
    env_override = os.environ.get("FASTLD_DECOMPRESSOR")
    if env_override is not None:
        command = shlex.split(env_override)
        if command:
            logger.debug(f"Decompressor from FASTLD_DECOMPRESSOR: {command}")
            return command
        logger.warning(
            "FASTLD_DECOMPRESSOR is empty, "
            f"falling back to {DEFAULT_DECOMPRESSOR!r}"
        )
    return shlex.split(DEFAULT_DECOMPRESSOR)


def is_compressed(path: str | Path) -> bool:
    """True if the path carries a suffix handled by the decompressor."""
    return str(path).endswith(COMPRESSED_SUFFIXES)


@contextmanager
def _open_decompressed(path: Path) -> Iterator[TextIO]:
    command = [*get_decompressor_command(), str(path)]
    try:
        proc = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
        )
    except OSError as e:
        raise InputError(f"Could not start decompressor {command[0]!r}: {e}") from e

    try:
        yield proc.stdout
    finally:
        proc.stdout.close()
        stderr = proc.stderr.read()
        proc.stderr.close()
        returncode = proc.wait()
        # Negative return codes mean the decompressor was killed by a signal,
        # typically SIGPIPE after the reader stopped early. A real failure
        # takes precedence over downstream errors such as a missing header.
        if returncode > 0:
            raise InputError(
                f"Decompressor {' '.join(command)!r} exited with status "
                f"{returncode}: {stderr.strip()}"
            )


@contextmanager
def open_vcf_stream(path: str | Path) -> Iterator[TextIO]:
    """Open a VCF as a text stream.

    Args:
        path: File path, "-" for standard input, or a .gz/.bgz path that is
            piped through the external decompressor.

    Yields:
        Text stream positioned at the first line. Standard input is not
        closed on exit.

    Raises:
        InputError: If the file does not exist, cannot be opened, or the
            decompressor fails.
    """
    if str(path) == STDIN_SENTINEL:
        yield sys.stdin
        return

    path = Path(path)
    if not path.exists():
        raise InputError(f"Input file not found: {path}")

    if is_compressed(path):
        with _open_decompressed(path) as stream:
            yield stream
        return

    try:
        stream = open(path, encoding="utf-8")
    except OSError as e:
        raise InputError(f"Could not open {path}: {e}") from e
    with stream:
        yield stream


def parse_header_line(line: str) -> tuple[str, ...]:
    """Extract sample names from a #CHROM header line.

    Raises:
        HeaderError: If the line has fewer than 9 fixed columns or no samples.
    """
    fields = line.split()
    if len(fields) < N_FIXED_COLUMNS:
        raise HeaderError(
            f"Header has {len(fields)} columns, expected at least "
            f"{N_FIXED_COLUMNS} fixed columns: {line.rstrip()!r}"
        )
    samples = tuple(fields[N_FIXED_COLUMNS:])
    if not samples:
        raise HeaderError("Header has no sample columns")
    return samples


def read_header(stream: TextIO) -> tuple[tuple[str, ...], int]:
    """Consume meta lines and the #CHROM header from a stream.

    Lines starting with "##" are skipped. The first line starting with a
    single "#" is the column header.

    Args:
        stream: Text stream positioned at the start of the file.

    Returns:
        Tuple of (sample_names, header_line_number).

    Raises:
        HeaderError: If a data line appears before the header, or the
            stream ends without one.
    """
    line_number = 0
    for line in stream:
        line_number += 1
        if line.startswith("##"):
            continue
        if line.startswith("#"):
            samples = parse_header_line(line)
            if len(set(samples)) != len(samples):
                logger.warning("Header contains duplicate sample names")
            return samples, line_number
        if line.strip():
            raise HeaderError(
                f"line {line_number}: data line found before the #CHROM header"
            )
    raise HeaderError("No #CHROM header line found")


def parse_variant(
    line: str, n_samples: int, line_number: int | None = None
) -> Variant:
    """Parse one data line into a Variant.

    The first column is the chromosome and the second the position. The
    next 7 columns (ID, REF, ALT, QUAL, FILTER, INFO, FORMAT) are skipped
    unvalidated. Each of the n_samples genotype fields must start with
    ``A|B:``; A and B of '0' or '1' are recorded, anything else is left
    unset in both bitsets.

    Args:
        line: Raw data line.
        n_samples: Sample count from the header.
        line_number: 1-based line number for error messages.

    Returns:
        Parsed Variant.

    Raises:
        MalformedRecordError: On a non-integer position, wrong number of
            genotype columns, or a genotype field without the phased prefix.
    """
    line = line.rstrip("\r\n")
    fields = line.split()
    if len(fields) < N_FIXED_COLUMNS:
        raise MalformedRecordError(
            f"expected at least {N_FIXED_COLUMNS} columns, found {len(fields)}",
            line_number=line_number,
            line=line,
        )

    chromosome, position_text = fields[0], fields[1]
    # int() alone would also take "+5", "1_000" and non-ASCII digits
    if not (position_text.isascii() and position_text.isdigit()):
        raise MalformedRecordError(
            f"position {position_text!r} is not an unsigned integer",
            line_number=line_number,
            line=line,
            field=position_text,
        )
    position = int(position_text)

    genotypes = fields[N_FIXED_COLUMNS:]
    if len(genotypes) != n_samples:
        raise MalformedRecordError(
            f"expected {n_samples} genotype columns, found {len(genotypes)}",
            line_number=line_number,
            line=line,
        )

    for field in genotypes:
        if (
            len(field) < 4
            or field[1] != PHASE_SEPARATOR
            or field[3] != SUBFIELD_DELIMITER
        ):
            raise MalformedRecordError(
                f"genotype field {field!r} does not start with "
                f"'A{PHASE_SEPARATOR}B{SUBFIELD_DELIMITER}'",
                line_number=line_number,
                line=line,
                field=field,
            )

    alleles = "".join(field[0] + field[2] for field in genotypes)
    zero_bits, one_bits = pack_haplotypes(alleles, n_words(n_samples))
    return Variant(
        chromosome=chromosome,
        position=position,
        zero_bits=zero_bits,
        one_bits=one_bits,
        line_number=line_number,
    )


class VCFReader:
    """Context manager streaming Variants from a phased VCF.

    Opens the input, reads the header on entry, then yields one Variant
    per data line. Blank lines are ignored.

    Example:
        with VCFReader(Path("chr22.vcf.gz")) as reader:
            print(f"{reader.n_samples} samples")
            for variant in reader.variants():
                ...
        print(f"Skipped {reader.n_malformed} malformed records")
    """

    def __init__(self, path: str | Path, on_malformed: str = "fail"):
        """Initialize reader.

        Args:
            path: Input path, "-" for stdin, or a compressed path.
            on_malformed: "fail" to raise on the first malformed record,
                "skip" to log and drop it.
        """
        if on_malformed not in ("fail", "skip"):
            raise ValueError(
                f"on_malformed must be 'fail' or 'skip', got {on_malformed!r}"
            )
        self.path = path
        self.on_malformed = on_malformed
        self.samples: tuple[str, ...] = ()
        self.n_malformed = 0
        self._stream: TextIO | None = None
        self._stack: ExitStack | None = None
        self._line_number = 0

    def __enter__(self) -> "VCFReader":
        """Open stream and read the header."""
        with ExitStack() as stack:
            self._stream = stack.enter_context(open_vcf_stream(self.path))
            self.samples, self._line_number = read_header(self._stream)
            self._stack = stack.pop_all()
        logger.info(f"Read header from {self.path}: {self.n_samples} samples")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close stream (and wait for the decompressor, if any)."""
        stack, self._stack = self._stack, None
        self._stream = None
        if stack is not None:
            stack.__exit__(exc_type, exc_val, exc_tb)

    @property
    def n_samples(self) -> int:
        """Number of samples in the header."""
        return len(self.samples)

    def raw_lines(self) -> Iterator[tuple[int, str]]:
        """Yield (line_number, line) for each non-blank data line."""
        if self._stream is None:
            raise RuntimeError("Reader not opened. Use as context manager.")
        for line in self._stream:
            self._line_number += 1
            if not line.strip():
                continue
            yield self._line_number, line

    def variants(self) -> Iterator[Variant]:
        """Yield parsed Variants, applying the malformed-record policy."""
        for line_number, line in self.raw_lines():
            try:
                variant = parse_variant(line, self.n_samples, line_number)
            except MalformedRecordError as e:
                if self.on_malformed == "fail":
                    raise
                self.n_malformed += 1
                logger.warning(f"Skipping malformed record at {e}")
                continue
            yield variant

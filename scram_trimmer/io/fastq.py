"""
FASTQ reading and writing.

Records are four lines: '@' header, sequence, '+' separator, quality.
Structural problems raise FastqFormatError, which aborts the run since the
framing of the rest of the stream can no longer be trusted.
"""

import gzip
from pathlib import Path
from typing import IO, Iterable, Iterator, Union

from ..core.models import FastqRead

HEADER_SENTINEL = '@'
SEPARATOR = '+'
FASTQ_ENCODING = 'ascii'


class FastqFormatError(ValueError):
    """Raised when the input is not valid 4-line FASTQ."""

    def __init__(self, message: str, line_number: int):
        super().__init__(f"invalid fastq file (line {line_number}): {message}")
        self.line_number = line_number


def open_fastq(path: Union[str, Path], mode: str = 'rt') -> IO[str]:
    """
    Open a FASTQ file as ASCII text, transparently (de)compressing '.gz' paths.

    FASTQ is ASCII; the encoding is fixed so the result does not depend on
    the locale.
    """
    open_func = gzip.open if str(path).endswith('.gz') else open
    return open_func(path, mode, encoding=FASTQ_ENCODING)


def read_fastq(handle: IO[str]) -> Iterator[FastqRead]:
    """
    Lazily parse FASTQ records from a text stream.

    Args:
        handle: Open text stream positioned at the start of a record

    Yields:
        FastqRead objects in file order

    Raises:
        FastqFormatError: Missing '@', wrong separator, sequence/quality
            length mismatch, a record cut short by end of stream, or non-ASCII
            input (line numbers of undecodable bytes are approximate, since
            the stream decodes ahead of the parser)
    """
    line_number = 0

    while True:
        header = _next_line(handle, line_number + 1)
        if not header:
            return
        line_number += 1

        if not header.startswith(HEADER_SENTINEL):
            raise FastqFormatError(
                f"expected '{HEADER_SENTINEL}' at the beginning of header line, "
                f"got: {header.rstrip()}",
                line_number,
            )

        body = []
        for _ in range(3):
            line = _next_line(handle, line_number + 1)
            if not line:
                raise FastqFormatError("truncated record at end of file", line_number)
            line_number += 1
            body.append(line.rstrip('\r\n'))
        sequence, separator, quality = body

        if separator != SEPARATOR:
            raise FastqFormatError(
                f"expected '{SEPARATOR}' line, got: {separator}",
                line_number - 1,
            )

        if len(sequence) != len(quality):
            raise FastqFormatError(
                "sequence and quality strings must have the same length, "
                f"got: {len(sequence)} and {len(quality)}",
                line_number,
            )

        yield FastqRead(header=header.rstrip('\r\n'), sequence=sequence, quality=quality)


def _next_line(handle: IO[str], line_number: int) -> str:
    """Read one line, rejecting anything outside ASCII."""
    try:
        line = handle.readline()
    except UnicodeDecodeError as e:
        raise FastqFormatError(f"non-ASCII byte in input: {e.reason}", line_number) from e
    if not line.isascii():
        raise FastqFormatError("non-ASCII character in input", line_number)
    return line


def format_read(read: FastqRead) -> str:
    """Serialize one read as a 4-line FASTQ record."""
    return f"{read.header}\n{read.sequence}\n{SEPARATOR}\n{read.quality}\n"


def write_reads(reads: Iterable[FastqRead], handle: IO[str]) -> int:
    """Write reads to an open text stream. Returns the number written."""
    count = 0
    for read in reads:
        handle.write(format_read(read))
        count += 1
    return count

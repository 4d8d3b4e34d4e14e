"""
Adapter and flank trimming for small-RNA reads.

A read is kept only if the adapter prefix is found, the window left after
removing the 5'/3' flanks is long enough, and the mean base-call error over
that window is below the configured threshold.
"""

from typing import Union

import numpy as np

from ..config import TrimParameters
from .models import FastqRead, RejectionReason

PHRED_OFFSET = 33

# Error probability for every possible byte value, indexed by character code
_ERROR_BY_CODE = np.power(10.0, -(np.arange(256, dtype=np.float64) - PHRED_OFFSET) / 10.0)
# Same table as plain floats, for per-read sums
_ERROR_LOOKUP = _ERROR_BY_CODE.tolist()

TrimOutcome = Union[FastqRead, RejectionReason]


def phred33_to_error(qual: Union[str, int]) -> float:
    """
    Convert one Phred+33 quality value to an error probability.

    Args:
        qual: Quality character (e.g. 'I') or its character code

    Returns:
        10 ** (-(code - 33) / 10)
    """
    code = ord(qual) if isinstance(qual, str) else qual
    return _ERROR_LOOKUP[code]


def mean_error(quality: str) -> float:
    """
    Mean error probability of a Phred+33 quality string.

    Returns NaN for an empty string; callers must not treat that as passing.
    """
    if not quality:
        return float('nan')
    return sum(_ERROR_LOOKUP[code] for code in quality.encode('latin-1')) / len(quality)


def trim_read(
    read: FastqRead,
    adapter: str,
    min_len: int,
    trim5: int,
    trim3: int,
    min5_match: int,
    max_error: float,
) -> TrimOutcome:
    """
    Trim the adapter and flanks from a read, or decide why it is rejected.

    Args:
        read: Input read
        adapter: Adapter sequence; only adapter[:min5_match] is searched for
        min_len: Minimum length of the retained window
        trim5: Bases removed from the 5' end
        trim3: Bases removed upstream of the adapter match
        min5_match: Number of leading adapter bases that must match exactly
        max_error: Reads with mean error >= this value are rejected

    Returns:
        A new FastqRead with the trimmed sequence and quality, or the
        RejectionReason explaining why the read was dropped.
    """
    adapter_index = read.sequence.find(adapter[:min5_match])
    if adapter_index == -1:
        return RejectionReason.ADAPTER_MISSING

    start = trim5
    end = adapter_index - trim3
    if trim5 < 0 or trim3 < 0 or end <= start or end - start < min_len:
        return RejectionReason.TOO_SHORT

    sequence = read.sequence[start:end]
    quality = read.quality[start:end]

    if mean_error(quality) >= max_error:
        return RejectionReason.LOW_QUALITY

    return FastqRead(header=read.header, sequence=sequence, quality=quality)


def trim(read: FastqRead, adapter: str, params: TrimParameters) -> TrimOutcome:
    """Apply trim_read with values taken from a TrimParameters object."""
    return trim_read(
        read,
        adapter,
        min_len=params.min_len,
        trim5=params.trim5,
        trim3=params.trim3,
        min5_match=params.min5_match,
        max_error=params.max_error,
    )

"""
Data models for scram-trimmer.
"""

from dataclasses import dataclass
from enum import Enum


class RejectionReason(Enum):
    """Why a read was dropped during trimming."""
    ADAPTER_MISSING = "adapter_missing"
    TOO_SHORT = "too_short"
    LOW_QUALITY = "low_quality"

    @property
    def label(self) -> str:
        """Human-readable label used in reports."""
        return self.value.replace('_', ' ')


@dataclass(frozen=True)
class FastqRead:
    """
    A single FASTQ record.

    Attributes:
        header: Identifier line, including the leading '@'
        sequence: Base calls
        quality: Phred+33 encoded quality string, same length as sequence
    """
    header: str
    sequence: str
    quality: str

    def __len__(self) -> int:
        return len(self.sequence)

    def __repr__(self) -> str:
        return f"FastqRead(header={self.header}, length={len(self.sequence)})"

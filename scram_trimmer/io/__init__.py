"""
I/O modules for scram-trimmer.
"""

from .fastq import (
    FastqFormatError,
    format_read,
    open_fastq,
    read_fastq,
    write_reads,
)
from .report import (
    format_count,
    print_summary,
    write_stats_tsv,
)

__all__ = [
    'FastqFormatError',
    'open_fastq',
    'read_fastq',
    'format_read',
    'write_reads',
    'format_count',
    'print_summary',
    'write_stats_tsv',
]

"""
Core trimming logic: read model, trimming decisions, and run statistics.
"""

from .models import FastqRead, RejectionReason
from .statistics import StatisticsSnapshot, TrimStatistics
from .trimming import (
    PHRED_OFFSET,
    TrimOutcome,
    mean_error,
    phred33_to_error,
    trim,
    trim_read,
)

__all__ = [
    # Models
    'FastqRead',
    'RejectionReason',
    # Trimming
    'trim_read',
    'trim',
    'phred33_to_error',
    'mean_error',
    'TrimOutcome',
    'PHRED_OFFSET',
    # Statistics
    'TrimStatistics',
    'StatisticsSnapshot',
]

"""
scram-trimmer - adapter and quality trimming for small-RNA sequencing reads.
"""

__version__ = "0.1.0"

from .config import OutputMode, RunConfig, TrimParameters
from .core.models import FastqRead, RejectionReason
from .core.statistics import StatisticsSnapshot, TrimStatistics
from .core.trimming import trim_read
from .pipeline import PipelineResult, TrimPipeline

__all__ = [
    "TrimParameters",
    "RunConfig",
    "OutputMode",
    "FastqRead",
    "RejectionReason",
    "TrimStatistics",
    "StatisticsSnapshot",
    "trim_read",
    "TrimPipeline",
    "PipelineResult",
    "__version__",
]

"""
Configuration classes for scram-trimmer runs.
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_BATCH_SIZE = 10_000
DEFAULT_WORKERS = 4
DEFAULT_QUEUE_SIZE = 16


def parse_adapter(value: str) -> str:
    """
    Strip surrounding whitespace from an adapter and check it is not empty.

    The adapter is otherwise kept exactly as given; matching is case-sensitive.

    Examples:
        >>> parse_adapter(" tggaattctcgg ")
        'tggaattctcgg'
    """
    value = (value or '').strip()
    if not value:
        raise ValueError("Invalid adapter sequence: adapter is empty")
    return value


class OutputMode(Enum):
    """How surviving reads reach the output file."""
    STREAM = "stream"  # dedicated writer thread fed by a bounded queue
    BUFFER = "buffer"  # collect everything, write after all workers finish


@dataclass(frozen=True)
class TrimParameters:
    """Per-read trimming thresholds, shared read-only by all workers."""
    min_len: int = 18
    trim5: int = 0
    trim3: int = 0
    min5_match: int = 8
    max_error: float = 0.1

    def validate(self, adapter: str) -> 'TrimParameters':
        """Check the parameters against the adapter. Returns self."""
        if not 1 <= self.min5_match <= len(adapter):
            raise ValueError(
                f"min5_match must be between 1 and the adapter length "
                f"({len(adapter)}), got {self.min5_match}"
            )
        for name in ('min_len', 'trim5', 'trim3'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.max_error <= 0:
            raise ValueError(f"max_error must be positive, got {self.max_error}")
        return self


@dataclass
class RunConfig:
    """Full configuration of one trimming run."""
    input_path: Optional[Path]
    output_path: Optional[Path]
    adapter: str
    params: TrimParameters = field(default_factory=TrimParameters)

    # Processing options
    batch_size: int = DEFAULT_BATCH_SIZE
    workers: int = DEFAULT_WORKERS
    queue_size: int = DEFAULT_QUEUE_SIZE
    mode: OutputMode = OutputMode.STREAM
    preserve_order: bool = False

    # Optional statistics TSV
    stats_file: Optional[Path] = None

    def validate(self) -> 'RunConfig':
        """Validate all settings, stripping the adapter. Returns self."""
        self.adapter = parse_adapter(self.adapter)
        self.params.validate(self.adapter)
        for name in ('batch_size', 'workers', 'queue_size'):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        return self

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'RunConfig':
        """Create from a dictionary (e.g. parsed YAML). Missing keys use defaults."""
        param_names = {f.name for f in fields(TrimParameters)}
        params = TrimParameters(**{k: v for k, v in d.items() if k in param_names})

        stats_file = d.get('stats_file')

        return cls(
            input_path=Path(d['input']) if d.get('input') else None,
            output_path=Path(d['output']) if d.get('output') else None,
            adapter=d.get('adapter', ''),
            params=params,
            batch_size=d.get('batch_size', DEFAULT_BATCH_SIZE),
            workers=d.get('threads', DEFAULT_WORKERS),
            queue_size=d.get('queue_size', DEFAULT_QUEUE_SIZE),
            mode=OutputMode(d.get('mode', OutputMode.STREAM.value)),
            preserve_order=d.get('preserve_order', False),
            stats_file=Path(stats_file) if stats_file else None,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> 'RunConfig':
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def with_overrides(self, **overrides) -> 'RunConfig':
        """Return a copy with non-None values replaced (trim parameters included)."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        param_names = {f.name for f in fields(TrimParameters)}
        param_overrides = {k: overrides.pop(k) for k in list(overrides) if k in param_names}
        return replace(self, params=replace(self.params, **param_overrides), **overrides)

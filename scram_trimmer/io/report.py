"""
Run summaries: console report and statistics TSV.
"""

from pathlib import Path
from typing import Optional
import logging

import click
import pandas as pd

from ..core.models import RejectionReason
from ..core.statistics import StatisticsSnapshot

logger = logging.getLogger(__name__)


def format_count(value: int) -> str:
    """Format an integer with comma thousands separators (1234567 -> '1,234,567')."""
    return f"{value:,}"


def print_summary(snapshot: StatisticsSnapshot, elapsed: Optional[float] = None):
    """Print the end-of-run statistics to the console."""
    click.echo(f"\nTotal reads: {format_count(snapshot.total)}")
    click.echo(f"Trimmed reads: {format_count(snapshot.trimmed)}")
    click.secho(
        f"Percentage of trimmed reads: {snapshot.trimmed_percentage:.2f}%",
        fg='bright_green',
    )

    click.echo()
    for reason in RejectionReason:
        click.secho(
            f"{reason.label.capitalize()} count: {format_count(snapshot.count_for(reason))}",
            fg='bright_magenta',
        )

    if elapsed is not None:
        click.echo(f"\nExecution time: {elapsed:.2f}s")


def write_stats_tsv(
    snapshot: StatisticsSnapshot,
    output_path: Path,
    elapsed: Optional[float] = None,
) -> Path:
    """
    Write run statistics as a one-row TSV.

    Args:
        snapshot: Final statistics of the run
        output_path: Path for output TSV
        elapsed: Optional run time in seconds

    Returns:
        Path to written file
    """
    row = snapshot.as_dict()
    row['trimmed_pct'] = f"{snapshot.trimmed_percentage:.2f}"
    if elapsed is not None:
        row['elapsed_seconds'] = f"{elapsed:.3f}"

    df = pd.DataFrame([row])
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote statistics to {output_path}")

    return Path(output_path)

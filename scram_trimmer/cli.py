"""
Command-line interface for scram-trimmer.
"""

import logging
import sys
from pathlib import Path

import click
import yaml

from . import __version__
from .config import OutputMode, RunConfig

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
def cli():
    """scram-trimmer: adapter and quality trimming for small-RNA reads."""
    pass


@cli.command()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='YAML configuration file (command-line options take precedence)')
@click.option('--input', '-i', 'input_path', type=click.Path(),
              help='Input FASTQ file, gzipped if it ends in .gz (required)')
@click.option('--output', '-o', 'output_path', type=click.Path(),
              help='Output FASTQ file, gzipped if it ends in .gz (required)')
@click.option('--adapter', '-a', type=str,
              help='Adapter sequence (required)')
@click.option('--min-len', '-minLen', 'min_len', type=int,
              help='Minimum length of read (default: 18)')
@click.option('--trim5', '-trim5', 'trim5', type=int,
              help="5' trim length (default: 0)")
@click.option('--trim3', '-trim3', 'trim3', type=int,
              help="3' trim length (default: 0)")
@click.option('--min5-match', '-min5Match', 'min5_match', type=int,
              help="Minimum match length at 5' end of the adapter (default: 8)")
@click.option('--max-error', '-maxError', 'max_error', type=float,
              help='Maximum mean error rate (default: 0.1)')
@click.option('--threads', '-t', type=int,
              help='Number of worker threads (default: 4)')
@click.option('--batch-size', type=int,
              help='Reads per batch (default: 10000)')
@click.option('--queue-size', type=int,
              help='Batches buffered between workers and writer (default: 16)')
@click.option('--mode', type=click.Choice([m.value for m in OutputMode]),
              help='Output mode: stream while trimming, or buffer and write at the end (default: stream)')
@click.option('--preserve-order/--no-preserve-order', default=None,
              help='Write surviving reads in input order (default: off)')
@click.option('--stats-file', type=click.Path(),
              help='Optional TSV file for run statistics')
@click.pass_context
def trim(ctx, config, input_path, output_path, adapter, min_len, trim5, trim3,
         min5_match, max_error, threads, batch_size, queue_size, mode,
         preserve_order, stats_file):
    """
    Trim adapters and flanks from single-end reads.

    \b
    Example:
      scram-trim trim -i sample.fastq.gz -o sample.trimmed.fastq.gz \\
                      -a TGGAATTCTCGG -minLen 18 -min5Match 8
    """
    from .io.report import print_summary, write_stats_tsv
    from .pipeline import TrimPipeline

    # Set up logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        if config:
            run_config = RunConfig.from_yaml(Path(config))
        else:
            run_config = RunConfig(input_path=None, output_path=None, adapter='')
    except (ValueError, TypeError, yaml.YAMLError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    run_config = run_config.with_overrides(
        input_path=Path(input_path) if input_path else None,
        output_path=Path(output_path) if output_path else None,
        adapter=adapter,
        min_len=min_len,
        trim5=trim5,
        trim3=trim3,
        min5_match=min5_match,
        max_error=max_error,
        workers=threads,
        batch_size=batch_size,
        queue_size=queue_size,
        mode=OutputMode(mode) if mode else None,
        preserve_order=preserve_order,
        stats_file=Path(stats_file) if stats_file else None,
    )

    if not (run_config.input_path and run_config.output_path and run_config.adapter):
        click.echo("Missing required arguments")
        click.echo(ctx.get_help())
        return

    try:
        run_config.validate()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    pipeline = TrimPipeline.from_config(run_config)

    try:
        result = pipeline.run(run_config.input_path, run_config.output_path)
    except (ValueError, OSError, RuntimeError) as e:
        logger.critical(f"Error processing reads: {e}")
        sys.exit(1)

    print_summary(result.statistics, result.elapsed)

    if run_config.stats_file:
        write_stats_tsv(result.statistics, run_config.stats_file, result.elapsed)

    click.echo("\nTrimming completed")


@cli.command()
@click.option('--output', '-o', type=click.Path(), default='scram_trim.yaml',
              help='Output config file path')
def init(output):
    """Generate a template configuration file."""
    template = '''# scram-trimmer configuration template
# Edit this file, then run: scram-trim trim --config <this file>

# Required
input: sample.fastq.gz              # Input FASTQ (gzipped if it ends in .gz)
output: sample.trimmed.fastq.gz     # Output FASTQ
adapter: TGGAATTCTCGGGTGCCAAGG      # 3' adapter sequence

# Trimming thresholds
min_len: 18       # Minimum read length after trimming
trim5: 0          # Bases removed from the 5' end
trim3: 0          # Bases removed upstream of the adapter
min5_match: 8     # Leading adapter bases that must match exactly
max_error: 0.1    # Maximum mean base-call error probability

# Processing options
threads: 4
batch_size: 10000
queue_size: 16
mode: stream          # stream or buffer
preserve_order: false

# Optional: per-run statistics TSV
# stats_file: sample.trim_stats.tsv
'''

    with open(output, 'w') as f:
        f.write(template)

    click.echo(f"Generated configuration template: {output}")
    click.echo("\nEdit this file and run:")
    click.echo(f"  scram-trim trim --config {output}")


if __name__ == '__main__':
    cli()

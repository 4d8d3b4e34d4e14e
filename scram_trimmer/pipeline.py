"""
Concurrent batch trimming pipeline.

Reads are parsed on the calling thread, grouped into fixed-size batches and
trimmed by a bounded pool of worker threads. Survivors reach the output in
one of two ways:

- STREAM: workers push each batch's survivors onto a bounded queue that a
  single writer thread drains while trimming continues.
- BUFFER: workers append survivors to a lock-guarded list that is written
  once every worker has finished.

Output order follows input order only when preserve_order is set.

Trimming is pure Python, so the GIL lets the workers run concurrently but
not in parallel; the pool overlaps parsing, trimming and writing rather than
using several cores.
"""

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import IO, Callable, Iterable, Iterator, List, Optional, Union

from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_WORKERS,
    OutputMode,
    RunConfig,
    TrimParameters,
    parse_adapter,
)
from .core.models import FastqRead, RejectionReason
from .core.statistics import StatisticsSnapshot, TrimStatistics
from .core.trimming import trim
from .io.fastq import open_fastq, read_fastq, write_reads

logger = logging.getLogger(__name__)

# Marks the end of input on the writer queue
_CLOSED = object()

Forward = Callable[[int, List[FastqRead]], None]


@dataclass
class PipelineResult:
    """Outcome of a completed run."""
    statistics: StatisticsSnapshot
    elapsed: float
    input_path: Optional[Path] = None
    output_path: Optional[Path] = None


def iter_batches(records: Iterable[FastqRead], batch_size: int) -> Iterator[List[FastqRead]]:
    """Group records into lists of batch_size; the last batch may be shorter."""
    iterator = iter(records)
    while True:
        batch = list(islice(iterator, batch_size))
        if not batch:
            return
        yield batch


def trim_batch(
    batch: List[FastqRead],
    adapter: str,
    params: TrimParameters,
    stats: TrimStatistics,
) -> List[FastqRead]:
    """Trim every read of a batch, count outcomes, and return the survivors."""
    survivors = []
    for read in batch:
        outcome = trim(read, adapter, params)
        if isinstance(outcome, RejectionReason):
            stats.add_rejection(outcome)
        else:
            survivors.append(outcome)

    stats.add_total(len(batch))
    stats.add_trimmed(len(survivors))
    return survivors


class TrimPipeline:
    """
    Trim a stream of FASTQ reads with a bounded pool of worker threads.

    Example usage:
        pipeline = TrimPipeline(
            adapter='TGGAATTCTCGG',
            params=TrimParameters(min_len=18, min5_match=8),
            workers=8,
        )
        result = pipeline.run(Path('sample.fastq.gz'), Path('sample.trimmed.fastq.gz'))
    """

    def __init__(
        self,
        adapter: str,
        params: Optional[TrimParameters] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        workers: int = DEFAULT_WORKERS,
        mode: OutputMode = OutputMode.STREAM,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        preserve_order: bool = False,
    ):
        self.adapter = parse_adapter(adapter)
        self.params = (params or TrimParameters()).validate(self.adapter)
        if batch_size < 1 or workers < 1 or queue_size < 1:
            raise ValueError(
                f"batch_size, workers and queue_size must be at least 1, "
                f"got {batch_size}, {workers}, {queue_size}"
            )
        self.batch_size = batch_size
        self.workers = workers
        self.mode = mode
        self.queue_size = queue_size
        self.preserve_order = preserve_order

    @classmethod
    def from_config(cls, config: RunConfig) -> 'TrimPipeline':
        """Create a pipeline from a validated RunConfig."""
        return cls(
            adapter=config.adapter,
            params=config.params,
            batch_size=config.batch_size,
            workers=config.workers,
            mode=config.mode,
            queue_size=config.queue_size,
            preserve_order=config.preserve_order,
        )

    def run(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
    ) -> PipelineResult:
        """
        Trim a FASTQ file into a new FASTQ file.

        Args:
            input_path: Input FASTQ ('.gz' is decompressed)
            output_path: Output FASTQ ('.gz' is compressed)

        Returns:
            PipelineResult with final statistics and elapsed seconds

        Raises:
            FastqFormatError: Structurally invalid input
            OSError: Any read, write or (de)compression failure
        """
        start = time.perf_counter()
        logger.info(f"Trimming {input_path} -> {output_path}")

        with open_fastq(input_path, 'rt') as source, open_fastq(output_path, 'wt') as sink:
            snapshot = self.process(read_fastq(source), sink)

        elapsed = time.perf_counter() - start
        logger.info(
            f"Kept {snapshot.trimmed}/{snapshot.total} reads "
            f"({snapshot.trimmed_percentage:.2f}%) in {elapsed:.2f}s"
        )

        return PipelineResult(
            statistics=snapshot,
            elapsed=elapsed,
            input_path=Path(input_path),
            output_path=Path(output_path),
        )

    def process(self, records: Iterable[FastqRead], sink: IO[str]) -> StatisticsSnapshot:
        """
        Trim records and write survivors to an open text stream.

        Returns:
            Final statistics of the run
        """
        stats = TrimStatistics()

        logger.info(
            f"Processing with {self.workers} workers, batch size {self.batch_size}, "
            f"{self.mode.value} output"
        )

        if self.mode is OutputMode.STREAM:
            self._process_streaming(records, sink, stats)
        else:
            self._process_buffered(records, sink, stats)

        snapshot = stats.snapshot()
        if not snapshot.is_consistent:
            raise RuntimeError(f"Read counts do not add up: {snapshot.as_dict()}")
        return snapshot

    def _process_buffered(self, records, sink, stats):
        collected = []
        lock = threading.Lock()

        def collect(batch_index, survivors):
            with lock:
                collected.append((batch_index, survivors))

        self._dispatch(records, stats, collect, threading.Event())

        if self.preserve_order:
            collected.sort(key=lambda item: item[0])

        written = 0
        for _, survivors in collected:
            written += write_reads(survivors, sink)
        logger.debug(f"Wrote {written} buffered reads")

    def _process_streaming(self, records, sink, stats):
        channel = queue.Queue(maxsize=self.queue_size)
        abort = threading.Event()
        slots = threading.BoundedSemaphore(self.workers * 2)
        errors = []

        # Ordered output holds a batch's slot until the writer has written it,
        # so batches parked behind a slow one still count against the limit
        held_until_written = self.preserve_order

        writer = threading.Thread(
            target=self._drain,
            args=(channel, sink, abort, errors, slots if held_until_written else None),
            name='fastq-writer',
            daemon=True,
        )
        writer.start()

        try:
            self._dispatch(
                records, stats, lambda i, s: channel.put((i, s)), abort,
                slots, held_until_written=held_until_written,
            )
        finally:
            channel.put(_CLOSED)
            writer.join()

        if errors:
            raise errors[0]

    def _drain(
        self,
        channel: queue.Queue,
        sink: IO[str],
        abort: threading.Event,
        errors: list,
        slots: Optional[threading.BoundedSemaphore] = None,
    ):
        """
        Writer thread: serialize survivors until the queue is closed.

        When slots is given, one slot is released per batch once it has been
        written or discarded.
        """
        def release(n=1):
            if slots is not None:
                for _ in range(n):
                    slots.release()

        pending = {}
        next_index = 0
        written = 0

        while True:
            item = channel.get()
            if item is _CLOSED:
                break
            if abort.is_set():
                # Keep draining so producers blocked on put() can finish
                release()
                continue

            batch_index, survivors = item
            try:
                if self.preserve_order:
                    pending[batch_index] = survivors
                    while next_index in pending:
                        ready = pending.pop(next_index)
                        next_index += 1
                        try:
                            written += write_reads(ready, sink)
                        finally:
                            release()
                else:
                    written += write_reads(survivors, sink)
            except Exception as e:
                logger.error(f"Writer failed after {written} reads: {e}")
                errors.append(e)
                abort.set()
                release(len(pending))
                pending.clear()

        logger.debug(f"Writer finished: {written} reads written")

    def _dispatch(
        self,
        records: Iterable[FastqRead],
        stats: TrimStatistics,
        forward: Forward,
        abort: threading.Event,
        slots: Optional[threading.BoundedSemaphore] = None,
        held_until_written: bool = False,
    ):
        """
        Submit batches to the worker pool, never more than 2 * workers at once.

        With held_until_written the writer releases each batch's slot; a
        worker that fails releases its own, since its batch never reaches
        the writer.
        """
        if slots is None:
            slots = threading.BoundedSemaphore(self.workers * 2)

        def on_done(future: Future):
            if not held_until_written or future.exception() is not None:
                slots.release()

        in_flight: List[Future] = []
        n_batches = 0

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix='trim-worker') as executor:
            for batch_index, batch in enumerate(iter_batches(records, self.batch_size)):
                if abort.is_set():
                    logger.warning("Output failed, stopping dispatch")
                    break

                slots.acquire()
                future = executor.submit(self._run_batch, batch_index, batch, stats, forward)
                future.add_done_callback(on_done)
                in_flight.append(future)
                n_batches += 1

                in_flight = _reap(in_flight)

        for future in in_flight:
            future.result()

        logger.debug(f"Dispatched {n_batches} batches")

    def _run_batch(self, batch_index, batch, stats, forward):
        survivors = trim_batch(batch, self.adapter, self.params, stats)
        logger.debug(f"Completed batch {batch_index + 1} ({len(survivors)}/{len(batch)} kept)")
        forward(batch_index, survivors)


def _reap(futures: List[Future]) -> List[Future]:
    """Drop finished futures, re-raising the first worker failure."""
    running = []
    for future in futures:
        if future.done():
            future.result()
        else:
            running.append(future)
    return running

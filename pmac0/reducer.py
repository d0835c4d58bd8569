"""
All-to-one reduction of partial tags and the backends that run workers.

This module provides:
- DistributedReducer: XOR of all partial tags, finalized once with F2
- SerialRunner: the W logical workers one after another, in-process
- ProcessPoolRunner: one task per worker on a process pool
- MPIRunner: the logical workers spread over MPI processes (mpi4py)

Roles are fixed: rank W-1 pads (see assignment), rank COMBINING_RANK
receives the reduced tag and is the only place F2 is applied. The
reduction is a barrier: it never produces a tag from an incomplete set of
partials. A failing worker fails the whole run; there is no retry and no
timeout.
"""

import logging
import os
from concurrent.futures import ProcessPoolExecutor, wait
from typing import Iterable, Mapping, Optional

from .assignment import WorkAssignment, split_assignments
from .crypto import WORD_MASK, KeyTriple
from .errors import ConfigurationError, ReductionError
from .transforms import BlockTransform
from .worker import DEFAULT_CHUNK_SIZE, WorkerResult, WorkerTask, run_worker

logger = logging.getLogger(__name__)

COMBINING_RANK = 0

BACKENDS = ("serial", "pool", "mpi")


# =============================================================================
# REDUCER
# =============================================================================

class DistributedReducer:
    """
    Combines the partial tags of all W workers into the final tag.

    Usage:
        reducer = DistributedReducer(worker_count, keys, transform)
        tag = reducer.reduce({rank: partial for ...})
    """

    combining_rank = COMBINING_RANK

    def __init__(self, worker_count: int, keys: KeyTriple, transform: BlockTransform):
        if worker_count < 1:
            raise ValueError(f"Worker count must be >= 1 (got {worker_count})")
        self.worker_count = worker_count
        self._k2 = keys.k2
        self._f2 = transform.f2

    def combine(self, partials: Mapping[int, int]) -> int:
        """
        XOR all partial tags.

        Args:
            partials: Partial tag per rank; must hold exactly ranks 0..W-1

        Returns:
            int: Global (not yet finalized) tag

        Raises:
            ReductionError: If a rank is missing or unexpected
        """
        expected = set(range(self.worker_count))
        received = set(partials)
        if received != expected:
            missing = sorted(expected - received)
            unexpected = sorted(received - expected)
            raise ReductionError(
                f"Reduction barrier incomplete: missing ranks {missing}, "
                f"unexpected ranks {unexpected}"
            )

        tag = 0
        for rank in sorted(partials):
            tag ^= partials[rank]
        return tag & WORD_MASK

    def finalize(self, tag: int) -> int:
        """Apply F2(k2, tag); done once, on the combining rank only."""
        return self._f2(self._k2, tag)

    def reduce(self, partials: Mapping[int, int]) -> int:
        return self.finalize(self.combine(partials))

    def reduce_results(self, results: Iterable[WorkerResult]) -> int:
        """Reduce worker results, rejecting a rank reported twice."""
        partials = {}
        for result in results:
            if result.rank in partials:
                raise ReductionError(f"Rank {result.rank} reported more than once")
            partials[result.rank] = result.partial_tag
        return self.reduce(partials)


# =============================================================================
# RUNNERS
# =============================================================================

class Runner:
    """
    Executes the W logical workers and the reduction.

    `run` returns the finalized tag on the process holding the combining
    role and None everywhere else.
    """

    name = "base"

    @property
    def is_combining(self) -> bool:
        """Whether this process receives the finalized tag."""
        return True

    def run(self, path: str, file_length: int, worker_count: int,
            keys: KeyTriple, transform: BlockTransform,
            chunk_size: int = DEFAULT_CHUNK_SIZE) -> Optional[int]:
        raise NotImplementedError

    @staticmethod
    def _tasks(path, file_length, worker_count, keys, transform, chunk_size):
        return [
            WorkerTask(path, assignment, keys, transform, chunk_size)
            for assignment in split_assignments(file_length, worker_count)
        ]


class SerialRunner(Runner):
    """Degenerate backend: every logical worker runs in the calling process."""

    name = "serial"

    def run(self, path, file_length, worker_count, keys, transform,
            chunk_size=DEFAULT_CHUNK_SIZE):
        reducer = DistributedReducer(worker_count, keys, transform)
        tasks = self._tasks(path, file_length, worker_count, keys, transform, chunk_size)
        return reducer.reduce_results(run_worker(task) for task in tasks)


class ProcessPoolRunner(Runner):
    """
    Runs one task per logical worker on a ProcessPoolExecutor.

    The number of OS processes only bounds parallelism; the tag depends on
    the logical worker count alone. The coordinating process holds the
    combining role and reduces after every task has completed.
    """

    name = "pool"

    def __init__(self, processes: Optional[int] = None):
        if processes is not None and processes < 1:
            raise ConfigurationError(f"Process count must be >= 1 (got {processes})")
        self.processes = processes

    def _pool_size(self, worker_count: int) -> int:
        limit = self.processes or os.cpu_count() or 1
        return max(1, min(limit, worker_count))

    def run(self, path, file_length, worker_count, keys, transform,
            chunk_size=DEFAULT_CHUNK_SIZE):
        reducer = DistributedReducer(worker_count, keys, transform)
        tasks = self._tasks(path, file_length, worker_count, keys, transform, chunk_size)
        pool_size = self._pool_size(worker_count)
        logger.debug("running %d workers on %d processes", worker_count, pool_size)

        with ProcessPoolExecutor(max_workers=pool_size) as executor:
            futures = [executor.submit(run_worker, task) for task in tasks]
            wait(futures)

        # Any worker failure fails the run; result() re-raises it.
        return reducer.reduce_results(future.result() for future in futures)


class MPIRunner(Runner):
    """
    Spreads the W logical workers over the processes of an MPI communicator.

    Process r runs logical ranks r, r+size, r+2*size, ... and XORs their
    partial tags locally. The per-process values are combined with an MPI
    BXOR reduction onto COMBINING_RANK, which alone applies F2. Processes
    beyond W contribute 0. The tag depends on W only, never on the
    communicator size.
    """

    name = "mpi"

    def __init__(self, comm=None):
        from mpi4py import MPI

        self._bxor = MPI.BXOR
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()

    @property
    def is_combining(self) -> bool:
        return self.rank == COMBINING_RANK

    def local_ranks(self, worker_count: int) -> range:
        """Logical ranks run by this process."""
        return range(self.rank, worker_count, self.size)

    def run(self, path, file_length, worker_count, keys, transform,
            chunk_size=DEFAULT_CHUNK_SIZE):
        reducer = DistributedReducer(worker_count, keys, transform)
        ranks = self.local_ranks(worker_count)
        logger.debug("process %d/%d runs logical ranks %s", self.rank, self.size, list(ranks))

        partial = 0
        for rank in ranks:
            assignment = WorkAssignment(rank, worker_count, file_length)
            partial ^= run_worker(WorkerTask(path, assignment, keys, transform, chunk_size)).partial_tag

        # Every process joins the reduction, including those with no ranks.
        total = self.comm.reduce(partial, op=self._bxor, root=COMBINING_RANK)
        if not self.is_combining:
            return None
        return reducer.finalize(total & WORD_MASK)


def make_runner(backend: str = "pool", processes: Optional[int] = None) -> Runner:
    """
    Build the runner for a backend name.

    Raises:
        ConfigurationError: For an unknown backend name
    """
    if backend == "serial":
        return SerialRunner()
    if backend == "pool":
        return ProcessPoolRunner(processes)
    if backend == "mpi":
        return MPIRunner()
    raise ConfigurationError(f"Unknown backend: {backend!r} (choose from {', '.join(BACKENDS)})")

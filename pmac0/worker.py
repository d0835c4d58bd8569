"""
Local block-processing loop of one logical worker.

Each worker opens its own read-only handle on the target file (no shared
cursor), reads only the part of the file that contains its strided
offsets, feeds its bytes through a TagAccumulator and returns its partial
tag. Workers never communicate during this phase.
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from .accumulator import TagAccumulator
from .assignment import WorkAssignment
from .crypto import KeyTriple
from .errors import InputError
from .transforms import BlockTransform

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1 << 16


@dataclass(frozen=True)
class WorkerTask:
    """Everything one worker needs; picklable so it can cross process boundaries."""

    path: str
    assignment: WorkAssignment
    keys: KeyTriple
    transform: BlockTransform
    chunk_size: int = DEFAULT_CHUNK_SIZE


@dataclass(frozen=True)
class WorkerResult:
    rank: int
    partial_tag: int
    blocks: int


def read_strided(path: str, assignment: WorkAssignment,
                 chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yield the bytes at the worker's strided offsets, in offset order.

    Reads are aligned to multiples of the worker count so that slicing
    each chunk at [rank::W] yields exactly the worker's offsets. Reading
    stops at the assigned file length or at end of file, whichever comes
    first. A worker with no offsets does not open the file.

    Args:
        path: Target file
        assignment: The worker's share of the file
        chunk_size: Approximate bytes read per system call

    Yields:
        bytes: Consecutive runs of the worker's bytes
    """
    if assignment.real_block_count == 0:
        return

    stride = assignment.worker_count
    span = max(1, chunk_size // stride) * stride

    with open(path, "rb") as f:
        position = 0
        while position < assignment.file_length:
            wanted = min(span, assignment.file_length - position)
            f.seek(position)
            chunk = f.read(wanted)
            if not chunk:
                break
            yield chunk[assignment.rank::stride]
            if len(chunk) < wanted:
                break
            position += span


def run_worker(task: WorkerTask) -> WorkerResult:
    """
    Compute one worker's partial tag from the file.

    Raises:
        InputError: If the file cannot be opened or read
    """
    acc = TagAccumulator(task.keys, task.transform)
    try:
        for chunk in read_strided(task.path, task.assignment, task.chunk_size):
            acc.absorb_many(chunk)
    except OSError as e:
        raise InputError(f"Failed to read {task.path}: {e}") from e

    return _finish(acc, task.assignment)


def run_worker_on_bytes(data: bytes, assignment: WorkAssignment,
                        keys: KeyTriple, transform: BlockTransform) -> WorkerResult:
    """Compute one worker's partial tag from an in-memory message."""
    acc = TagAccumulator(keys, transform)
    acc.absorb_many(data[assignment.rank:assignment.file_length:assignment.worker_count])
    return _finish(acc, assignment)


def _finish(acc: TagAccumulator, assignment: WorkAssignment) -> WorkerResult:
    partial = acc.finish(assignment)
    logger.debug(
        "worker %d/%d folded %d blocks (pad=%d) partial=%d",
        assignment.rank, assignment.worker_count, acc.blocks,
        assignment.pad_length, partial,
    )
    return WorkerResult(rank=assignment.rank, partial_tag=partial, blocks=acc.blocks)

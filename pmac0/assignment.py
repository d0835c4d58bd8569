"""
Work assignment for the W cooperating workers.

Worker `rank` owns the strided offsets rank, rank+W, rank+2W, ... below the
file length. The last worker (rank W-1) additionally processes the marker
byte and the zero padding, so that the padded block count

    L + 1 + pad    with    pad = (W - (L + 1) mod W) mod W

is an exact multiple of W. The convention is fixed: it holds even when the
last worker owns no real bytes (W > L) and when the file is empty.
"""

from dataclasses import dataclass
from typing import Iterator, List


def pad_length_for(file_length: int, worker_count: int) -> int:
    """
    Number of zero pad blocks after the marker byte.

    Args:
        file_length: Real byte count L
        worker_count: Worker count W

    Returns:
        int: pad with 0 <= pad < W and (L + 1 + pad) % W == 0
    """
    _check_counts(file_length, worker_count)
    return (worker_count - (file_length + 1) % worker_count) % worker_count


def padded_length(file_length: int, worker_count: int) -> int:
    """Total block count: real bytes + marker + padding."""
    return file_length + 1 + pad_length_for(file_length, worker_count)


def _check_counts(file_length: int, worker_count: int) -> None:
    if worker_count < 1:
        raise ValueError(f"Worker count must be >= 1 (got {worker_count})")
    if file_length < 0:
        raise ValueError(f"File length must be >= 0 (got {file_length})")


@dataclass(frozen=True)
class WorkAssignment:
    """
    The share of the message owned by one worker.

    Attributes:
        rank: 0-indexed worker identity
        worker_count: Total number of workers W
        file_length: Real byte count L of the message
    """

    rank: int
    worker_count: int
    file_length: int

    def __post_init__(self):
        _check_counts(self.file_length, self.worker_count)
        if not 0 <= self.rank < self.worker_count:
            raise ValueError(
                f"Rank {self.rank} out of range for {self.worker_count} workers"
            )

    @property
    def is_last(self) -> bool:
        """True for the worker that appends the marker and the padding."""
        return self.rank == self.worker_count - 1

    def offsets(self) -> Iterator[int]:
        """Strided file offsets owned by this worker, in increasing order."""
        return iter(range(self.rank, self.file_length, self.worker_count))

    @property
    def real_block_count(self) -> int:
        if self.rank >= self.file_length:
            return 0
        return (self.file_length - self.rank - 1) // self.worker_count + 1

    @property
    def pad_length(self) -> int:
        """Zero blocks this worker appends (0 except for the last worker)."""
        if not self.is_last:
            return 0
        return pad_length_for(self.file_length, self.worker_count)

    @property
    def block_count(self) -> int:
        """Blocks folded by this worker: real, plus marker and pad if last."""
        if self.is_last:
            return self.real_block_count + 1 + self.pad_length
        return self.real_block_count


def split_assignments(file_length: int, worker_count: int) -> List[WorkAssignment]:
    """
    Assignments of all workers in rank order.

    The offsets are pairwise disjoint and cover range(file_length); together
    with the last worker's marker and padding the block counts sum to
    padded_length(file_length, worker_count).
    """
    _check_counts(file_length, worker_count)
    return [WorkAssignment(rank, worker_count, file_length) for rank in range(worker_count)]

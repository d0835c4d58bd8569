"""
PMAC0 engine: compute, sign and verify file tags.

Control flow of one run:

    WorkAssignment (per rank)
        -> TagAccumulator (MaskSequencer + F1), one per worker
        -> DistributedReducer (XOR barrier onto rank 0)
        -> F2 on the combining rank only

The tag is a deterministic function of the file bytes, the key triple,
the transform variant and the logical worker count W. The backend and the
number of OS processes do not change it.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .assignment import split_assignments
from .config import PMACConfig
from .crypto import constant_time_equal
from .errors import InputError
from .reducer import DistributedReducer, Runner, make_runner
from .tagfile import default_tag_path, read_tag, write_tag
from .transforms import resolve_transform
from .worker import run_worker_on_bytes

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class VerificationResult(Enum):
    """Outcome of comparing a fresh tag with a stored one."""
    MATCH = "match"
    MISMATCH = "mismatch"

    def __bool__(self) -> bool:
        return self is VerificationResult.MATCH


def file_length(path: PathLike) -> int:
    """
    Size of the target file, checking it can be opened for reading.

    Raises:
        InputError: If the file is missing, not a regular file or unreadable
    """
    try:
        with open(path, "rb") as f:
            return os.fstat(f.fileno()).st_size
    except OSError as e:
        raise InputError(f"Failed to open file: {path}: {e}") from e


def compute_tag(path: PathLike, config: Optional[PMACConfig] = None,
                runner: Optional[Runner] = None) -> Optional[int]:
    """
    Compute the PMAC0 tag of a file.

    Args:
        path: Target file
        config: Keys, variant and worker count (defaults if None)
        runner: Execution backend (built from config if None)

    Returns:
        int: The finalized tag on the combining process; None on the other
        ranks of a distributed backend

    Raises:
        InputError: If the file cannot be read
    """
    config = config if config is not None else PMACConfig()
    transform = resolve_transform(config.variant)
    runner = runner if runner is not None else make_runner(config.backend, config.processes)
    worker_count = config.worker_count

    length = file_length(path)
    logger.info(
        "computing %s tag of %s (%d bytes) with %d workers on %s backend",
        transform.name, path, length, worker_count, runner.name,
    )

    tag = runner.run(os.fspath(path), length, worker_count, config.keys, transform)
    if tag is not None:
        logger.info("tag of %s: %d", path, tag)
    return tag


def compute_tag_bytes(data: bytes, config: Optional[PMACConfig] = None) -> int:
    """
    Compute the tag of an in-memory message.

    Runs the same per-worker accumulation and reduction as compute_tag,
    sequentially and without touching the filesystem; the result equals
    compute_tag on a file holding the same bytes.
    """
    config = config if config is not None else PMACConfig()
    transform = resolve_transform(config.variant)
    data = bytes(data)

    reducer = DistributedReducer(config.worker_count, config.keys, transform)
    results = [
        run_worker_on_bytes(data, assignment, config.keys, transform)
        for assignment in split_assignments(len(data), config.worker_count)
    ]
    return reducer.reduce_results(results)


def sign_file(path: PathLike, config: Optional[PMACConfig] = None,
              tag_path: Optional[PathLike] = None,
              runner: Optional[Runner] = None) -> Optional[Path]:
    """
    Compute a file's tag and store it.

    Args:
        path: Target file
        config: Run configuration
        tag_path: Where to write the tag (default: <path>.tag)
        runner: Execution backend

    Returns:
        Path: The tag file, or None on non-combining ranks
    """
    tag = compute_tag(path, config, runner)
    if tag is None:
        return None

    destination = Path(tag_path) if tag_path is not None else default_tag_path(path)
    write_tag(destination, tag)
    logger.info("tag written to %s", destination)
    return destination


def verify_file(path: PathLike, tag_path: PathLike,
                config: Optional[PMACConfig] = None,
                runner: Optional[Runner] = None) -> Optional[VerificationResult]:
    """
    Recompute a file's tag and compare it with a stored tag.

    The stored tag is read and parsed first, on every process: a bad tag
    file fails the run before any block is hashed.

    Returns:
        VerificationResult: MATCH or MISMATCH, or None on non-combining ranks

    Raises:
        InputError: If the target file cannot be read
        TagFileError: If the tag file is missing or malformed
    """
    stored = read_tag(tag_path)

    tag = compute_tag(path, config, runner)
    if tag is None:
        return None

    if constant_time_equal(tag, stored):
        return VerificationResult.MATCH

    logger.info("tag mismatch for %s: computed %d, stored %d", path, tag, stored)
    return VerificationResult.MISMATCH

"""
Per-worker tag accumulation.

A TagAccumulator owns one worker's MaskSequencer and folds every block of
that worker's stream into a local partial tag:

    r = (m + mask_i) mod P
    t ^= F1(k1, r)

The XOR fold is order-independent, but the mask drawn for each block is
not: blocks must be absorbed in stream order (strided real bytes, then the
marker, then the padding).
"""

from typing import Iterable

from .assignment import WorkAssignment
from .crypto import MARKER_BYTE, MODULUS, PAD_BYTE, KeyTriple, MaskSequencer
from .transforms import BlockTransform


class TagAccumulator:
    """
    Local partial tag of one worker.

    Usage:
        acc = TagAccumulator(keys, transform)
        acc.absorb_many(real_bytes)
        if assignment.is_last:
            acc.absorb_marker()
            acc.absorb_padding(assignment.pad_length)
        partial = acc.partial_tag
    """

    def __init__(self, keys: KeyTriple, transform: BlockTransform, modulus: int = MODULUS):
        self._k1 = keys.k1
        self._f1 = transform.f1
        self._masks = MaskSequencer(keys.k, modulus)
        self._tag = 0
        self._blocks = 0

    def absorb(self, m: int) -> int:
        """
        Fold one byte into the partial tag.

        Args:
            m: Byte value (0..255)

        Returns:
            int: The F1 output that was folded
        """
        r = self._masks.blend(m)
        out = self._f1(self._k1, r)
        self._tag ^= out
        self._blocks += 1
        return out

    def absorb_many(self, data: Iterable[int]) -> None:
        for m in data:
            self.absorb(m)

    def absorb_marker(self) -> None:
        self.absorb(MARKER_BYTE)

    def absorb_padding(self, count: int) -> None:
        for _ in range(count):
            self.absorb(PAD_BYTE)

    def finish(self, assignment: WorkAssignment) -> int:
        """
        Close the stream according to the worker's role.

        The last worker appends the marker and its padding; every other
        worker returns its partial tag unchanged.
        """
        if assignment.is_last:
            self.absorb_marker()
            self.absorb_padding(assignment.pad_length)
        return self._tag

    @property
    def partial_tag(self) -> int:
        return self._tag

    @property
    def blocks(self) -> int:
        """Number of blocks folded so far."""
        return self._blocks

    def __repr__(self) -> str:
        return f"TagAccumulator(blocks={self._blocks}, partial_tag={self._tag})"

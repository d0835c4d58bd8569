"""
Arithmetic primitives for the PMAC0 tag engine.

This module provides:
- Deployment constants: modulus P, marker/pad bytes, default key triple
- KeyTriple: the immutable (k, k1, k2) key material of one run
- MaskSequencer: the per-worker running mask mask_i = (mask_{i-1} + k) mod P
- blend: block construction r = (m + mask) mod P
- constant_time_equal: tag comparison for verification

Nothing here is a hardened MAC construction; the keyed functions are
illustrative and exist to make the parallel tag reproducible.
"""

import secrets
from dataclasses import dataclass
from typing import Iterator

from .errors import ConfigurationError

# =============================================================================
# CONFIGURATION
# =============================================================================

MODULUS = 4294967291        # P: largest prime below 2**32
WORD_BITS = 64              # keys, blocks and tags are unsigned 64-bit words
WORD_BYTES = WORD_BITS // 8
WORD_MASK = (1 << WORD_BITS) - 1

MARKER_BYTE = 0x80          # appended once after the real data
PAD_BYTE = 0x00

DEFAULT_K = 123456          # mask-sequence key
DEFAULT_K1 = 234567         # per-block transform key
DEFAULT_K2 = 345678         # finalization key


# =============================================================================
# KEY MATERIAL
# =============================================================================

@dataclass(frozen=True)
class KeyTriple:
    """
    Key material of one signing or verification run.

    Attributes:
        k: Mask-sequence key, added to the running mask before each block
        k1: Key of the per-block transform F1
        k2: Key of the finalization transform F2

    The same triple must be used for signing and verifying; a tag computed
    under different keys is not comparable at all.
    """

    k: int = DEFAULT_K
    k1: int = DEFAULT_K1
    k2: int = DEFAULT_K2

    def __post_init__(self):
        for name in ("k", "k1", "k2"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"Key {name} must be an integer (got {value!r})")
            if not 0 <= value <= WORD_MASK:
                raise ConfigurationError(
                    f"Key {name} must be an unsigned {WORD_BITS}-bit value (got {value})"
                )

    def as_dict(self) -> dict:
        return {"k": self.k, "k1": self.k1, "k2": self.k2}


def generate_keys() -> KeyTriple:
    """
    Generate a random key triple.

    Returns:
        KeyTriple: Three independent 64-bit keys
    """
    return KeyTriple(
        k=secrets.randbits(WORD_BITS),
        k1=secrets.randbits(WORD_BITS),
        k2=secrets.randbits(WORD_BITS),
    )


# =============================================================================
# MASK SEQUENCE
# =============================================================================

class MaskSequencer:
    """
    Running mask of one worker's block stream.

    Produces mask_1, mask_2, ... with mask_i = (mask_{i-1} + k) mod P and
    mask_0 = 0. One sequencer belongs to exactly one worker stream: real
    bytes, the marker byte and pad bytes all draw from it, in that order,
    and it is never reset mid-stream.

    Usage:
        masks = MaskSequencer(keys.k)
        r = masks.blend(byte)   # draws the next mask
    """

    def __init__(self, k: int, modulus: int = MODULUS):
        self._k = k
        self._modulus = modulus
        self._mask = 0
        self._steps = 0

    def next(self) -> int:
        """Advance the accumulator and return the new mask."""
        self._mask = (self._mask + self._k) % self._modulus
        self._steps += 1
        return self._mask

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        return self.next()

    def blend(self, m: int) -> int:
        """Draw one mask and blend byte m into a block value."""
        return blend(m, self.next(), self._modulus)

    @property
    def current(self) -> int:
        """Most recently drawn mask (0 before the first draw)."""
        return self._mask

    @property
    def steps(self) -> int:
        """Number of masks drawn so far."""
        return self._steps

    def __repr__(self) -> str:
        return f"MaskSequencer(steps={self._steps}, mask={self._mask})"


def blend(m: int, mask: int, modulus: int = MODULUS) -> int:
    """
    Block construction r = (m + mask) mod P.

    Args:
        m: Input byte (real, marker or pad)
        mask: Current running mask
        modulus: Field modulus P

    Returns:
        int: Block value fed into a BlockTransform
    """
    return (m + mask) % modulus


def word_bytes(value: int) -> bytes:
    """Little-endian byte decomposition of a 64-bit word (indices 0..7)."""
    return (value & WORD_MASK).to_bytes(WORD_BYTES, "little")


# =============================================================================
# TAG COMPARISON
# =============================================================================

def constant_time_equal(a: int, b: int) -> bool:
    """
    Compare two tags without an early exit.

    Both tags are compared over their full 8-byte encoding regardless of
    where they first differ.

    Args:
        a: First tag
        b: Second tag

    Returns:
        bool: True if a == b
    """
    if not 0 <= a <= WORD_MASK or not 0 <= b <= WORD_MASK:
        return False

    diff = 0
    for x, y in zip(word_bytes(a), word_bytes(b)):
        diff |= x ^ y

    return diff == 0

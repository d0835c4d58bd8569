"""
Keyed block transforms for PMAC0.

Three interchangeable constructions, each exposing:
- F1(key, r): per-block transform, folded into a worker's partial tag
- F2(key, t): finalization, applied once to the reduced global tag

Variants:
- OTP: XOR with the key (reference construction)
- VIGENERE: repeating additive mask over the 8 bytes of the input
- RC4: fresh RC4 key schedule per call, 8 keystream steps

The variant is a closed enum resolved once per run into a BlockTransform
value; workers receive the resolved value and never dispatch on strings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Union

from .crypto import MODULUS, WORD_MASK, word_bytes
from .errors import ConfigurationError

TransformFn = Callable[[int, int], int]


class TransformVariant(Enum):
    """Supported block transform constructions."""
    OTP = "otp"
    VIGENERE = "vigenere"
    RC4 = "rc4"


# =============================================================================
# OTP
# =============================================================================

def otp_f1(k1: int, r: int) -> int:
    return (r ^ k1) & WORD_MASK


def otp_f2(k2: int, t: int) -> int:
    return (t ^ k2) & WORD_MASK


# =============================================================================
# VIGENERE
# =============================================================================

def vigenere_mix(key: int, value: int, modulus: int = MODULUS) -> int:
    """
    Repeating-mask mix over the little-endian bytes of value.

    A local mask starts at 0 on every call and advances by key (mod P)
    before each of the 8 bytes; the blended bytes are XOR-accumulated.

    Args:
        key: Transform key (k1 for F1, k2 for F2)
        value: Block value r or tag t
        modulus: Field modulus P

    Returns:
        int: Mixed 64-bit word
    """
    local_mask = 0
    result = 0
    for byte in word_bytes(value):
        local_mask = (local_mask + key) % modulus
        result ^= (byte + local_mask) % modulus
    return result & WORD_MASK


def vigenere_f1(k1: int, r: int) -> int:
    return vigenere_mix(k1, r)


def vigenere_f2(k2: int, t: int) -> int:
    return vigenere_mix(k2, t)


# =============================================================================
# RC4
# =============================================================================

def rc4_schedule(key: int) -> list:
    """
    RC4 key-scheduling over the key's 8 little-endian bytes.

    Returns:
        list: 256-entry permutation S after the 256 swap steps
    """
    key_bytes = word_bytes(key)
    s = list(range(256))
    t = [key_bytes[i % len(key_bytes)] for i in range(256)]

    j = 0
    for i in range(256):
        j = (j + s[i] + t[i]) % 256
        s[i], s[j] = s[j], s[i]

    return s


def rc4_mix(key: int, value: int, modulus: int = MODULUS) -> int:
    """
    Keystream mix of value under a freshly scheduled RC4 state.

    No keystream state survives the call: every invocation runs its own
    key schedule followed by exactly one extraction step per input byte.

    Args:
        key: Transform key (k1 for F1, k2 for F2)
        value: Block value r or tag t
        modulus: Field modulus P

    Returns:
        int: Mixed 64-bit word
    """
    s = rc4_schedule(key)

    i = j = 0
    result = 0
    for byte in word_bytes(value):
        i = (i + 1) % 256
        j = (j + s[i]) % 256
        s[i], s[j] = s[j], s[i]
        keystream = s[(s[i] + s[j]) % 256]
        result ^= (byte + keystream) % modulus

    return result & WORD_MASK


def rc4_f1(k1: int, r: int) -> int:
    return rc4_mix(k1, r)


def rc4_f2(k2: int, t: int) -> int:
    return rc4_mix(k2, t)


# =============================================================================
# CAPABILITY VALUE
# =============================================================================

@dataclass(frozen=True)
class BlockTransform:
    """
    Resolved transform capability handed to every worker.

    Attributes:
        variant: Which construction this is
        f1: Per-block function F1(k1, r)
        f2: Finalization function F2(k2, t)

    Module-level functions keep the value picklable for process pools.
    """

    variant: TransformVariant
    f1: TransformFn
    f2: TransformFn

    @property
    def name(self) -> str:
        return self.variant.value


TRANSFORMS: Dict[TransformVariant, BlockTransform] = {
    TransformVariant.OTP: BlockTransform(TransformVariant.OTP, otp_f1, otp_f2),
    TransformVariant.VIGENERE: BlockTransform(TransformVariant.VIGENERE, vigenere_f1, vigenere_f2),
    TransformVariant.RC4: BlockTransform(TransformVariant.RC4, rc4_f1, rc4_f2),
}

_ALIASES = {
    "vigenère": TransformVariant.VIGENERE,
}


def parse_variant(selector: Union[str, TransformVariant]) -> TransformVariant:
    """
    Resolve a variant selector.

    Accepts a TransformVariant, its value or its name, case-insensitively.

    Raises:
        ConfigurationError: If the selector names no known variant
    """
    if isinstance(selector, TransformVariant):
        return selector
    if not isinstance(selector, str):
        raise ConfigurationError(f"Invalid transform selector: {selector!r}")

    key = selector.strip().lower()
    for variant in TransformVariant:
        if key == variant.value:
            return variant
    if key in _ALIASES:
        return _ALIASES[key]

    choices = ", ".join(v.value for v in TransformVariant)
    raise ConfigurationError(f"Unknown transform variant: {selector!r} (choose from {choices})")


def resolve_transform(selector: Union[str, TransformVariant, BlockTransform]) -> BlockTransform:
    """Resolve a selector into the BlockTransform capability value."""
    if isinstance(selector, BlockTransform):
        return selector
    return TRANSFORMS[parse_variant(selector)]

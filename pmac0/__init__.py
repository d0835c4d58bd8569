"""
PMAC0 parallel file tags.

Computes a parallelizable MAC-style tag over a file: W workers each fold
a strided share of the bytes through a keyed block transform, and the
partial tags are XOR-reduced onto rank 0 and finalized once. The keyed
transforms (OTP, Vigenère, RC4) are illustrative, not hardened.
"""

from .accumulator import TagAccumulator
from .assignment import WorkAssignment, pad_length_for, padded_length, split_assignments
from .config import PMACConfig
from .crypto import (
    MODULUS,
    KeyTriple,
    MaskSequencer,
    constant_time_equal,
    generate_keys,
)
from .errors import (
    ConfigurationError,
    InputError,
    PMACError,
    ReductionError,
    TagFileError,
)
from .mac import (
    VerificationResult,
    compute_tag,
    compute_tag_bytes,
    sign_file,
    verify_file,
)
from .reducer import (
    COMBINING_RANK,
    DistributedReducer,
    MPIRunner,
    ProcessPoolRunner,
    SerialRunner,
    make_runner,
)
from .tagfile import default_tag_path, read_tag, write_tag
from .transforms import BlockTransform, TransformVariant, resolve_transform

__all__ = [
    "TagAccumulator",
    "WorkAssignment",
    "pad_length_for",
    "padded_length",
    "split_assignments",
    "PMACConfig",
    "MODULUS",
    "KeyTriple",
    "MaskSequencer",
    "constant_time_equal",
    "generate_keys",
    "ConfigurationError",
    "InputError",
    "PMACError",
    "ReductionError",
    "TagFileError",
    "VerificationResult",
    "compute_tag",
    "compute_tag_bytes",
    "sign_file",
    "verify_file",
    "COMBINING_RANK",
    "DistributedReducer",
    "MPIRunner",
    "ProcessPoolRunner",
    "SerialRunner",
    "make_runner",
    "default_tag_path",
    "read_tag",
    "write_tag",
    "BlockTransform",
    "TransformVariant",
    "resolve_transform",
]

"""
Run configuration for the PMAC0 engine.

A PMACConfig fixes everything that must be identical between a signing
run and the matching verification run: the key triple, the transform
variant and the logical worker count W. Execution settings (backend,
process count) affect speed only, never the tag.

Configurations come from code, from environment variables (PMAC0_*) or
from a JSON file:

    {
        "keys": {"k": 123456, "k1": 234567, "k2": 345678},
        "variant": "rc4",
        "worker_count": 4,
        "backend": "pool",
        "processes": 2
    }
"""

import dataclasses
import json
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .crypto import KeyTriple
from .errors import ConfigurationError
from .reducer import BACKENDS
from .transforms import TransformVariant, parse_variant

DEFAULT_WORKER_COUNT = 4
DEFAULT_BACKEND = "pool"

ENV_PREFIX = "PMAC0_"


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


@dataclass(frozen=True)
class PMACConfig:
    """
    Validated, immutable run configuration.

    Attributes:
        keys: Key triple (k, k1, k2)
        variant: Block transform construction
        worker_count: Logical worker count W (part of the tag definition)
        backend: "serial", "pool" or "mpi"
        processes: Process pool size for the "pool" backend (None = CPU count)
    """

    keys: KeyTriple = field(default_factory=KeyTriple)
    variant: TransformVariant = TransformVariant.OTP
    worker_count: int = DEFAULT_WORKER_COUNT
    backend: str = DEFAULT_BACKEND
    processes: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.keys, KeyTriple):
            raise ConfigurationError(f"keys must be a KeyTriple (got {self.keys!r})")
        # Normalise string selectors to the enum once, here.
        object.__setattr__(self, "variant", parse_variant(self.variant))
        if not _is_count(self.worker_count):
            raise ConfigurationError(f"worker_count must be >= 1 (got {self.worker_count!r})")
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend: {self.backend!r} (choose from {', '.join(BACKENDS)})"
            )
        if self.processes is not None and not _is_count(self.processes):
            raise ConfigurationError(f"processes must be >= 1 (got {self.processes!r})")

    def replace(self, **changes) -> "PMACConfig":
        """Return a validated copy with some fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "keys": self.keys.as_dict(),
            "variant": self.variant.value,
            "worker_count": self.worker_count,
            "backend": self.backend,
            "processes": self.processes,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "PMACConfig":
        """
        Build a configuration from a mapping (e.g. parsed JSON).

        Missing fields take their defaults.

        Raises:
            ConfigurationError: On unknown fields or invalid values
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration must be a JSON object")

        unknown = set(data) - {f.name for f in dataclasses.fields(cls)}
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {sorted(unknown)}")

        kwargs = dict(data)
        if "keys" in kwargs:
            keys = kwargs["keys"]
            if not isinstance(keys, Mapping):
                raise ConfigurationError("keys must be an object with k, k1, k2")
            try:
                kwargs["keys"] = KeyTriple(**keys)
            except TypeError as e:
                raise ConfigurationError(f"Invalid keys: {e}") from e
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: str) -> "PMACConfig":
        """
        Load a configuration file.

        Raises:
            ConfigurationError: If the file is unreadable or not valid JSON
        """
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load configuration {path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None,
                 base: Optional["PMACConfig"] = None) -> "PMACConfig":
        """
        Overlay PMAC0_* environment variables on a base configuration.

        Recognised: PMAC0_K, PMAC0_K1, PMAC0_K2, PMAC0_VARIANT,
        PMAC0_WORKERS, PMAC0_BACKEND, PMAC0_PROCESSES.
        """
        environ = os.environ if environ is None else environ
        config = base if base is not None else cls()

        def get_int(name: str) -> Optional[int]:
            raw = environ.get(ENV_PREFIX + name)
            if raw is None or raw.strip() == "":
                return None
            text = raw.strip()
            # Plain decimal first ("08"), then prefixed literals ("0x10").
            for base in (10, 0):
                try:
                    return int(text, base)
                except ValueError:
                    continue
            raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer (got {raw!r})")

        key_changes = {}
        for name, env_name in (("k", "K"), ("k1", "K1"), ("k2", "K2")):
            value = get_int(env_name)
            if value is not None:
                key_changes[name] = value

        changes = {}
        if key_changes:
            changes["keys"] = dataclasses.replace(config.keys, **key_changes)
        if environ.get(ENV_PREFIX + "VARIANT"):
            changes["variant"] = environ[ENV_PREFIX + "VARIANT"]
        if environ.get(ENV_PREFIX + "BACKEND"):
            changes["backend"] = environ[ENV_PREFIX + "BACKEND"].strip().lower()
        workers = get_int("WORKERS")
        if workers is not None:
            changes["worker_count"] = workers
        processes = get_int("PROCESSES")
        if processes is not None:
            changes["processes"] = processes

        return config.replace(**changes) if changes else config

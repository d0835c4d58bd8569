import pytest

from pmac0 import KeyTriple

REFERENCE_KEYS = KeyTriple(k=123456, k1=234567, k2=345678)


@pytest.fixture
def keys():
    return REFERENCE_KEYS


@pytest.fixture
def write_file(tmp_path):
    """Factory writing bytes to a fresh file under tmp_path."""
    counter = {"n": 0}

    def _write(data: bytes, name: str = None):
        counter["n"] += 1
        path = tmp_path / (name or f"message{counter['n']}.bin")
        path.write_bytes(data)
        return path

    return _write

import json

import pytest

from pmac0.config import DEFAULT_WORKER_COUNT, PMACConfig
from pmac0.crypto import KeyTriple
from pmac0.errors import ConfigurationError
from pmac0.transforms import TransformVariant


def test_defaults():
    config = PMACConfig()
    assert config.keys == KeyTriple()
    assert config.variant is TransformVariant.OTP
    assert config.worker_count == DEFAULT_WORKER_COUNT
    assert config.backend == "pool"
    assert config.processes is None


def test_variant_string_is_resolved_once():
    assert PMACConfig(variant="RC4").variant is TransformVariant.RC4


@pytest.mark.parametrize("kwargs", [
    {"variant": "des"},
    {"worker_count": 0},
    {"worker_count": "3"},
    {"worker_count": True},
    {"processes": True},
    {"backend": "threads"},
    {"processes": 0},
    {"keys": (1, 2, 3)},
])
def test_invalid_configuration(kwargs):
    with pytest.raises(ConfigurationError):
        PMACConfig(**kwargs)


def test_replace_revalidates():
    config = PMACConfig()
    assert config.replace(worker_count=7).worker_count == 7
    with pytest.raises(ConfigurationError):
        config.replace(worker_count=-1)


def test_dict_round_trip():
    config = PMACConfig(keys=KeyTriple(1, 2, 3), variant="vigenere", worker_count=5,
                        backend="serial", processes=2)
    assert PMACConfig.from_dict(config.to_dict()) == config


def test_from_json(tmp_path):
    path = tmp_path / "pmac.json"
    path.write_text(json.dumps({"keys": {"k": 9, "k1": 8, "k2": 7}, "variant": "rc4"}))
    config = PMACConfig.from_json(str(path))
    assert config.keys == KeyTriple(9, 8, 7)
    assert config.variant is TransformVariant.RC4
    assert config.worker_count == DEFAULT_WORKER_COUNT


@pytest.mark.parametrize("content", [
    "not json",
    "[1, 2]",
    '{"colour": "blue"}',
    '{"keys": {"k": 1, "k3": 2}}',
    '{"keys": {"k": -1}}',
])
def test_from_json_rejects_bad_files(tmp_path, content):
    path = tmp_path / "bad.json"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        PMACConfig.from_json(str(path))


def test_from_json_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        PMACConfig.from_json(str(tmp_path / "missing.json"))


def test_from_env_overlays_base():
    environ = {
        "PMAC0_K": "0x10",
        "PMAC0_K2": "99",
        "PMAC0_VARIANT": "vigenere",
        "PMAC0_WORKERS": "6",
        "PMAC0_BACKEND": "Serial",
        "PMAC0_PROCESSES": "",
    }
    config = PMACConfig.from_env(environ, base=PMACConfig(processes=3))
    assert config.keys == KeyTriple(k=16, k1=234567, k2=99)
    assert config.variant is TransformVariant.VIGENERE
    assert config.worker_count == 6
    assert config.backend == "serial"
    assert config.processes == 3


def test_from_env_empty_is_default():
    assert PMACConfig.from_env({}) == PMACConfig()


def test_from_env_rejects_non_integer():
    with pytest.raises(ConfigurationError):
        PMACConfig.from_env({"PMAC0_WORKERS": "many"})


@pytest.mark.parametrize("raw,expected", [("08", 8), ("010", 10), (" 12 ", 12), ("0x10", 16)])
def test_from_env_integer_forms(raw, expected):
    assert PMACConfig.from_env({"PMAC0_WORKERS": raw}).worker_count == expected

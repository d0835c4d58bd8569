import pytest

from pmac0.crypto import MODULUS, WORD_MASK
from pmac0.errors import ConfigurationError
from pmac0.transforms import (
    TRANSFORMS,
    BlockTransform,
    TransformVariant,
    parse_variant,
    rc4_mix,
    rc4_schedule,
    resolve_transform,
    vigenere_mix,
)

K1 = 234567
K2 = 345678


# (variant, F1(k1, 1000), F2(k2, 0), F1(k1, 0))
REFERENCE = [
    (TransformVariant.OTP, 235439, 345678, 234567),
    (TransformVariant.VIGENERE, 90999, 1975552, 90624),
    (TransformVariant.RC4, 277, 28, 232),
]


@pytest.mark.parametrize("variant,f1_1000,f2_0,f1_0", REFERENCE)
def test_reference_values(variant, f1_1000, f2_0, f1_0):
    transform = resolve_transform(variant)
    assert transform.f1(K1, 1000) == f1_1000
    assert transform.f2(K2, 0) == f2_0
    assert transform.f1(K1, 0) == f1_0


def test_vigenere_zero_input_is_xor_of_local_masks():
    expected = 0
    for i in range(1, 9):
        expected ^= (K1 * i) % MODULUS
    assert vigenere_mix(K1, 0) == expected


def test_vigenere_local_mask_restarts_each_call():
    assert vigenere_mix(K1, 12345) == vigenere_mix(K1, 12345)


def test_rc4_schedule_is_a_permutation():
    s = rc4_schedule(K1)
    assert sorted(s) == list(range(256))
    assert s != list(range(256))


def test_rc4_has_no_state_across_calls():
    first = rc4_mix(K1, 0xDEADBEEF)
    rc4_mix(K1, 1)
    assert rc4_mix(K1, 0xDEADBEEF) == first


@pytest.mark.parametrize("variant", list(TransformVariant))
def test_outputs_are_64_bit(variant):
    transform = TRANSFORMS[variant]
    for value in (0, 1, MODULUS - 1, WORD_MASK):
        assert 0 <= transform.f1(WORD_MASK, value) <= WORD_MASK
        assert 0 <= transform.f2(WORD_MASK, value) <= WORD_MASK


@pytest.mark.parametrize("variant", list(TransformVariant))
def test_keyed(variant):
    transform = TRANSFORMS[variant]
    assert transform.f1(K1, 4242) != transform.f1(K1 + 1, 4242)


@pytest.mark.parametrize("selector,expected", [
    ("otp", TransformVariant.OTP),
    ("OTP", TransformVariant.OTP),
    (" rc4 ", TransformVariant.RC4),
    ("Vigenere", TransformVariant.VIGENERE),
    ("vigenère", TransformVariant.VIGENERE),
    (TransformVariant.RC4, TransformVariant.RC4),
])
def test_parse_variant(selector, expected):
    assert parse_variant(selector) is expected


@pytest.mark.parametrize("selector", ["aes", "", None, 3, "vig", "onetimepad"])
def test_unknown_variant(selector):
    with pytest.raises(ConfigurationError):
        parse_variant(selector)


def test_resolve_transform_passes_capability_through():
    transform = resolve_transform("rc4")
    assert isinstance(transform, BlockTransform)
    assert transform.name == "rc4"
    assert resolve_transform(transform) is transform

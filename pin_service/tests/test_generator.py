from __future__ import annotations

import pytest

from pin_service.config import DEFAULT_ALPHABET
from pin_service.generator import PinGenerator


def test_default_alphabet_excludes_ambiguous_characters():
    for ambiguous in "0O1I":
        assert ambiguous not in DEFAULT_ALPHABET


@pytest.mark.parametrize("length", [4, 12, 64])
def test_generate_uses_alphabet_and_length(length):
    generator = PinGenerator()
    for _ in range(50):
        code = generator.generate(length)
        assert len(code) == length
        assert set(code) <= set(DEFAULT_ALPHABET)


def test_generate_defaults_to_configured_length():
    generator = PinGenerator("ABC", length=8)
    code = generator.generate()
    assert len(code) == 8
    assert set(code) <= {"A", "B", "C"}


def test_generate_is_not_constant():
    generator = PinGenerator()
    codes = {generator.generate() for _ in range(20)}
    assert len(codes) > 1


@pytest.mark.parametrize(
    "alphabet, length",
    [("", 12), ("abc", 12), ("AAB", 12), ("ABC", 0)],
)
def test_rejects_bad_configuration(alphabet, length):
    with pytest.raises(ValueError):
        PinGenerator(alphabet, length)

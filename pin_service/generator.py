"""Random, human readable PIN codes."""

from __future__ import annotations

import secrets

from .config import DEFAULT_ALPHABET


class PinGenerator:
    """Draws codes uniformly from a fixed alphabet using the ``secrets`` CSPRNG."""

    def __init__(self, alphabet: str = DEFAULT_ALPHABET, length: int = 12) -> None:
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        if alphabet != alphabet.upper():
            raise ValueError("alphabet must be uppercase")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must not repeat characters")
        if length <= 0:
            raise ValueError("length must be positive")
        self.alphabet = alphabet
        self.length = length

    def generate(self, length: int | None = None) -> str:
        size = length or self.length
        return "".join(secrets.choice(self.alphabet) for _ in range(size))

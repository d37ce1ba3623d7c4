"""
Identifier Generation

Short public identifiers drawn from an injected randomness source.
Uniqueness is not guaranteed here; the record store's insert detects
collisions and the registry retries.
"""

import random
import secrets
import threading
from abc import ABC, abstractmethod
from typing import Optional

from .value_objects import ALPHABET, DEFAULT_ID_LENGTH, MAX_ID_LENGTH, MIN_ID_LENGTH


class RandomSource(ABC):
    """Stateless capability that picks one character from an alphabet."""

    @abstractmethod
    def choice(self, alphabet: str) -> str:
        pass  # pragma: no cover


class SystemRandomSource(RandomSource):
    """OS entropy via ``secrets``. Safe for concurrent use."""

    def choice(self, alphabet: str) -> str:
        return secrets.choice(alphabet)


class ThreadLocalRandomSource(RandomSource):
    """
    One ``random.Random`` per thread.

    With a seed every thread gets its own reproducible stream
    (seed combined with the thread's ordinal), so no generator state is
    shared between threads.
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._local = threading.local()
        self._counter = 0
        self._counter_lock = threading.Lock()

    def _rng(self) -> random.Random:
        rng = getattr(self._local, "rng", None)
        if rng is None:
            if self._seed is None:
                rng = random.Random()
            else:
                with self._counter_lock:
                    ordinal = self._counter
                    self._counter += 1
                rng = random.Random(f"{self._seed}:{ordinal}")
            self._local.rng = rng
        return rng

    def choice(self, alphabet: str) -> str:
        return self._rng().choice(alphabet)


class IdentifierGenerator:
    """
    Produces fixed-length identifiers over the 62-character alphabet.

    Length 5 yields 62**5 (about 916 million) values; raise it to lower the
    collision rate at scale.
    """

    def __init__(
        self,
        length: int = DEFAULT_ID_LENGTH,
        random_source: Optional[RandomSource] = None,
    ):
        self._validate_length(length)
        self.length = length
        self.random_source = random_source or SystemRandomSource()

    @staticmethod
    def _validate_length(length: int) -> None:
        if not isinstance(length, int) or not MIN_ID_LENGTH <= length <= MAX_ID_LENGTH:
            raise ValueError(
                f"Identifier length must be between {MIN_ID_LENGTH} and "
                f"{MAX_ID_LENGTH}, got {length!r}"
            )

    def generate(self, length: Optional[int] = None) -> str:
        """
        Generate an identifier.

        Args:
            length: Override the configured length for this call

        Returns:
            Identifier string of the requested length
        """
        size = self.length if length is None else length
        if length is not None:
            self._validate_length(size)
        return "".join(self.random_source.choice(ALPHABET) for _ in range(size))

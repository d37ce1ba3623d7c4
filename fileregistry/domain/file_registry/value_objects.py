"""
File Registry Value Objects

Immutable value objects for type safety and validation.
"""

import string
from dataclasses import dataclass

ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
DEFAULT_ID_LENGTH = 5
MIN_ID_LENGTH = 4
MAX_ID_LENGTH = 32


class InvalidShortIdError(ValueError):
    """Raised when a short identifier is malformed."""
    pass


@dataclass(frozen=True)
class ShortId:
    """
    Value object representing a public link identifier.

    Identifiers are drawn from a 62-character alphanumeric alphabet.
    Shape validation lets malformed links be rejected without a store lookup.
    """
    value: str

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise InvalidShortIdError(f"Invalid short id: {self.value!r}")

    @staticmethod
    def is_valid(value: str) -> bool:
        """
        Validate an identifier.

        Requirements:
        - Must be a string
        - Length between MIN_ID_LENGTH and MAX_ID_LENGTH
        - Only characters from ALPHABET
        """
        if not value or not isinstance(value, str):
            return False

        if not MIN_ID_LENGTH <= len(value) <= MAX_ID_LENGTH:
            return False

        return all(c in ALPHABET for c in value)

    def __str__(self) -> str:
        return self.value

"""
Prescriptions component - Port interfaces.

Prescription files are private: they are served only to admins reviewing an
order, never from a public URL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Protocol


class StorageError(Exception):
    """Base class for storage failures."""


class KeyExistsError(StorageError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Key already exists: {key}")
        self.key = key


class IntegrityError(StorageError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"SHA-256 mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


@dataclass
class StoredObject:
    """Metadata for a stored object."""

    key: str
    size_bytes: int
    content_type: str
    sha256: str


class StoragePort(Protocol):
    """Private object storage for prescription files."""

    def put(
        self,
        key: str,
        data: bytes | BinaryIO,
        content_type: str,
        *,
        expected_sha256: str | None = None,
    ) -> StoredObject:
        """
        Store object bytes under the given key.

        Raises:
            KeyExistsError: If key already exists
            IntegrityError: If expected_sha256 doesn't match actual hash
        """
        ...

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        ...

    def get(self, key: str) -> bytes | None:
        """Get data by key, None if missing."""
        ...

"""
Prescriptions component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO

from lenscart.components.lens_config import ConfigError, PrescriptionFileRef


@dataclass(frozen=True)
class UploadPrescriptionInput:
    """Input for storing a prescription file."""

    data: bytes | BinaryIO
    filename: str
    content_type: str
    owner_key: str  # user id, or cart session id for guests


@dataclass(frozen=True)
class UploadPrescriptionOutput:
    file: PrescriptionFileRef | None = None
    preview: str | None = None
    errors: list[ConfigError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class FetchPrescriptionInput:
    storage_key: str


@dataclass(frozen=True)
class FetchPrescriptionOutput:
    data: bytes | None = None
    errors: list[ConfigError] = field(default_factory=list)
    success: bool = True

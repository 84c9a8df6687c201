"""
Local filesystem store for prescription files.

Keys map to files under base_path; a JSON sidecar keeps the content type and
digest. Keys once written cannot be overwritten.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import BinaryIO

from lenscart.components.prescriptions import (
    IntegrityError,
    KeyExistsError,
    StoredObject,
)


class FileSystemStore:
    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / path).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {path}")
        return target

    def _meta_path(self, target: Path) -> Path:
        return target.with_name(target.name + ".meta.json")

    def put(
        self,
        key: str,
        data: bytes | BinaryIO,
        content_type: str,
        *,
        expected_sha256: str | None = None,
    ) -> StoredObject:
        target = self._safe_path(key)
        if target.exists():
            raise KeyExistsError(key)

        data_bytes = data if isinstance(data, bytes) else data.read()
        sha256_hex = hashlib.sha256(data_bytes).hexdigest()
        if expected_sha256 and sha256_hex != expected_sha256:
            raise IntegrityError(expected_sha256, sha256_hex)

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data_bytes)

        stored = StoredObject(
            key=key,
            size_bytes=len(data_bytes),
            content_type=content_type,
            sha256=sha256_hex,
        )
        with open(self._meta_path(target), "w") as f:
            json.dump(
                {
                    "key": stored.key,
                    "size_bytes": stored.size_bytes,
                    "content_type": stored.content_type,
                    "sha256": stored.sha256,
                },
                f,
            )
        return stored

    def exists(self, key: str) -> bool:
        return self._safe_path(key).exists()

    def get(self, key: str) -> bytes | None:
        """Retrieve bytes by key, None if missing. Verifies the stored digest."""
        target = self._safe_path(key)
        if not target.exists():
            return None
        with open(target, "rb") as f:
            data = f.read()

        meta_path = self._meta_path(target)
        if meta_path.exists():
            with open(meta_path) as f:
                expected = json.load(f).get("sha256")
            actual = hashlib.sha256(data).hexdigest()
            if expected and actual != expected:
                raise IntegrityError(expected, actual)
        return data

    def content_type(self, key: str) -> str | None:
        meta_path = self._meta_path(self._safe_path(key))
        if not meta_path.exists():
            return None
        with open(meta_path) as f:
            return json.load(f).get("content_type")

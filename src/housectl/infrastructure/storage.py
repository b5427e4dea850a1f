"""Avatar image storage under ``{root}/.housectl/avatars/``.

Images are content-addressed (sha256 prefix + extension) and written
through the active transaction so a rolled-back operation leaves no
orphaned file behind.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from housectl.domain.errors import ValidationFailed
from housectl.infrastructure.database.engine import DATA_DIRNAME

if TYPE_CHECKING:
    from pathlib import Path

    from housectl.infrastructure.repository import RepositoryTransaction

AVATAR_DIRNAME = "avatars"

# Magic-number prefixes -> (type name, file extension)
_SIGNATURES: tuple[tuple[bytes, str, str], ...] = (
    (b"\xff\xd8\xff", "jpeg", ".jpg"),
    (b"\x89PNG\r\n\x1a\n", "png", ".png"),
)


def detect_image_type(data: bytes) -> tuple[str, str] | None:
    """Return ``(type_name, extension)`` for JPEG/PNG data, else None."""
    for prefix, type_name, ext in _SIGNATURES:
        if data.startswith(prefix):
            return type_name, ext
    return None


class ImageStorage:
    """Validates and stores uploaded house images."""

    def __init__(
        self,
        root: Path,
        *,
        max_kb: int = 1024,
        allowed_types: tuple[str, ...] = ("jpeg", "png"),
    ) -> None:
        self._root = root
        self._max_kb = max_kb
        self._allowed = frozenset(allowed_types)

    @property
    def directory(self) -> Path:
        return self._root / DATA_DIRNAME / AVATAR_DIRNAME

    def store(self, txn: RepositoryTransaction, data: bytes) -> str:
        """Write *data* and return its reference relative to the data root.

        Raises:
            ValidationFailed: empty, unrecognised, disallowed, or oversized image.
        """
        if not data:
            raise ValidationFailed(["uploaded image is empty"])

        detected = detect_image_type(data)
        if detected is None or detected[0] not in self._allowed:
            allowed = ", ".join(sorted(self._allowed))
            raise ValidationFailed([f"image must be one of: {allowed}"])

        size_kb = len(data) / 1024
        if size_kb > self._max_kb:
            raise ValidationFailed(
                [f"image may not be larger than {self._max_kb} kilobytes"],
                size_kb=round(size_kb, 1),
            )

        _, ext = detected
        digest = hashlib.sha256(data).hexdigest()[:16]
        path = self.directory / f"{digest}{ext}"
        txn.write_bytes(path, data)
        return path.relative_to(self._root).as_posix()

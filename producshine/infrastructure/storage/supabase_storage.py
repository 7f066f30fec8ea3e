from __future__ import annotations

import logging
import os
import secrets
import time
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from supabase import Client

from producshine.domain.errors import BackendError

logger = logging.getLogger(__name__)


@dataclass
class StorageResult:
    path: str
    url: str


def inspect_image(data: bytes) -> tuple[str, str]:
    """Return (extension, content type) of an encoded image.

    Raises:
        ValueError: If the bytes are not an image Pillow can decode.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = img.format or ""
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(f"Invalid image file: {exc}") from exc
    content_type = Image.MIME.get(fmt, "application/octet-stream")
    if not content_type.startswith("image/"):
        raise ValueError(f"Unsupported image format: {fmt or 'unknown'}")
    ext = "jpg" if fmt == "JPEG" else fmt.lower()
    return ext, content_type


class SupabaseStorage:
    """Storage adapter for one Supabase Storage bucket with a local fake fallback."""

    def __init__(self, client: Client | None, bucket: str | None = None) -> None:
        self.client = client
        self.bucket = bucket or os.getenv("LOGO_BUCKET", "logos")
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.local_dir = Path(os.getenv("SUPABASE_STORAGE_LOCAL_DIR", ".local_storage"))
        self.local_url_prefix = os.getenv("SUPABASE_STORAGE_LOCAL_URL", "/local-storage").rstrip("/")

    @staticmethod
    def new_key(ext: str) -> str:
        # <millis>-<random>.<ext>, unique enough for user uploads
        return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}.{ext.lower().lstrip('.')}"

    def upload_file(self, key: str, data: bytes, content_type: str) -> str:
        if self.disabled or self.client is None:
            # local fake storage
            full_path = self.local_dir / self.bucket / key
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
            return key
        try:  # pragma: no cover - network
            self.client.storage.from_(self.bucket).upload(
                path=key,
                file=data,
                file_options={"content-type": content_type},
            )
            return key
        except Exception as exc:  # pragma: no cover
            raise BackendError(f"Storage upload failed: {exc}") from exc

    def get_public_url(self, key: str) -> str:
        if self.disabled or self.client is None:
            return f"{self.local_url_prefix}/{self.bucket}/{key}"
        return self.client.storage.from_(self.bucket).get_public_url(key)  # pragma: no cover

    def upload_image(self, data: bytes) -> StorageResult:
        """Validate an encoded image and store it under a fresh key."""
        ext, content_type = inspect_image(data)
        key = self.upload_file(self.new_key(ext), data, content_type)
        logger.info("Stored %s (%d bytes) in bucket %s", key, len(data), self.bucket)
        return StorageResult(path=key, url=self.get_public_url(key))

    def delete(self, key: str) -> None:
        if self.disabled or self.client is None:
            full_path = self.local_dir / self.bucket / key
            if full_path.exists():
                full_path.unlink()
            return
        try:  # pragma: no cover - network
            self.client.storage.from_(self.bucket).remove([key])
        except Exception as exc:  # pragma: no cover
            raise BackendError(f"Storage delete failed: {exc}") from exc

    def key_from_url(self, url: str | None) -> str | None:
        """Recover the object key from a public URL issued for this bucket."""
        if not url:
            return None
        marker = f"/{self.bucket}/"
        if marker not in url:
            return None
        return url.split(marker, 1)[1].split("?", 1)[0] or None

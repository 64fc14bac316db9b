"""
Payment Proof Storage Service

Stores proof-of-payment images on local disk and returns the public URL
they are served from (``/static/payment-proofs/``).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from marketplace.core.domain import ValidationException

logger = logging.getLogger(__name__)

PUBLIC_PATH = "/static/payment-proofs"


class ProofStorageService:
    """
    Manages proof image storage and URL generation.

    - Validates extension and size
    - Saves files under a non-guessable name
    - Generates public URLs
    """

    def __init__(
        self,
        storage_path: str | Path,
        public_url_base: str,
        allowed_extensions: list[str] | None = None,
        max_file_size: int = 5 * 1024 * 1024,
    ):
        """
        Initialize the storage service.

        Args:
            storage_path: Directory path for storing proof images
            public_url_base: Base URL for generating public file URLs
                            (e.g., "https://yourdomain.com")
            allowed_extensions: Lower-case extensions without the dot
            max_file_size: Maximum accepted size in bytes
        """
        self.storage_path = Path(storage_path)
        self.public_url_base = public_url_base.rstrip("/")
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in (allowed_extensions or ["jpg", "jpeg", "png"])}
        self.max_file_size = max_file_size

        self.storage_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Payment proof storage directory: {self.storage_path}")

    def _extension(self, filename: str) -> str:
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if extension not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise ValidationException(f"Unsupported file type '{filename}'. Allowed: {allowed}", field="proof_images")
        return extension

    async def store(self, content: bytes, filename: str, order_id: str) -> str:
        """
        Store a proof image and return its public URL.

        Raises:
            ValidationException: Unsupported extension, empty or oversized file
        """
        extension = self._extension(filename)
        if not content:
            raise ValidationException(f"File '{filename}' is empty", field="proof_images")
        if len(content) > self.max_file_size:
            raise ValidationException(
                f"File '{filename}' exceeds the {self.max_file_size // (1024 * 1024)}MB limit", field="proof_images"
            )

        timestamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        stored_name = f"proof_{order_id}_{timestamp}_{uuid4().hex[:8]}.{extension}"
        file_path = self.storage_path / stored_name
        await asyncio.to_thread(file_path.write_bytes, content)

        logger.info(f"Payment proof stored: {file_path} ({len(content)} bytes)")
        return f"{self.public_url_base}{PUBLIC_PATH}/{stored_name}"

    async def delete(self, url: str) -> bool:
        """
        Remove a previously stored proof by its public URL.

        Returns:
            True if deleted, False if the URL is not one of ours or the file is gone
        """
        prefix = f"{self.public_url_base}{PUBLIC_PATH}/"
        if not url.startswith(prefix):
            return False
        file_path = self.storage_path / Path(url[len(prefix) :]).name
        if not file_path.exists():
            return False
        await asyncio.to_thread(file_path.unlink)
        logger.info(f"Payment proof deleted: {file_path}")
        return True

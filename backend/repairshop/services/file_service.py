"""
Repair Shop Backend — Product Image Storage
============================================

What:  Validates, stores, resolves and removes uploaded product images.
How:   Checks extension, emptiness and size before writing; writes with
       aiofiles under a generated name; hands back the public path that is
       stored in ``products.product_image``.
Who:   Called by ProductService (store/cleanup) and the uploads route
       (resolve).

Storage layout:
    uploads/
    ├── productImage_3f2a9c...e1.png
    └── productImage_b07d41...9c.jpg

    The public path of a stored file is ``/uploads/<name>``. Generated names
    contain no client input, so a stored name can never escape the root.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from repairshop.config import settings
from repairshop.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}
PUBLIC_PREFIX = "/uploads/"
FILE_FIELD = "productImage"


class FileService:
    """
    Manages the product image lifecycle.

    Lifecycle of an uploaded image:
        1. ProductService passes the upload → validate_and_store()
        2. Extension check, then empty and size checks
        3. Bytes written to <storage_root>/productImage_<hex><ext>
        4. Public path returned and stored on the product row
        5. Row insert fails → cleanup_file() removes the orphan
    """

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the upload directory (used in tests).
                          If None, uses settings.upload_root.
        """
        self.storage_root = Path(storage_root or settings.upload_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Return the lowercase extension or raise ValidationError."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message="Only .png, .jpg and .jpeg images are allowed",
                field=FILE_FIELD,
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, actual_size: int) -> None:
        if actual_size == 0:
            raise ValidationError(message="Uploaded image is empty", field=FILE_FIELD)

        if actual_size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field=FILE_FIELD,
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write the bytes under a fresh name.

        Returns:
            Public path, e.g. ``/uploads/productImage_3f2a...e1.png``

        Raises:
            FileStorageError if the write fails (disk full, permissions).
        """
        name = f"{FILE_FIELD}_{uuid.uuid4().hex}{extension}"
        absolute_path = self.storage_root / name

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", name, len(content))
        return PUBLIC_PREFIX + name

    def resolve(self, relative_path: str) -> Path:
        """
        Map a path below the upload root to an absolute file path.

        Raises:
            ValidationError: the path escapes the upload root
        """
        candidate = (self.storage_root / relative_path.lstrip("/")).resolve()
        if not candidate.is_relative_to(self.storage_root):
            logger.warning("Path traversal attempt blocked: %s", relative_path)
            raise ValidationError(message="Invalid file path", field="path")
        return candidate

    async def cleanup_file(self, public_path: str) -> None:
        """
        Best-effort removal of a stored image by its public path.

        Missing files are ignored; OS errors are logged, not raised, because
        the caller is already handling a more important failure.
        """
        name = public_path[len(PUBLIC_PREFIX):] if public_path.startswith(PUBLIC_PREFIX) else public_path
        try:
            path = self.resolve(name)
            if path.is_file():
                os.remove(path)
                logger.info("Cleaned up image: %s", path.name)
            else:
                logger.debug("Cleanup: image already gone: %s", name)
        except (OSError, ValidationError) as e:
            logger.warning("Failed to clean up image %s: %s", public_path, str(e))

    async def validate_and_store(self, filename: str, content: bytes) -> str:
        """Extension check, size checks, then write. Returns the public path."""
        ext = self.validate_extension(filename)
        self.validate_size(len(content))
        return await self.store_file(content, ext)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()

"""
Image storage for post featured images.

The post store never handles raw bytes: an upload is written here first
and only the returned reference (``/uploads/<name>``) is saved on the post.
File names are the upload time in milliseconds plus the original file
extension; a name already taken moves on to the next millisecond.
"""
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path

import aiofiles

from app.config import settings
from app.errors import InternalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    data: bytes


class ImageStorage:
    def __init__(self, directory: str | os.PathLike, url_prefix: str = "/uploads") -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    async def _write_new(self, ext: str, data: bytes) -> str:
        # "xb" fails if the name is taken; try the next millisecond.
        stamp = int(time.time() * 1000)
        while True:
            name = f"{stamp}{ext}"
            try:
                async with aiofiles.open(self.directory / name, "xb") as f:
                    await f.write(data)
            except FileExistsError:
                stamp += 1
                continue
            return name

    async def save(self, upload: ImageUpload) -> str:
        """Write *upload* to disk and return its public reference."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            name = await self._write_new(Path(upload.filename).suffix.lower(), upload.data)
        except OSError as exc:
            logger.error("Could not store image %r: %s", upload.filename, exc)
            raise InternalError("Could not store image") from exc
        logger.info("Stored image %s (%d bytes)", name, len(upload.data))
        return f"{self.url_prefix}/{name}"


def default_storage() -> ImageStorage:
    return ImageStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)

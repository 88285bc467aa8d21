"""
Uploaded picture storage: a plain directory of image files.
"""

import logging
import os
import time
from pathlib import Path
from typing import List

from starlette.concurrency import run_in_threadpool

from app.services.result import ErrorKind, Result

logger = logging.getLogger(__name__)


class PictureService:

    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir)

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    async def get_pictures(self) -> Result[List[str]]:
        try:
            names = await run_in_threadpool(os.listdir, self.upload_dir)
        except OSError as e:
            logger.error(f"Unable to read {self.upload_dir}: {e}")
            return Result.failure("Oops looks like there is an error on our side", ErrorKind.STORE)
        if not names:
            return Result.failure("Sorry no pictures available", ErrorKind.NOT_FOUND)
        return Result.success(sorted(names))

    async def save_picture(self, original_name: str, content: bytes) -> Result[str]:
        """Store an upload as <epoch millis><original extension>."""
        filename = f"{int(time.time() * 1000)}{Path(original_name or '').suffix}"
        try:
            await run_in_threadpool(self._write, self.upload_dir / filename, content)
        except OSError as e:
            logger.error(f"Unable to save upload {original_name}: {e}")
            return Result.failure("Unable to save the picture", ErrorKind.STORE)
        logger.info(f"Saved picture {filename}")
        return Result.success(filename)

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        with open(path, "wb") as fh:
            fh.write(content)

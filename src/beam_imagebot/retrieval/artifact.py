"""Downloads generated images into uniquely named local files.

fetch_to_temp_file() leaves cleanup to the caller; temp_artifact() deletes
the file when the block exits, whether it succeeded or not.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import httpx

from ..config import Settings
from ..log import get_logger

logger = get_logger("artifact")

class ArtifactFetcher:
    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self.directory = Path(settings.ARTIFACT_DIR)
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True
        )

    def new_path(self) -> Path:
        return self.directory / f"image_{uuid.uuid4()}.png"

    async def fetch_to_temp_file(self, url: str) -> Path:
        """
        Downloads the raw bytes at `url` and writes them to a new file.
        Raises httpx.HTTPStatusError on a non-2xx response (nothing is written).
        A write that fails or is cancelled leaves no file behind.
        """
        path = self.new_path()
        try:
            await self._download(url, path)
        except BaseException:
            await self._remove(path)
            raise
        return path

    @asynccontextmanager
    async def temp_artifact(self, url: str) -> AsyncIterator[Path]:
        path = self.new_path()
        try:
            await self._download(url, path)
            yield path
        finally:
            await self._remove(path)

    async def _download(self, url: str, path: Path):
        resp = await self._http.get(url)
        resp.raise_for_status()

        write = asyncio.ensure_future(asyncio.to_thread(path.write_bytes, resp.content))
        try:
            await asyncio.shield(write)
        except asyncio.CancelledError:
            # The thread can't be stopped; let it finish so the file can be removed afterwards
            await asyncio.wait([write])
            raise
        logger.info(f"Saved {len(resp.content)} bytes to {path.name}")

    async def _remove(self, path: Path):
        await asyncio.to_thread(lambda: path.unlink(missing_ok=True))
        logger.debug(f"Deleted {path.name}")

    async def aclose(self):
        if self._owns_http:
            await self._http.aclose()

"""
Artifact sources

Rule artifacts, reference datasets and pre-generated summaries are addressed relative to
a configurable base location, either a local directory or an http(s) URL.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

import httpx

logger = logging.getLogger(__name__)


class ArtifactSource:
    """Reads named artifacts from a directory or a base URL"""

    def __init__(self, base: Union[str, Path], client: Optional[httpx.AsyncClient] = None):
        base = str(base)
        self.is_remote = base.startswith(("http://", "https://"))
        self.base = base.rstrip("/") + "/" if self.is_remote else base
        self._client = client

    def resolve(self, name: str) -> str:
        """Location of `name` under the base, as a URL or filesystem path"""
        if self.is_remote:
            return self.base + name.lstrip("/")
        return str(Path(self.base) / name)

    def exists(self, name: str) -> Optional[bool]:
        """Whether a local artifact exists; None when the source is remote"""
        if self.is_remote:
            return None
        return Path(self.resolve(name)).exists()

    async def fetch(self, name: str) -> bytes:
        """Read an artifact; raises OSError or httpx.HTTPError on failure"""
        location = self.resolve(name)
        logger.debug(f"Fetching artifact: {location}")

        if not self.is_remote:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, Path(location).read_bytes)

        if self._client is not None:
            response = await self._client.get(location)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(location)
        response.raise_for_status()
        return response.content

    def __repr__(self) -> str:
        return f"ArtifactSource({self.base!r})"

"""Memoized, de-duplicated image loading.

One ``ImageCache`` is shared by every render pass that should reuse decoded
assets. Entries are append-only; a path that is still loading is stored as a
task so concurrent callers await the same load. Failed loads are not cached,
so the next request for the same path starts a fresh attempt.
"""

import asyncio
import logging
import os
from typing import Dict, Iterable, Optional, Tuple

from PIL import Image

from wojak_compositor.config import DEFAULT_ASSET_ROOT
from wojak_compositor.types import AssetPath, ImageLoader


logger = logging.getLogger(__name__)


class ImageLoadError(Exception):
    """An asset could not be fetched or decoded."""

    def __init__(self, path: AssetPath, reason: Optional[BaseException] = None):
        self.path = path
        self.reason = reason
        message = f"Failed to load image: {path}"
        if reason is not None:
            message = f"{message} ({reason})"
        super().__init__(message)


def resolve_asset_path(path: AssetPath, asset_root: str = DEFAULT_ASSET_ROOT) -> str:
    """Map a web-style path (``/assets/...``) onto ``asset_root``."""
    if os.path.isabs(path) and os.path.exists(path):
        return path
    return os.path.join(asset_root, path.lstrip("/"))


def _decode_file(filename: str) -> Image.Image:
    with Image.open(filename) as image:
        image.load()
        return image.convert("RGBA")


def file_loader(asset_root: str = DEFAULT_ASSET_ROOT) -> ImageLoader:
    """Loader that decodes files under ``asset_root`` off the event loop."""

    async def load(path: AssetPath) -> Image.Image:
        return await asyncio.to_thread(_decode_file, resolve_asset_path(path, asset_root))

    return load


class ImageCache:
    _images: Dict[AssetPath, Image.Image]
    _pending: Dict[AssetPath, "asyncio.Future[Image.Image]"]

    def __init__(
        self,
        loader: Optional[ImageLoader] = None,
        asset_root: str = DEFAULT_ASSET_ROOT,
    ):
        self.loader = loader or file_loader(asset_root)
        self._images = {}
        self._pending = {}

    def __len__(self) -> int:
        return len(self._images)

    def __contains__(self, path: object) -> bool:
        return path in self._images

    def clear(self) -> None:
        self._images.clear()

    async def _fetch(self, path: AssetPath) -> Image.Image:
        try:
            image = await self.loader(path)
        except ImageLoadError:
            raise
        except Exception as exc:
            raise ImageLoadError(path, exc) from exc
        finally:
            self._pending.pop(path, None)
        self._images[path] = image
        return image

    async def load(self, path: AssetPath) -> Image.Image:
        """Decoded image for ``path``; raises ``ImageLoadError`` on failure."""
        cached = self._images.get(path)
        if cached is not None:
            return cached

        pending = self._pending.get(path)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch(path))
            self._pending[path] = pending
        return await asyncio.shield(pending)

    async def preload(self, paths: Iterable[AssetPath]) -> None:
        results = await asyncio.gather(
            *(self.load(path) for path in paths), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                logger.debug("Preload skipped: %s", result)

    async def dimensions(self, path: AssetPath) -> Tuple[int, int]:
        image = await self.load(path)
        return image.width, image.height

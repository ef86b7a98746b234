"""Preview, thumbnail and export wrappers around the compositor.

All three are the same render pass at a different size; they differ only in
how the surface is encoded (inline data URL for on-screen display, encoded
bytes for download).
"""

import asyncio
import io
import logging
import pathlib
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional, Union

from PIL import Image

from wojak_compositor.cache import ImageCache
from wojak_compositor.config import DEFAULT_CANVAS_CONFIG, CanvasConfig, ExportSize
from wojak_compositor.renderer.compositor import render
from wojak_compositor.selection import RawSelection, SelectedLayers
from wojak_compositor.utils.image import to_data_url


logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "wojak"


class ImageFormat(StrEnum):
    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def is_lossy(self) -> bool:
        return self is not ImageFormat.PNG


@dataclass(frozen=True)
class ExportOptions:
    """Export settings.

    Attributes:
        format: Output encoding.
        size: Named preset or custom dimensions.
        quality: Lossy quality in [0, 1]; ``None`` uses the configured default.
        include_background: Paint the Background category.
    """

    format: ImageFormat = ImageFormat.PNG
    size: ExportSize = field(default_factory=lambda: ExportSize.of_preset("1024"))
    quality: Optional[float] = None
    include_background: bool = True


def encode_image(
    image: Image.Image,
    format: ImageFormat = ImageFormat.PNG,
    quality: Optional[float] = None,
    config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
) -> bytes:
    """Encode a rendered surface. Same input, format and quality -> same bytes."""
    if quality is None:
        quality = config.default_quality
    if not 0.0 <= quality <= 1.0:
        raise ValueError(f"Quality must be in [0, 1]: {quality}")

    buffer = io.BytesIO()
    if format is ImageFormat.PNG:
        image.save(buffer, format="PNG")
    elif format is ImageFormat.JPEG:
        # JPEG has no alpha; transparent pixels become black like a cleared canvas
        flat = Image.new("RGBA", image.size, (0, 0, 0, 255))
        flat.alpha_composite(image.convert("RGBA"))
        flat.convert("RGB").save(buffer, format="JPEG", quality=round(quality * 100))
    elif format is ImageFormat.WEBP:
        image.save(buffer, format="WEBP", quality=round(quality * 100))
    else:
        raise ValueError(f"Unsupported export format: {format}")
    return buffer.getvalue()


async def export_image(
    selection: Union[SelectedLayers, RawSelection],
    options: ExportOptions = ExportOptions(),
    cache: Optional[ImageCache] = None,
    config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
) -> bytes:
    size = config.resolve_export_size(options.size)
    image = await render(
        selection,
        size=size,
        include_background=options.include_background,
        cache=cache,
        config=config,
    )
    return encode_image(image, options.format, options.quality, config)


async def render_preview(
    selection: Union[SelectedLayers, RawSelection],
    cache: Optional[ImageCache] = None,
    config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
) -> str:
    image = await render(
        selection,
        size=config.display_size,
        include_background=True,
        cache=cache,
        config=config,
    )
    return to_data_url(encode_image(image, ImageFormat.PNG), ImageFormat.PNG.mime_type)


async def render_thumbnail(
    selection: Union[SelectedLayers, RawSelection],
    cache: Optional[ImageCache] = None,
    config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
) -> str:
    image = await render(
        selection,
        size=config.thumbnail_size,
        include_background=True,
        cache=cache,
        config=config,
    )
    return to_data_url(encode_image(image, ImageFormat.PNG), ImageFormat.PNG.mime_type)


async def download_image(
    selection: Union[SelectedLayers, RawSelection],
    options: ExportOptions = ExportOptions(),
    filename: str = DEFAULT_FILENAME,
    directory: Union[str, pathlib.Path] = ".",
    cache: Optional[ImageCache] = None,
    config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
) -> pathlib.Path:
    """Export and save as ``<directory>/<filename>.<ext>``."""
    data = await export_image(selection, options, cache=cache, config=config)
    target = pathlib.Path(directory) / f"{filename}.{options.format.extension}"
    await asyncio.to_thread(target.write_bytes, data)
    logger.info("Saved %s (%d bytes)", target, len(data))
    return target

"""Layer compositor.

A render pass is: resolve layers with the rule engine, fetch every image
concurrently through the :class:`~wojak_compositor.cache.ImageCache`, sort by
depth (stable), clear the surface and draw in order. Drawing is synchronous;
the only suspension point is the fan-in of image loads.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple, Union

from PIL import Image

from wojak_compositor.cache import ImageCache, ImageLoadError
from wojak_compositor.config import DEFAULT_CANVAS_CONFIG, CanvasConfig
from wojak_compositor.layers import RenderLayer
from wojak_compositor.rules import build_render_layers
from wojak_compositor.selection import RawSelection, SelectedLayers
from wojak_compositor.types import Category
from wojak_compositor.utils.image import clear_surface, composite_clipped, fit_to_canvas


logger = logging.getLogger(__name__)

LoadedLayer = Tuple[RenderLayer, Image.Image]


class SurfaceError(RuntimeError):
    """No drawing surface could be obtained for a render."""


def new_surface(size: int) -> Image.Image:
    if size <= 0:
        raise SurfaceError(f"Canvas size must be positive: {size}")
    try:
        return Image.new("RGBA", (size, size), (0, 0, 0, 0))
    except (MemoryError, ValueError) as exc:
        raise SurfaceError(f"Failed to create {size}x{size} canvas: {exc}") from exc


def draw_layer(surface: Image.Image, image: Image.Image, layer: RenderLayer) -> None:
    size = surface.width
    composite_clipped(surface, fit_to_canvas(image, size), layer.clip_box(size))


async def _resolve(cache: ImageCache, layer: RenderLayer) -> Optional[LoadedLayer]:
    try:
        return layer, await cache.load(layer.path)
    except ImageLoadError as exc:
        if layer.fallback_path is None:
            logger.warning("Failed to load image for %s: %s", layer.origin, exc)
            return None
        logger.info("No variant for %s, using %s", layer.path, layer.fallback_path)

    try:
        return layer, await cache.load(layer.fallback_path)
    except ImageLoadError as exc:
        logger.warning("Failed to load image for %s: %s", layer.origin, exc)
        return None


async def load_layers(
    layers: List[RenderLayer], cache: ImageCache
) -> List[LoadedLayer]:
    """Fetch all layer images at once; layers whose image fails are dropped."""
    results = await asyncio.gather(*(_resolve(cache, layer) for layer in layers))
    loaded = [result for result in results if result is not None]
    # gather keeps input order, so equal depths stay in emission order
    return sorted(loaded, key=lambda item: item[0].depth)


def draw_layers(
    surface: Image.Image,
    loaded: List[LoadedLayer],
    include_background: bool = True,
) -> Image.Image:
    clear_surface(surface)
    for layer, image in loaded:
        if not include_background and layer.origin == Category.BACKGROUND:
            continue
        draw_layer(surface, image, layer)
    return surface


async def render_onto(
    surface: Image.Image,
    selection: Union[SelectedLayers, RawSelection],
    include_background: bool = True,
    cache: Optional[ImageCache] = None,
) -> Image.Image:
    """Render into a caller-owned surface (sized by its width)."""
    if surface.mode != "RGBA":
        raise SurfaceError(f"Surface must be RGBA, got {surface.mode}")
    cache = cache if cache is not None else default_cache()
    layers = build_render_layers(selection)
    loaded = await load_layers(layers, cache)
    logger.debug(
        "Drawing %d of %d layers at %dpx", len(loaded), len(layers), surface.width
    )
    return draw_layers(surface, loaded, include_background)


async def render(
    selection: Union[SelectedLayers, RawSelection],
    size: Optional[int] = None,
    include_background: bool = True,
    cache: Optional[ImageCache] = None,
    config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
) -> Image.Image:
    """
    Composite a selection onto a fresh ``size`` x ``size`` RGBA surface.
    """
    surface = new_surface(size if size is not None else config.render_size)
    return await render_onto(
        surface,
        selection,
        include_background=include_background,
        cache=cache if cache is not None else default_cache(config),
    )


_DEFAULT_CACHES: Dict[str, ImageCache] = {}


def default_cache(config: CanvasConfig = DEFAULT_CANVAS_CONFIG) -> ImageCache:
    """Process-wide cache per asset root, for callers that do not inject one."""
    cache = _DEFAULT_CACHES.get(config.asset_root)
    if cache is None:
        cache = ImageCache(asset_root=config.asset_root)
        _DEFAULT_CACHES[config.asset_root] = cache
    return cache


class Compositor:
    cache: ImageCache
    config: CanvasConfig

    def __init__(
        self,
        cache: Optional[ImageCache] = None,
        config: CanvasConfig = DEFAULT_CANVAS_CONFIG,
    ):
        self.config = config
        self.cache = cache if cache is not None else ImageCache(asset_root=config.asset_root)

    async def render(
        self,
        selection: Union[SelectedLayers, RawSelection],
        size: Optional[int] = None,
        include_background: bool = True,
    ) -> Image.Image:
        return await render(
            selection,
            size=size,
            include_background=include_background,
            cache=self.cache,
            config=self.config,
        )

    async def render_onto(
        self,
        surface: Image.Image,
        selection: Union[SelectedLayers, RawSelection],
        include_background: bool = True,
    ) -> Image.Image:
        return await render_onto(
            surface, selection, include_background=include_background, cache=self.cache
        )

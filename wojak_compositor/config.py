"""Canvas sizes, export presets and asset location.

Mirrors the module-default plus frozen-dataclass style used by the renderer:
every entry point takes a ``CanvasConfig`` and falls back to
``DEFAULT_CANVAS_CONFIG``.
"""

from dataclasses import dataclass
from typing import Optional

from pyrsistent import pmap
from pyrsistent.typing import PMap


DEFAULT_RENDER_SIZE = 1024
DEFAULT_DISPLAY_SIZE = 512
DEFAULT_THUMBNAIL_SIZE = 256
DEFAULT_QUALITY = 0.92
DEFAULT_ASSET_ROOT = "public"

DEFAULT_EXPORT_SIZES: PMap[str, int] = pmap(
    {"512": 512, "1024": 1024, "2048": 2048}
)


@dataclass(frozen=True)
class ExportSize:
    """Either a named preset or explicit pixel dimensions.

    Output is always square; for a custom size the width wins.
    """

    preset: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def of_preset(cls, name: str) -> "ExportSize":
        return cls(preset=name)

    @classmethod
    def custom(cls, width: int, height: Optional[int] = None) -> "ExportSize":
        if width <= 0:
            raise ValueError(f"Export width must be positive: {width}")
        return cls(width=width, height=height if height is not None else width)


@dataclass(frozen=True)
class CanvasConfig:
    """Rendering configuration.

    Attributes:
        render_size: Default canvas size when none is requested.
        display_size: Interactive preview size.
        thumbnail_size: Gallery/favorites thumbnail size.
        export_sizes: Named export presets (name -> square edge in pixels).
        default_quality: Lossy encoder quality in [0, 1].
        asset_root: Directory that web-style asset paths (``/assets/...``) resolve against.
    """

    render_size: int = DEFAULT_RENDER_SIZE
    display_size: int = DEFAULT_DISPLAY_SIZE
    thumbnail_size: int = DEFAULT_THUMBNAIL_SIZE
    export_sizes: PMap[str, int] = DEFAULT_EXPORT_SIZES
    default_quality: float = DEFAULT_QUALITY
    asset_root: str = DEFAULT_ASSET_ROOT

    def resolve_export_size(self, size: ExportSize) -> int:
        if size.width is not None:
            return size.width
        if size.preset is not None:
            # unknown presets fall back to the render size
            return self.export_sizes.get(size.preset, self.render_size)
        return self.render_size


DEFAULT_CANVAS_CONFIG = CanvasConfig()

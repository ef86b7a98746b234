"""Depth table and the ``RenderLayer`` value produced by the rule engine.

Depth is a real number so synthetic layers can interleave between two adjacent
base categories (``EyesOverHannibal`` at 10.5 sits between ``Eyes`` at 10 and
``Astronaut`` at 11). Lower depths draw first.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from wojak_compositor.types import AssetPath, Category, LayerName, VirtualLayer


LAYER_DEPTH: Dict[LayerName, float] = {
    Category.BACKGROUND: 0,
    Category.BASE: 1,
    Category.CLOTHES: 2,
    VirtualLayer.CLOTHES_ADDON: 3,
    Category.FACIAL_HAIR: 4,
    Category.MOUTH_BASE: 5,
    VirtualLayer.BUBBLE_GUM_REKT: 5.1,
    Category.MOUTH_ITEM: 6,
    VirtualLayer.TYSON_TATTOO: 6.5,
    VirtualLayer.NINJA_TURTLE_UNDER_MASK: 6.6,
    Category.MASK: 7,
    VirtualLayer.EYE_PATCH_UNDER_HANNIBAL: 8,
    VirtualLayer.HANNIBAL_MASK: 9,
    Category.EYES: 10,
    VirtualLayer.EYES_OVER_HANNIBAL: 10.5,
    VirtualLayer.MASK_UNDER_ASTRONAUT: 10.8,
    VirtualLayer.ASTRONAUT: 11,
    VirtualLayer.MASK_OVER_ASTRONAUT: 11.3,
    VirtualLayer.LASER_EYES_OVER_ASTRONAUT: 11.5,
    Category.HEAD: 12,
    VirtualLayer.BANDANA_MASK_OVER_RONIN: 13,
    VirtualLayer.EYES_OVER_HEAD: 14,
    VirtualLayer.EYES_OVER_STANDARD_CUT: 15,
    VirtualLayer.MASK_OVER_STANDARD_CUT: 16,
    VirtualLayer.BUBBLE_GUM_OVER_EYES: 60,
    VirtualLayer.FULL_FACE_MASK: 100,
}

# Override depth (not a named slot) for items that must sit just over the head.
ABOVE_HEAD_DEPTH: float = LAYER_DEPTH[Category.HEAD] + 1

CATEGORY_ORDER: Tuple[Category, ...] = (
    Category.BACKGROUND,
    Category.BASE,
    Category.CLOTHES,
    Category.FACIAL_HAIR,
    Category.MOUTH_BASE,
    Category.MOUTH_ITEM,
    Category.MASK,
    Category.EYES,
    Category.HEAD,
)


def depth_of(name: LayerName) -> float:
    return LAYER_DEPTH[name]


@dataclass(frozen=True)
class RenderLayer:
    """One resolved draw of an asset.

    Attributes:
        path: Asset to draw (possibly rewritten from the selected one).
        depth: Draw order key; ties keep emission order.
        origin: Category or virtual slot that produced the layer.
        clip_right_half: Only the right 50% of the canvas is painted.
        clip_left_fraction: The left ``p`` fraction of the canvas is skipped.
        fallback_path: Asset drawn instead when ``path`` fails to load, set when
            a rule rewrote the selected path to a variant file.
    """

    path: AssetPath
    depth: float
    origin: LayerName
    clip_right_half: bool = False
    clip_left_fraction: Optional[float] = None
    fallback_path: Optional[AssetPath] = None

    def __post_init__(self) -> None:
        if self.clip_left_fraction is not None and not (
            0.0 <= self.clip_left_fraction < 1.0
        ):
            raise ValueError(
                f"clip_left_fraction must be in [0, 1): {self.clip_left_fraction}"
            )

    @property
    def is_clipped(self) -> bool:
        return self.clip_right_half or bool(self.clip_left_fraction)

    def clip_box(self, size: int) -> Optional[Tuple[int, int]]:
        """Visible column range ``[x0, x1)`` on a ``size`` wide canvas, or None."""
        if self.clip_right_half:
            return size // 2, size
        if self.clip_left_fraction:
            return int(size * self.clip_left_fraction), size
        return None


def sort_layers(layers: Iterable[RenderLayer]) -> List[RenderLayer]:
    # sorted() is stable: equal depths keep emission order
    return sorted(layers, key=lambda layer: layer.depth)

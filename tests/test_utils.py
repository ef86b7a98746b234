import asyncio
from typing import Dict, List, Optional, Set, Tuple

from PIL import Image

from wojak_compositor.cache import ImageCache
from wojak_compositor.selection import SelectedLayers, make_selection
from wojak_compositor.types import AssetPath, Category


ROOT = "/assets/wojak-layers"

BACKGROUND = f"{ROOT}/BACKGROUND/Plain/BG_Blue.png"
BASE = f"{ROOT}/BASE/BASE_Wojak_classic.png"
REKT_BASE = f"{ROOT}/BASE/BASE_Wojak_rekt.png"
RUGGED_REKT_BASE = f"{ROOT}/BASE/BASE_Wojak_rekt-rugged.png"

ASTRONAUT = f"{ROOT}/CLOTHES/CLOTHES_Astronaut_.png"
CHIA_FARMER = f"{ROOT}/CLOTHES/CLOTHES_ChiaFarmer_.png"
TECH_BRO = f"{ROOT}/CLOTHES/CLOTHES_Tech-Bro_.png"

STACHE = f"{ROOT}/FACIALHAIR/EXTRA_MOUTH_Stache_.png"
NECKBEARD = f"{ROOT}/FACIALHAIR/EXTRA_MOUTH_Neckbeard_.png"

PIZZA = f"{ROOT}/MOUTH/MOUTH_Pizza_.png"
BUBBLE_GUM = f"{ROOT}/MOUTH/MOUTH_Bubble-Gum_.png"
TEETH = f"{ROOT}/MOUTH/MOUTH_Teeth_.png"
CIG = f"{ROOT}/MOUTHITEM/EXTRA_MOUTH_Cig_.png"

BANDANA = f"{ROOT}/MASK/MOUTH_Bandana-Mask_.png"
HANNIBAL = f"{ROOT}/MASK/MOUTH_Hannibal-Mask_.png"
COPIUM = f"{ROOT}/MASK/EXTRA_MOUTH_Copium-Mask_.png"
SKULL = f"{ROOT}/MASK/MASK_Skull_Mask.png"

SHADES = f"{ROOT}/EYE/EYE_Shades_.png"
TYSON = f"{ROOT}/EYE/EYE_Tyson-Tattoo_.png"
NINJA = f"{ROOT}/EYE/EYE_Ninja-Turtle_.png"
EYE_PATCH = f"{ROOT}/EYE/EYE_Eye-Patch_.png"
LASER = f"{ROOT}/EYE/EYE_Laser-Eyes_.png"

CENTURION = f"{ROOT}/HEAD/HEAD_Centurion_.png"
CENTURION_MASKED = f"{ROOT}/HEAD/HEAD_Centurion_mask.png"
RONIN = f"{ROOT}/HEAD/HEAD_Ronin-Helmet_.png"
CLOWN = f"{ROOT}/HEAD/HEAD_Clown_.png"
STANDARD_CUT = f"{ROOT}/HEAD/HEAD_Standard-Cut-Blonde_.png"
TRUMP_WAVE = f"{ROOT}/HEAD/HEAD_Trump-Wave_.png"
BEANIE = f"{ROOT}/HEAD/HEAD_Beanie_.png"

Color = Tuple[int, int, int, int]

RED: Color = (255, 0, 0, 255)
GREEN: Color = (0, 255, 0, 255)
BLUE: Color = (0, 0, 255, 255)
WHITE: Color = (255, 255, 255, 255)
BLACK: Color = (0, 0, 0, 255)
CLEAR: Color = (0, 0, 0, 0)


def select(**layers: Optional[str]) -> SelectedLayers:
    """Selection from keyword arguments named after categories."""
    return make_selection({Category(name): path for name, path in layers.items()})


def solid_image(color: Color, size: int = 8) -> Image.Image:
    return Image.new("RGBA", (size, size), color)


def half_image(color: Color, size: int = 8, left: bool = True) -> Image.Image:
    """Opaque on one half, transparent on the other."""
    image = Image.new("RGBA", (size, size), CLEAR)
    x0, x1 = (0, size // 2) if left else (size // 2, size)
    image.paste(color, (x0, 0, x1, size))
    return image


class FakeLoader:
    """In-memory image loader that records every request."""

    def __init__(self, images: Dict[AssetPath, Image.Image]):
        self.images = dict(images)
        self.calls: List[AssetPath] = []
        self.fail_once: Set[AssetPath] = set()

    async def __call__(self, path: AssetPath) -> Image.Image:
        self.calls.append(path)
        if path in self.fail_once:
            self.fail_once.discard(path)
            raise OSError(f"transient failure: {path}")
        if path not in self.images:
            raise FileNotFoundError(path)
        return self.images[path]

    def count(self, path: AssetPath) -> int:
        return self.calls.count(path)


class GatedLoader(FakeLoader):
    """Holds every request until ``expected`` distinct paths have been asked for."""

    def __init__(self, images: Dict[AssetPath, Image.Image], expected: int):
        super().__init__(images)
        self.expected = expected
        self.all_requested = asyncio.Event()

    async def __call__(self, path: AssetPath) -> Image.Image:
        self.calls.append(path)
        if len(set(self.calls)) >= self.expected:
            self.all_requested.set()
        await self.all_requested.wait()
        return self.images[path]


def make_cache(images: Dict[AssetPath, Image.Image]) -> Tuple[ImageCache, FakeLoader]:
    loader = FakeLoader(images)
    return ImageCache(loader=loader), loader


def summarize(layers) -> List[Tuple[str, float]]:
    return [(str(layer.origin), layer.depth) for layer in layers]

"""Common type aliases and enumerations.

``Category`` is the closed set of user-selectable trait slots. ``VirtualLayer``
names the synthetic slots the rule engine draws on top of (or between) them to
resolve occlusion conflicts between specific trait combinations.
"""

from enum import StrEnum
from typing import Awaitable, Callable, Union, TYPE_CHECKING


if TYPE_CHECKING:
    from PIL import Image


class Category(StrEnum):
    """User-selectable trait categories, in canonical bottom-to-top order."""

    BACKGROUND = "Background"
    BASE = "Base"
    CLOTHES = "Clothes"
    FACIAL_HAIR = "FacialHair"
    MOUTH_BASE = "MouthBase"
    MOUTH_ITEM = "MouthItem"
    MASK = "Mask"
    EYES = "Eyes"
    HEAD = "Head"


class VirtualLayer(StrEnum):
    """Synthetic layers derived by the rule engine, never selected directly."""

    CLOTHES_ADDON = "ClothesAddon"
    BUBBLE_GUM_REKT = "BubbleGumRekt"
    TYSON_TATTOO = "TysonTattoo"
    NINJA_TURTLE_UNDER_MASK = "NinjaTurtleUnderMask"
    EYE_PATCH_UNDER_HANNIBAL = "EyePatchUnderHannibal"
    HANNIBAL_MASK = "HannibalMask"
    EYES_OVER_HANNIBAL = "EyesOverHannibal"
    MASK_UNDER_ASTRONAUT = "MaskUnderAstronaut"
    ASTRONAUT = "Astronaut"
    MASK_OVER_ASTRONAUT = "MaskOverAstronaut"
    LASER_EYES_OVER_ASTRONAUT = "LaserEyesOverAstronaut"
    BANDANA_MASK_OVER_RONIN = "BandanaMaskOverRonin"
    EYES_OVER_HEAD = "EyesOverHead"
    EYES_OVER_STANDARD_CUT = "EyesOverStandardCut"
    MASK_OVER_STANDARD_CUT = "MaskOverStandardCut"
    BUBBLE_GUM_OVER_EYES = "BubbleGumOverEyes"
    FULL_FACE_MASK = "FullFaceMask"


LayerName = Union[Category, VirtualLayer]

AssetPath = str

ImageLoader = Callable[[AssetPath], Awaitable["Image.Image"]]

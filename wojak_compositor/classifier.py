"""Trait classification.

Asset identifiers are content-addressed file paths; their names are the only
source of semantic truth. Classification happens once, when a path enters a
``SelectedLayers`` (see :func:`classify_asset`), and attaches a set of
:class:`AssetKind` tags to it. The rule engine then reads those tags through
:class:`Traits` instead of re-matching strings on every render.

Unknown identifiers match nothing and carry an empty tag set, so they draw once
at their category's base depth.
"""

import re
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING

from pyrsistent import pset
from pyrsistent.typing import PSet

from wojak_compositor.types import AssetPath, Category


if TYPE_CHECKING:
    from wojak_compositor.selection import SelectedLayers


MOUTH_OVER_CENTURION: Tuple[str, ...] = (
    "stach",
    "Pizza",
    "Bubble-Gum",
    "Pipe",
    "Joint",
    "Cohiba",
    "Cig",
    "Sick",
)
NINJA_COVERING_MASKS: Tuple[str, ...] = ("copium", "hannibal", "bandana")
FULL_FACE_MASKS: Tuple[str, ...] = ("skull_mask", "skull-mask", "fake_it", "fake-it")
HEADS_NEEDING_EYES_OVERLAY: Tuple[str, ...] = (
    "clown",
    "pirate",
    "ronin",
    "supa",
    "saiyan",
)
MOUTH_BLOCKED_BY_ASTRONAUT: Tuple[str, ...] = ("pipe", "pizza", "bubble-gum")


class AssetKind(StrEnum):
    """Semantic tags attached to an asset at ingestion time."""

    REKT_BASE = auto()
    ASTRONAUT = auto()
    CHIA_FARMER = auto()
    OVER_CENTURION = auto()
    BUBBLE_GUM = auto()
    BLOCKED_BY_ASTRONAUT = auto()
    BANDANA_MASK = auto()
    HANNIBAL_MASK = auto()
    COPIUM_MASK = auto()
    FULL_FACE_MASK = auto()
    COVERS_NINJA = auto()
    TYSON_TATTOO = auto()
    NINJA_TURTLE = auto()
    EYE_PATCH = auto()
    LASER_EYES = auto()
    CENTURION = auto()
    RONIN = auto()
    STANDARD_CUT = auto()
    TRUMP_WAVE = auto()
    EYES_OVERLAY_HEAD = auto()


def path_contains(path: Optional[AssetPath], keyword: str) -> bool:
    if not path:
        return False
    return keyword.lower() in path.lower()


def contains_any(path: Optional[AssetPath], keywords: Sequence[str]) -> bool:
    return any(path_contains(path, keyword) for keyword in keywords)


def contains_all(path: Optional[AssetPath], keywords: Sequence[str]) -> bool:
    return all(path_contains(path, keyword) for keyword in keywords)


# --- Path predicates ---


def is_rekt_base(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "rekt") and not path_contains(path, "rugged")


def is_astronaut(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "astronaut")


def is_chia_farmer(path: Optional[AssetPath]) -> bool:
    return contains_all(path, ("chia", "farmer"))


def is_stache(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "stach")


def is_mouth_over_centurion(path: Optional[AssetPath]) -> bool:
    return contains_any(path, MOUTH_OVER_CENTURION)


def is_bubble_gum(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "Bubble-Gum")


def is_blocked_by_astronaut(path: Optional[AssetPath]) -> bool:
    return contains_any(path, MOUTH_BLOCKED_BY_ASTRONAUT)


def is_full_face_mask(path: Optional[AssetPath]) -> bool:
    return contains_any(path, FULL_FACE_MASKS)


def is_mask_covering_ninja(path: Optional[AssetPath]) -> bool:
    return contains_any(path, NINJA_COVERING_MASKS)


def is_tyson_tattoo(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "tyson") or path_contains(path, "tattoo")


def is_ninja_turtle(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "ninja") or path_contains(path, "turtle")


def is_eye_patch(path: Optional[AssetPath]) -> bool:
    return contains_all(path, ("eye", "patch"))


def is_laser_eyes(path: Optional[AssetPath]) -> bool:
    return path_contains(path, "laser")


def is_standard_cut(path: Optional[AssetPath]) -> bool:
    return contains_all(path, ("standard", "cut"))


def is_trump_wave(path: Optional[AssetPath]) -> bool:
    return contains_all(path, ("trump", "wave"))


def needs_eyes_overlay(path: Optional[AssetPath]) -> bool:
    return contains_any(path, HEADS_NEEDING_EYES_OVERLAY)


PathPredicate = Callable[[Optional[AssetPath]], bool]

# Which kinds are meaningful for which category. A keyword only counts in the
# category it was designed for ("ronin" in a Background name means nothing).
KIND_RULES: Dict[Category, List[Tuple[PathPredicate, AssetKind]]] = {
    Category.BACKGROUND: [],
    Category.BASE: [(is_rekt_base, AssetKind.REKT_BASE)],
    Category.CLOTHES: [
        (is_astronaut, AssetKind.ASTRONAUT),
        (is_chia_farmer, AssetKind.CHIA_FARMER),
    ],
    Category.FACIAL_HAIR: [(is_stache, AssetKind.OVER_CENTURION)],
    Category.MOUTH_BASE: [
        (is_mouth_over_centurion, AssetKind.OVER_CENTURION),
        (is_bubble_gum, AssetKind.BUBBLE_GUM),
        (is_blocked_by_astronaut, AssetKind.BLOCKED_BY_ASTRONAUT),
    ],
    Category.MOUTH_ITEM: [(is_mouth_over_centurion, AssetKind.OVER_CENTURION)],
    Category.MASK: [
        (lambda p: path_contains(p, "bandana"), AssetKind.BANDANA_MASK),
        (lambda p: path_contains(p, "hannibal"), AssetKind.HANNIBAL_MASK),
        (lambda p: path_contains(p, "copium"), AssetKind.COPIUM_MASK),
        (is_full_face_mask, AssetKind.FULL_FACE_MASK),
        (is_mask_covering_ninja, AssetKind.COVERS_NINJA),
    ],
    Category.EYES: [
        (is_tyson_tattoo, AssetKind.TYSON_TATTOO),
        (is_ninja_turtle, AssetKind.NINJA_TURTLE),
        (is_eye_patch, AssetKind.EYE_PATCH),
        (is_laser_eyes, AssetKind.LASER_EYES),
    ],
    Category.HEAD: [
        (lambda p: path_contains(p, "centurion"), AssetKind.CENTURION),
        (lambda p: path_contains(p, "ronin"), AssetKind.RONIN),
        (is_standard_cut, AssetKind.STANDARD_CUT),
        (is_trump_wave, AssetKind.TRUMP_WAVE),
        (needs_eyes_overlay, AssetKind.EYES_OVERLAY_HEAD),
    ],
}


def classify_asset(category: Category, path: AssetPath) -> PSet[AssetKind]:
    """Tag ``path`` with every kind its category recognises."""
    return pset(kind for predicate, kind in KIND_RULES[category] if predicate(path))


_PNG_SUFFIX = re.compile(r"_?\.png$", re.IGNORECASE)


def derive_variant_path(path: AssetPath, suffix: str) -> AssetPath:
    """Name of a sibling asset that ships as a separate file.

    ``CLOTHES_ChiaFarmer_.png`` -> ``CLOTHES_ChiaFarmer_add.png``. Paths without
    a ``.png`` suffix get ``_<suffix>`` appended.
    """
    variant, count = _PNG_SUFFIX.subn(f"_{suffix}.png", path)
    if count == 0:
        return f"{path}_{suffix}"
    return variant


@dataclass(frozen=True)
class Traits:
    """Every condition the layer rules branch on, derived from one selection.

    Presence flags read a single category's tags; the remaining flags combine
    two categories. Recomputed on every pass; never stored.
    """

    has_mask: bool = False
    has_eyes: bool = False
    has_rekt_base: bool = False
    has_astronaut: bool = False
    has_chia_farmer: bool = False
    has_bubble_gum: bool = False
    has_bandana: bool = False
    has_hannibal: bool = False
    has_copium: bool = False
    has_full_face_mask: bool = False
    mask_covers_ninja: bool = False
    has_tyson: bool = False
    has_ninja: bool = False
    has_eye_patch: bool = False
    has_laser_eyes: bool = False
    has_centurion: bool = False
    has_ronin: bool = False
    needs_eyes_over_head: bool = False
    needs_layers_above_head: bool = False

    @property
    def needs_centurion_mask_variant(self) -> bool:
        return self.has_centurion and self.has_mask

    @property
    def needs_tyson_under_mask(self) -> bool:
        return self.has_tyson and self.has_mask

    @property
    def needs_ninja_under_mask(self) -> bool:
        return self.has_ninja and self.mask_covers_ninja

    @property
    def needs_eye_patch_under_hannibal(self) -> bool:
        return self.has_eye_patch and self.has_hannibal

    @property
    def ninja_beside_helmet(self) -> bool:
        return self.has_ninja and (self.has_astronaut or self.has_ronin)


def derive_traits(selection: "SelectedLayers") -> Traits:
    def tagged(category: Category, kind: AssetKind) -> bool:
        asset = selection.get(category)
        return asset is not None and kind in asset.kinds

    return Traits(
        has_mask=selection.has(Category.MASK),
        has_eyes=selection.has(Category.EYES),
        has_rekt_base=tagged(Category.BASE, AssetKind.REKT_BASE),
        has_astronaut=tagged(Category.CLOTHES, AssetKind.ASTRONAUT),
        has_chia_farmer=tagged(Category.CLOTHES, AssetKind.CHIA_FARMER),
        has_bubble_gum=tagged(Category.MOUTH_BASE, AssetKind.BUBBLE_GUM),
        has_bandana=tagged(Category.MASK, AssetKind.BANDANA_MASK),
        has_hannibal=tagged(Category.MASK, AssetKind.HANNIBAL_MASK),
        has_copium=tagged(Category.MASK, AssetKind.COPIUM_MASK),
        has_full_face_mask=tagged(Category.MASK, AssetKind.FULL_FACE_MASK),
        mask_covers_ninja=tagged(Category.MASK, AssetKind.COVERS_NINJA),
        has_tyson=tagged(Category.EYES, AssetKind.TYSON_TATTOO),
        has_ninja=tagged(Category.EYES, AssetKind.NINJA_TURTLE),
        has_eye_patch=tagged(Category.EYES, AssetKind.EYE_PATCH),
        has_laser_eyes=tagged(Category.EYES, AssetKind.LASER_EYES),
        has_centurion=tagged(Category.HEAD, AssetKind.CENTURION),
        has_ronin=tagged(Category.HEAD, AssetKind.RONIN),
        needs_eyes_over_head=tagged(Category.HEAD, AssetKind.EYES_OVERLAY_HEAD),
        needs_layers_above_head=(
            tagged(Category.HEAD, AssetKind.STANDARD_CUT)
            or tagged(Category.HEAD, AssetKind.TRUMP_WAVE)
        ),
    )

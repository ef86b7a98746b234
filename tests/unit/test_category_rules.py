from typing import Optional

from wojak_compositor.classifier import derive_traits
from wojak_compositor.layers import ABOVE_HEAD_DEPTH, RenderLayer
from wojak_compositor.rules import (
    BANDANA_HELMET_CLIP,
    NINJA_HELMET_CLIP,
    EmitInstead,
    LayerRule,
    RaiseDepth,
    RewritePath,
    Skip,
    resolve_category_layer,
)
from wojak_compositor.selection import SelectedLayers
from wojak_compositor.types import Category, VirtualLayer
from tests.test_utils import (
    ASTRONAUT,
    BANDANA,
    BASE,
    BEANIE,
    CENTURION,
    CENTURION_MASKED,
    CIG,
    COPIUM,
    EYE_PATCH,
    HANNIBAL,
    LASER,
    NECKBEARD,
    NINJA,
    PIZZA,
    RONIN,
    SHADES,
    SKULL,
    STACHE,
    STANDARD_CUT,
    TEETH,
    TRUMP_WAVE,
    TYSON,
    select,
)


def resolve(selection: SelectedLayers, category: Category) -> Optional[RenderLayer]:
    asset = selection.get(category)
    assert asset is not None
    return resolve_category_layer(category, asset, derive_traits(selection))


def test_unmatched_asset_draws_at_base_depth() -> None:
    selection = select(Base=BASE, Head=BEANIE)
    assert resolve(selection, Category.HEAD) == RenderLayer(BEANIE, 12, Category.HEAD)


def test_astronaut_skips_clothes_head_and_mouth_item() -> None:
    selection = select(Clothes=ASTRONAUT, MouthItem=CIG, Head=BEANIE)
    assert resolve(selection, Category.CLOTHES) is None
    assert resolve(selection, Category.MOUTH_ITEM) is None
    assert resolve(selection, Category.HEAD) is None


def test_astronaut_blocks_only_some_mouths() -> None:
    assert resolve(select(Clothes=ASTRONAUT, MouthBase=PIZZA), Category.MOUTH_BASE) is None
    layer = resolve(select(Clothes=ASTRONAUT, MouthBase=TEETH), Category.MOUTH_BASE)
    assert layer is not None and layer.depth == 5


def test_centurion_raises_mouth_items_above_head() -> None:
    selection = select(FacialHair=STACHE, MouthBase=PIZZA, MouthItem=CIG, Head=CENTURION)
    for category in (Category.FACIAL_HAIR, Category.MOUTH_BASE, Category.MOUTH_ITEM):
        layer = resolve(selection, category)
        assert layer is not None
        assert layer.depth == ABOVE_HEAD_DEPTH
        assert layer.origin == category


def test_centurion_leaves_other_facial_hair_alone() -> None:
    layer = resolve(select(FacialHair=NECKBEARD, Head=CENTURION), Category.FACIAL_HAIR)
    assert layer is not None and layer.depth == 4


def test_masks_skipped_by_their_virtual_slot() -> None:
    assert resolve(select(Mask=SKULL), Category.MASK) is None
    assert resolve(select(Mask=HANNIBAL), Category.MASK) is None
    assert resolve(select(Mask=BANDANA, Clothes=ASTRONAUT), Category.MASK) is None
    assert resolve(select(Mask=COPIUM, Head=TRUMP_WAVE), Category.MASK) is None
    assert resolve(select(Mask=COPIUM), Category.MASK) == RenderLayer(
        COPIUM, 7, Category.MASK
    )
    assert resolve(select(Mask=BANDANA, Head=STANDARD_CUT), Category.MASK) is not None


def test_laser_eyes_move_over_astronaut() -> None:
    layer = resolve(select(Clothes=ASTRONAUT, Eyes=LASER), Category.EYES)
    assert layer == RenderLayer(
        LASER, 11.5, VirtualLayer.LASER_EYES_OVER_ASTRONAUT
    )


def test_ninja_beside_helmet_is_clipped() -> None:
    for head_selection in (select(Clothes=ASTRONAUT, Eyes=NINJA), select(Head=RONIN, Eyes=NINJA)):
        layer = resolve(head_selection, Category.EYES)
        assert layer == RenderLayer(
            NINJA, 10, Category.EYES, clip_left_fraction=NINJA_HELMET_CLIP
        )


def test_ninja_beside_ronin_wins_over_mask() -> None:
    layer = resolve(select(Head=RONIN, Eyes=NINJA, Mask=BANDANA), Category.EYES)
    assert layer is not None
    assert layer.clip_left_fraction == NINJA_HELMET_CLIP


def test_eyes_skipped_under_mask_or_above_head() -> None:
    assert resolve(select(Eyes=TYSON, Mask=BANDANA), Category.EYES) is None
    assert resolve(select(Eyes=NINJA, Mask=COPIUM), Category.EYES) is None
    assert resolve(select(Eyes=EYE_PATCH, Mask=HANNIBAL), Category.EYES) is None
    assert resolve(select(Eyes=SHADES, Head=STANDARD_CUT), Category.EYES) is None
    assert resolve(select(Eyes=EYE_PATCH, Head=STANDARD_CUT), Category.EYES) is not None
    assert resolve(select(Eyes=TYSON), Category.EYES) is not None


def test_centurion_with_mask_uses_mask_variant() -> None:
    layer = resolve(select(Head=CENTURION, Mask=BANDANA), Category.HEAD)
    assert layer == RenderLayer(CENTURION_MASKED, 12, Category.HEAD, fallback_path=CENTURION)
    plain = resolve(select(Head=CENTURION), Category.HEAD)
    assert plain == RenderLayer(CENTURION, 12, Category.HEAD)


def test_first_terminal_rule_wins() -> None:
    selection = select(Head=BEANIE)
    asset = selection.get(Category.HEAD)
    fired = []
    rules = [
        LayerRule("rename", lambda t, a: True, RewritePath(lambda p: p + "?v2")),
        LayerRule("lift", lambda t, a: True, RaiseDepth(20)),
        LayerRule("move", lambda t, a: True, EmitInstead(VirtualLayer.EYES_OVER_HEAD)),
        LayerRule("drop", lambda t, a: True, Skip()),
    ]
    layer = resolve_category_layer(
        Category.HEAD, asset, derive_traits(selection), rules, fired
    )
    assert layer == RenderLayer(
        BEANIE + "?v2", 20, VirtualLayer.EYES_OVER_HEAD, fallback_path=BEANIE
    )
    assert fired == ["rename", "lift", "move"]


def test_bandana_clip_constant() -> None:
    assert 0 < NINJA_HELMET_CLIP < BANDANA_HELMET_CLIP < 1

"""Layer rule engine.

Turns a ``SelectedLayers`` into the ordered list of ``RenderLayer`` draws that
produces a correctly occluded character. Two phases:

* **Category pass.** Each selected category, in canonical order, walks its
  entry in :data:`CATEGORY_RULES`. A rule whose predicate holds applies its
  effect: ``Skip`` and ``EmitInstead`` end the walk, ``RaiseDepth`` and
  ``RewritePath`` adjust the pending layer and continue. Precedence is the
  order of the table.
* **Virtual pass.** Every rule in :data:`DEFAULT_VIRTUAL_RULES` is evaluated
  against the selection itself (never against the category pass output)
  and may contribute one extra layer.

Layers sharing a depth keep emission order: category pass first, then the
virtual rules in list order. The final sort is stable, so this tie-break is
part of the visual contract.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from wojak_compositor.classifier import (
    AssetKind,
    Traits,
    derive_traits,
    derive_variant_path,
)
from wojak_compositor.layers import (
    ABOVE_HEAD_DEPTH,
    LAYER_DEPTH,
    RenderLayer,
    sort_layers,
)
from wojak_compositor.selection import (
    RawSelection,
    SelectedLayers,
    TraitAsset,
    as_selection,
)
from wojak_compositor.types import AssetPath, Category, LayerName, VirtualLayer


BUBBLE_GUM_REKT_PATH: AssetPath = "/assets/wojak-layers/MOUTH/MOUTH_Bubble-Gum_rekt.png"

NINJA_HELMET_CLIP = 0.25
BANDANA_HELMET_CLIP = 0.30


# --- Category pass ---


@dataclass(frozen=True)
class Skip:
    pass


@dataclass(frozen=True)
class EmitInstead:
    origin: LayerName
    depth: Optional[float] = None
    clip_left_fraction: Optional[float] = None


@dataclass(frozen=True)
class RaiseDepth:
    depth: float


@dataclass(frozen=True)
class RewritePath:
    transform: Callable[[AssetPath], AssetPath]


Effect = Union[Skip, EmitInstead, RaiseDepth, RewritePath]
RulePredicate = Callable[[Traits, TraitAsset], bool]


@dataclass(frozen=True)
class LayerRule:
    name: str
    applies: RulePredicate
    effect: Effect


def _kind(kind: AssetKind) -> Callable[[TraitAsset], bool]:
    return lambda asset: kind in asset.kinds


_is_over_centurion = _kind(AssetKind.OVER_CENTURION)
_is_blocked_by_astronaut = _kind(AssetKind.BLOCKED_BY_ASTRONAUT)


def centurion_mask_variant(path: AssetPath) -> AssetPath:
    return derive_variant_path(path, "mask")


CATEGORY_RULES: Dict[Category, List[LayerRule]] = {
    Category.CLOTHES: [
        # drawn by the Astronaut virtual layer instead
        LayerRule("astronaut_clothes", lambda t, a: t.has_astronaut, Skip()),
    ],
    Category.FACIAL_HAIR: [
        LayerRule(
            "stache_over_centurion",
            lambda t, a: t.has_centurion and _is_over_centurion(a),
            RaiseDepth(ABOVE_HEAD_DEPTH),
        ),
    ],
    Category.MOUTH_BASE: [
        LayerRule(
            "mouth_blocked_by_astronaut",
            lambda t, a: t.has_astronaut and _is_blocked_by_astronaut(a),
            Skip(),
        ),
        LayerRule(
            "mouth_over_centurion",
            lambda t, a: t.has_centurion and _is_over_centurion(a),
            RaiseDepth(ABOVE_HEAD_DEPTH),
        ),
    ],
    Category.MOUTH_ITEM: [
        LayerRule("mouth_item_under_astronaut", lambda t, a: t.has_astronaut, Skip()),
        LayerRule(
            "mouth_item_over_centurion",
            lambda t, a: t.has_centurion and _is_over_centurion(a),
            RaiseDepth(ABOVE_HEAD_DEPTH),
        ),
    ],
    Category.MASK: [
        LayerRule("full_face_mask", lambda t, a: t.has_full_face_mask, Skip()),
        LayerRule("mask_with_astronaut", lambda t, a: t.has_astronaut, Skip()),
        LayerRule("hannibal_mask", lambda t, a: t.has_hannibal, Skip()),
        LayerRule(
            "copium_over_standard_cut",
            lambda t, a: t.has_copium and t.needs_layers_above_head,
            Skip(),
        ),
    ],
    Category.EYES: [
        LayerRule(
            "laser_eyes_over_astronaut",
            lambda t, a: t.has_laser_eyes and t.has_astronaut,
            EmitInstead(
                VirtualLayer.LASER_EYES_OVER_ASTRONAUT,
                depth=LAYER_DEPTH[VirtualLayer.LASER_EYES_OVER_ASTRONAUT],
            ),
        ),
        LayerRule(
            "ninja_beside_astronaut",
            lambda t, a: t.has_ninja and t.has_astronaut,
            EmitInstead(Category.EYES, clip_left_fraction=NINJA_HELMET_CLIP),
        ),
        LayerRule(
            "ninja_beside_ronin",
            lambda t, a: t.has_ninja and t.has_ronin,
            EmitInstead(Category.EYES, clip_left_fraction=NINJA_HELMET_CLIP),
        ),
        LayerRule("tyson_under_mask", lambda t, a: t.needs_tyson_under_mask, Skip()),
        LayerRule("ninja_under_mask", lambda t, a: t.needs_ninja_under_mask, Skip()),
        LayerRule(
            "eye_patch_under_hannibal",
            lambda t, a: t.needs_eye_patch_under_hannibal,
            Skip(),
        ),
        LayerRule(
            "eyes_over_standard_cut",
            lambda t, a: t.needs_layers_above_head and not t.has_eye_patch,
            Skip(),
        ),
    ],
    Category.HEAD: [
        # helmet replaces the head
        LayerRule("astronaut_helmet", lambda t, a: t.has_astronaut, Skip()),
        LayerRule(
            "centurion_mask_variant",
            lambda t, a: t.needs_centurion_mask_variant,
            RewritePath(centurion_mask_variant),
        ),
    ],
}


def resolve_category_layer(
    category: Category,
    asset: TraitAsset,
    traits: Traits,
    rules: Optional[List[LayerRule]] = None,
    fired: Optional[List[str]] = None,
) -> Optional[RenderLayer]:
    """Apply ``category``'s rules to ``asset``; None when the layer is skipped."""
    if rules is None:
        rules = CATEGORY_RULES.get(category, [])

    path = asset.path
    depth = LAYER_DEPTH[category]
    for rule in rules:
        if not rule.applies(traits, asset):
            continue
        if fired is not None:
            fired.append(rule.name)
        effect = rule.effect
        if isinstance(effect, Skip):
            return None
        if isinstance(effect, EmitInstead):
            return RenderLayer(
                path=path,
                depth=depth if effect.depth is None else effect.depth,
                origin=effect.origin,
                clip_left_fraction=effect.clip_left_fraction,
                fallback_path=asset.path if path != asset.path else None,
            )
        if isinstance(effect, RaiseDepth):
            depth = effect.depth
        elif isinstance(effect, RewritePath):
            path = effect.transform(path)
    return RenderLayer(
        path=path,
        depth=depth,
        origin=category,
        fallback_path=asset.path if path != asset.path else None,
    )


# --- Virtual pass ---

VirtualRule = Callable[[SelectedLayers, Traits], Optional[RenderLayer]]


def virtual_rule_name(rule: VirtualRule) -> str:
    """Name reported by :func:`explain_render_layers`, ``astronaut_rule`` -> ``astronaut``."""
    return rule.__name__.removesuffix("_rule")


def _virtual(
    path: Optional[AssetPath],
    slot: VirtualLayer,
    clip_right_half: bool = False,
    clip_left_fraction: Optional[float] = None,
) -> Optional[RenderLayer]:
    if path is None:
        return None
    return RenderLayer(
        path=path,
        depth=LAYER_DEPTH[slot],
        origin=slot,
        clip_right_half=clip_right_half,
        clip_left_fraction=clip_left_fraction,
    )


def astronaut_rule(selection: SelectedLayers, traits: Traits) -> Optional[RenderLayer]:
    if not traits.has_astronaut:
        return None
    return _virtual(selection.path(Category.CLOTHES), VirtualLayer.ASTRONAUT)


def astronaut_mask_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not traits.has_astronaut or not traits.has_mask or traits.has_full_face_mask:
        return None
    mask_path = selection.path(Category.MASK)
    if traits.has_bandana:
        # keeps the bandana from poking out of the helmet
        return _virtual(
            mask_path,
            VirtualLayer.MASK_UNDER_ASTRONAUT,
            clip_left_fraction=BANDANA_HELMET_CLIP,
        )
    if traits.has_hannibal:
        return _virtual(mask_path, VirtualLayer.MASK_UNDER_ASTRONAUT)
    return _virtual(mask_path, VirtualLayer.MASK_OVER_ASTRONAUT)


def clothes_addon_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    clothes_path = selection.path(Category.CLOTHES)
    if not traits.has_chia_farmer or clothes_path is None:
        return None
    return _virtual(
        derive_variant_path(clothes_path, "add"), VirtualLayer.CLOTHES_ADDON
    )


def tyson_tattoo_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not traits.needs_tyson_under_mask:
        return None
    return _virtual(selection.path(Category.EYES), VirtualLayer.TYSON_TATTOO)


def ninja_turtle_under_mask_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not traits.needs_ninja_under_mask:
        return None
    return _virtual(
        selection.path(Category.EYES), VirtualLayer.NINJA_TURTLE_UNDER_MASK
    )


def eye_patch_under_hannibal_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not traits.needs_eye_patch_under_hannibal:
        return None
    return _virtual(
        selection.path(Category.EYES), VirtualLayer.EYE_PATCH_UNDER_HANNIBAL
    )


def hannibal_mask_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    # Standard Cut / Trump Wave heads take the mask above the head instead
    if not traits.has_hannibal or traits.needs_layers_above_head:
        return None
    return _virtual(selection.path(Category.MASK), VirtualLayer.HANNIBAL_MASK)


def bubble_gum_rekt_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not (traits.has_bubble_gum and traits.has_rekt_base):
        return None
    return _virtual(BUBBLE_GUM_REKT_PATH, VirtualLayer.BUBBLE_GUM_REKT)


def bubble_gum_over_eyes_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not (traits.has_bubble_gum and traits.has_eyes):
        return None
    return _virtual(
        selection.path(Category.MOUTH_BASE), VirtualLayer.BUBBLE_GUM_OVER_EYES
    )


def bandana_over_ronin_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not (traits.has_bandana and traits.has_ronin):
        return None
    return _virtual(
        selection.path(Category.MASK),
        VirtualLayer.BANDANA_MASK_OVER_RONIN,
        clip_right_half=True,
    )


def eyes_over_head_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not traits.needs_eyes_over_head or traits.has_tyson or traits.has_ninja:
        return None
    return _virtual(
        selection.path(Category.EYES),
        VirtualLayer.EYES_OVER_HEAD,
        clip_right_half=True,
    )


def eyes_over_standard_cut_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if (
        not traits.needs_layers_above_head
        or traits.has_tyson
        or traits.has_ninja
        or traits.has_astronaut
        or traits.has_eye_patch
    ):
        return None
    return _virtual(selection.path(Category.EYES), VirtualLayer.EYES_OVER_STANDARD_CUT)


def mask_over_standard_cut_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    # bandana stays below the head
    if not traits.needs_layers_above_head or not (
        traits.has_hannibal or traits.has_copium
    ):
        return None
    return _virtual(selection.path(Category.MASK), VirtualLayer.MASK_OVER_STANDARD_CUT)


def full_face_mask_rule(
    selection: SelectedLayers, traits: Traits
) -> Optional[RenderLayer]:
    if not traits.has_full_face_mask:
        return None
    return _virtual(selection.path(Category.MASK), VirtualLayer.FULL_FACE_MASK)


DEFAULT_VIRTUAL_RULES: List[VirtualRule] = [
    astronaut_rule,
    astronaut_mask_rule,
    clothes_addon_rule,
    tyson_tattoo_rule,
    ninja_turtle_under_mask_rule,
    eye_patch_under_hannibal_rule,
    hannibal_mask_rule,
    bubble_gum_rekt_rule,
    bubble_gum_over_eyes_rule,
    bandana_over_ronin_rule,
    eyes_over_head_rule,
    eyes_over_standard_cut_rule,
    mask_over_standard_cut_rule,
    full_face_mask_rule,
]


# --- Engine ---


def _emit_layers(
    selection: SelectedLayers,
    category_rules: Dict[Category, List[LayerRule]],
    virtual_rules: List[VirtualRule],
    fired: Optional[List[str]] = None,
) -> List[RenderLayer]:
    traits = derive_traits(selection)
    layers: List[RenderLayer] = []

    for category, asset in selection.items():
        layer = resolve_category_layer(
            category, asset, traits, category_rules.get(category, []), fired
        )
        if layer is not None:
            layers.append(layer)

    for rule in virtual_rules:
        layer = rule(selection, traits)
        if layer is not None:
            if fired is not None:
                fired.append(virtual_rule_name(rule))
            layers.append(layer)

    return layers


def build_render_layers(
    selection: Union[SelectedLayers, RawSelection],
    category_rules: Dict[Category, List[LayerRule]] = CATEGORY_RULES,
    virtual_rules: List[VirtualRule] = DEFAULT_VIRTUAL_RULES,
) -> List[RenderLayer]:
    """Resolve a selection into depth-sorted render layers.

    Never fails: an empty selection yields no layers, and assets no rule
    recognises draw once at their category's depth.
    """
    layers = _emit_layers(as_selection(selection), category_rules, virtual_rules)
    return sort_layers(layers)


def explain_render_layers(
    selection: Union[SelectedLayers, RawSelection],
    category_rules: Dict[Category, List[LayerRule]] = CATEGORY_RULES,
    virtual_rules: List[VirtualRule] = DEFAULT_VIRTUAL_RULES,
) -> Tuple[List[RenderLayer], List[str]]:
    """Like :func:`build_render_layers`, also returning the rules that fired."""
    fired: List[str] = []
    layers = _emit_layers(as_selection(selection), category_rules, virtual_rules, fired)
    return sort_layers(layers), fired

"""Selected traits, one asset (or none) per category.

A ``SelectedLayers`` is built by the selection UI on every user choice and is
read-only to the compositor. Paths are classified once, here.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

from pyrsistent import pmap, pset
from pyrsistent.typing import PMap, PSet

from wojak_compositor.classifier import AssetKind, classify_asset
from wojak_compositor.layers import CATEGORY_ORDER
from wojak_compositor.types import AssetPath, Category


NONE_VALUE = "none"

RawSelection = Mapping[Union[Category, str], Optional[AssetPath]]


@dataclass(frozen=True)
class TraitAsset:
    """An asset path plus the kind tags attached to it at ingestion."""

    path: AssetPath
    kinds: PSet[AssetKind] = pset()

    @classmethod
    def tagged(cls, category: Category, path: AssetPath) -> "TraitAsset":
        return cls(path=path, kinds=classify_asset(category, path))


@dataclass(frozen=True)
class SelectedLayers:
    assets: PMap[Category, TraitAsset] = pmap()

    def get(self, category: Category) -> Optional[TraitAsset]:
        return self.assets.get(category)

    def path(self, category: Category) -> Optional[AssetPath]:
        asset = self.assets.get(category)
        return asset.path if asset is not None else None

    def has(self, category: Category) -> bool:
        return category in self.assets

    def items(self) -> Iterator[Tuple[Category, TraitAsset]]:
        """Selected categories in canonical order."""
        for category in CATEGORY_ORDER:
            asset = self.assets.get(category)
            if asset is not None:
                yield category, asset

    def to_dict(self) -> Dict[str, AssetPath]:
        return {category.value: asset.path for category, asset in self.items()}


def is_empty_value(path: Optional[AssetPath]) -> bool:
    return path is None or path.strip() == "" or path.strip().lower() == NONE_VALUE


def make_selection(raw: RawSelection) -> SelectedLayers:
    """Normalize a ``category -> path`` mapping into a ``SelectedLayers``.

    Empty strings, ``None`` and ``"none"`` mean nothing is selected. Keys may
    be ``Category`` members or their string values.
    """
    assets: Dict[Category, TraitAsset] = {}
    for key, path in raw.items():
        try:
            category = Category(key)
        except ValueError:
            raise ValueError(f"Unknown trait category: {key!r}") from None
        if path is None or is_empty_value(path):
            continue
        assets[category] = TraitAsset.tagged(category, path)
    return SelectedLayers(assets=pmap(assets))


def as_selection(selection: Union[SelectedLayers, RawSelection]) -> SelectedLayers:
    if isinstance(selection, SelectedLayers):
        return selection
    return make_selection(selection)


def has_required_selections(selection: Union[SelectedLayers, RawSelection]) -> bool:
    return as_selection(selection).has(Category.BASE)

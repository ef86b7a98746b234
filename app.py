import asyncio
import glob
import logging
import os
from typing import Dict, List, Optional

import streamlit as st
from PIL import Image

from wojak_compositor.cache import ImageCache
from wojak_compositor.config import DEFAULT_ASSET_ROOT, CanvasConfig, ExportSize
from wojak_compositor.layers import CATEGORY_ORDER
from wojak_compositor.renderer.compositor import Compositor
from wojak_compositor.renderer.export import (
    ExportOptions,
    ImageFormat,
    encode_image,
)
from wojak_compositor.rules import explain_render_layers
from wojak_compositor.selection import (
    NONE_VALUE,
    SelectedLayers,
    has_required_selections,
    make_selection,
)
from wojak_compositor.types import AssetPath, Category


logging.basicConfig(level=logging.INFO)

LAYERS_URL_ROOT = "/assets/wojak-layers"

CATEGORY_FOLDERS: Dict[Category, str] = {
    Category.BACKGROUND: "BACKGROUND",
    Category.BASE: "BASE",
    Category.CLOTHES: "CLOTHES",
    Category.FACIAL_HAIR: "FACIALHAIR",
    Category.MOUTH_BASE: "MOUTHBASE",
    Category.MOUTH_ITEM: "MOUTHITEM",
    Category.MASK: "MASK",
    Category.EYES: "EYE",
    Category.HEAD: "HEAD",
}

st.set_page_config(layout="wide", page_title="Wojak Generator")


@st.cache_data
def list_assets(asset_root: str, folder: str) -> List[AssetPath]:
    """Web-style paths of every PNG under ``<asset_root>/assets/wojak-layers/<folder>``."""
    layers_dir = os.path.join(asset_root, LAYERS_URL_ROOT.lstrip("/"))
    pattern = os.path.join(layers_dir, folder, "**", "*.png")
    paths: List[AssetPath] = []
    for filename in sorted(glob.glob(pattern, recursive=True)):
        relative = os.path.relpath(filename, layers_dir).replace(os.sep, "/")
        paths.append(f"{LAYERS_URL_ROOT}/{relative}")
    return paths


def asset_label(path: AssetPath) -> str:
    if path == NONE_VALUE:
        return "None"
    name = os.path.splitext(os.path.basename(path))[0]
    return name.split("_", 1)[-1].replace("_", " ").replace("-", " ").strip()


def set_default_state(config: CanvasConfig) -> None:
    if "compositor" not in st.session_state:
        st.session_state["compositor"] = Compositor(
            cache=ImageCache(asset_root=config.asset_root), config=config
        )


def get_selection_from_widgets(config: CanvasConfig) -> SelectedLayers:
    raw: Dict[Category, Optional[AssetPath]] = {}
    for category in CATEGORY_ORDER:
        options: List[AssetPath] = [NONE_VALUE] + list_assets(
            config.asset_root, CATEGORY_FOLDERS[category]
        )
        # Base is required, so default to the first one found
        index = 1 if category is Category.BASE and len(options) > 1 else 0
        raw[category] = st.selectbox(
            category.value,
            options,
            index=index,
            format_func=asset_label,
            key=f"trait_{category.value}",
        )
    return make_selection(raw)


def get_export_options_from_widgets(config: CanvasConfig) -> ExportOptions:
    st.subheader("Export")
    formats: List[ImageFormat] = list(ImageFormat)
    image_format: ImageFormat = st.selectbox(
        "Format", formats, format_func=lambda f: f.value.upper(), key="export_format"
    )
    presets: List[str] = list(config.export_sizes.keys())
    preset: str = st.selectbox(
        "Size",
        presets,
        index=presets.index("1024") if "1024" in presets else 0,
        format_func=lambda name: f"{config.export_sizes[name]}px",
        key="export_size",
    )
    quality: Optional[float] = None
    if image_format.is_lossy:
        quality = st.slider(
            "Quality", 0.1, 1.0, config.default_quality, step=0.01, key="export_quality"
        )
    include_background: bool = st.checkbox(
        "Include background", value=True, key="export_background"
    )
    return ExportOptions(
        format=image_format,
        size=ExportSize.of_preset(preset),
        quality=quality,
        include_background=include_background,
    )


def render_image(
    compositor: Compositor,
    selection: SelectedLayers,
    size: int,
    include_background: bool = True,
) -> Image.Image:
    return asyncio.run(
        compositor.render(selection, size=size, include_background=include_background)
    )


# --------- Main App ---------

config: CanvasConfig = CanvasConfig(
    asset_root=os.environ.get("WOJAK_ASSET_ROOT", DEFAULT_ASSET_ROOT)
)
set_default_state(config)
compositor: Compositor = st.session_state["compositor"]

traits_col, preview_col, export_col = st.columns([0.25, 0.5, 0.25])

with traits_col:
    st.subheader("Traits")
    selection = get_selection_from_widgets(config)

with export_col:
    options = get_export_options_from_widgets(config)

with preview_col:
    if not has_required_selections(selection):
        st.info("Pick a base to start.", icon="🧑")
    else:
        preview = render_image(compositor, selection, config.display_size)
        st.image(preview, use_container_width=True)

        with st.expander("Layers"):
            layers, fired = explain_render_layers(selection)
            st.table(
                [
                    {"depth": layer.depth, "origin": str(layer.origin), "path": layer.path}
                    for layer in layers
                ]
            )
            st.caption(", ".join(fired) or "No rules fired")

with export_col:
    if has_required_selections(selection):
        # kept until the selection or export options change
        export_key = (selection, options)
        if st.button("Prepare export", key="prepare_export_btn", use_container_width=True):
            size = config.resolve_export_size(options.size)
            image = render_image(compositor, selection, size, options.include_background)
            data = encode_image(image, options.format, options.quality, config)
            st.session_state["export"] = (export_key, data)

        prepared = st.session_state.get("export")
        if prepared is not None and prepared[0] == export_key:
            st.download_button(
                "Download",
                data=prepared[1],
                file_name=f"wojak.{options.format.extension}",
                mime=options.format.mime_type,
                use_container_width=True,
            )

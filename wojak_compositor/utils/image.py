import numpy as np
import numpy.typing as npt
from PIL import Image
from typing import Optional, Tuple
import base64

UInt8Array = npt.NDArray[np.uint8]


def fit_to_canvas(image: Image.Image, size: int) -> Image.Image:
    """RGBA copy of ``image`` stretched to the ``size`` x ``size`` canvas."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    if image.size != (size, size):
        image = image.resize((size, size), Image.Resampling.LANCZOS)
    return image


def clip_columns(image: Image.Image, x0: int, x1: int) -> Image.Image:
    """
    Return a copy of an RGBA image that is transparent outside columns [x0, x1).
    The source image is left untouched so the clip never outlives one draw.
    """
    arr: UInt8Array = np.array(image.convert("RGBA"), dtype=np.uint8)
    width = arr.shape[1]
    x0 = max(0, min(x0, width))
    x1 = max(x0, min(x1, width))
    arr[:, :x0, 3] = 0
    arr[:, x1:, 3] = 0
    return Image.fromarray(arr)


def composite_clipped(
    surface: Image.Image,
    image: Image.Image,
    clip: Optional[Tuple[int, int]] = None,
) -> None:
    """Alpha-composite a canvas-sized image onto ``surface`` in place."""
    if clip is not None:
        image = clip_columns(image, *clip)
    surface.alpha_composite(image)


def clear_surface(surface: Image.Image) -> None:
    surface.paste((0, 0, 0, 0), (0, 0, surface.width, surface.height))


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"

"""Image decoding (Pillow) into 8-bit RGBA pixel arrays."""
from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, UnidentifiedImageError

from wavefrontscene.config import IMAGE_FORMATS
from wavefrontscene.model.errors import DecodeError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def to_8bit(image: Image.Image) -> Image.Image:
    """
    Rescale a wide single-channel image to 8-bit greyscale.

    ``I;16*`` and ``I`` samples are treated as 16-bit values and keep their high
    byte; ``F`` samples are clamped to [0, 1]. Other modes are returned as is,
    since ``convert`` already maps them to 8 bits per channel.
    """
    if image.mode.startswith("I;16") or image.mode == "I":
        samples = np.clip(np.asarray(image, dtype=np.int64), 0, 0xFFFF) >> 8
    elif image.mode == "F":
        samples = np.rint(np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0) * 255.0)
    else:
        return image
    return Image.fromarray(samples.astype(np.uint8), "L")


def decode_image(data: bytes, extension: str) -> npt.NDArray[np.uint8]:
    """
    Decode ``data`` as the image type named by ``extension``.

    The result is always an (H, W, 4) uint8 array, whatever the source mode
    (greyscale, 16-bit, float, palette, RGB, ...) was.

    Raises:
        DecodeError: If the extension is not supported, the data is corrupt or
            the image exceeds Pillow's pixel limit.
    """
    image_format = IMAGE_FORMATS.get(extension.lower().lstrip("."))
    if image_format is None:
        raise DecodeError(f"unsupported image type '{extension}'")

    try:
        with Image.open(io.BytesIO(data), formats=[image_format]) as image:
            image.load()
            source_mode = image.mode
            rgba = to_8bit(image).convert("RGBA")
    except Image.DecompressionBombError as e:
        raise DecodeError(f"{image_format} image is too large: {e}") from e
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
        raise DecodeError(f"could not decode {image_format} image: {e}") from e

    pixels = np.asarray(rgba, dtype=np.uint8)
    logger.debug(f"Decoded {image_format} image {rgba.width}x{rgba.height} (source mode {source_mode}).")
    return pixels

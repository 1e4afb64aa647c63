"""
Texture Resolver
================
Fetches, decodes and normalizes the images referenced by material descriptors.

Every texture leaves this module in the same shape: 8-bit RGBA, sampled as sRGB,
with linear filtering. Consumers never have to branch on the source format.
Each distinct reference string is loaded once per load and shared by every
material that mentions it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Iterable, Optional, TYPE_CHECKING

import numpy as np

from wavefrontscene.formats.image import decode_image
from wavefrontscene.model.assets import FilterMode, Handle, SamplerDescriptor, TextureAsset, TextureFormat
from wavefrontscene.model.errors import DecodeError
from wavefrontscene.model.registry import LoadContext
from wavefrontscene.utils import join_all

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

ImageDecoder = Callable[[bytes, str], "npt.NDArray[np.uint8]"]


def texture_sampler() -> SamplerDescriptor:
    return SamplerDescriptor(mag_filter=FilterMode.LINEAR, min_filter=FilterMode.LINEAR)


def texture_label(reference: str) -> str:
    return reference


class TextureResolver:
    def __init__(
        self,
        context: LoadContext,
        decoder: ImageDecoder = decode_image,
        concurrent: bool = True,
    ) -> None:
        self.context = context
        self.decoder = decoder
        self.concurrent = concurrent
        self._handles: Dict[str, Handle] = {}

    async def resolve_all(self, references: Iterable[str]) -> Dict[str, Handle]:
        """
        Load every distinct, non-empty reference not loaded yet.

        Textures are staged in first-reference order once all of them decoded.

        Raises:
            FetchError: If an image cannot be read.
            DecodeError: If an image has an unsupported extension or is corrupt.
        """
        pending = [ref for ref in dict.fromkeys(references) if ref and ref not in self._handles]
        textures = await join_all((self._load(ref) for ref in pending), self.concurrent)

        for reference, texture in zip(pending, textures):
            self._handles[reference] = self.context.set_labeled_asset(texture_label(reference), texture)

        if pending:
            logger.debug(f"Loaded {len(pending)} texture(s).")
        return dict(self._handles)

    def handle_for(self, reference: str) -> Optional[Handle]:
        """Handle of an already resolved reference. An empty reference means no texture."""
        if not reference:
            return None
        try:
            return self._handles[reference]
        except KeyError:
            raise KeyError(f"Texture '{reference}' has not been resolved yet") from None

    async def _load(self, reference: str) -> TextureAsset:
        path = self.context.resolve(reference)
        if not path.suffix:
            raise DecodeError(f"texture '{reference}' has no file extension")

        logger.debug(f"Fetching texture '{reference}' ({path})")
        data = await self.context.read_asset_bytes(path)
        pixels = await asyncio.to_thread(self.decoder, data, path.suffix[1:])

        pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise DecodeError(f"texture '{reference}' did not decode to RGBA pixels")

        return TextureAsset(data=pixels, sampler=texture_sampler(), format=TextureFormat.RGBA8_UNORM_SRGB)

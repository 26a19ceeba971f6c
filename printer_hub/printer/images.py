"""Load bitmaps for image content items."""

from __future__ import annotations

import asyncio
import io
import logging

import aiohttp
from PIL import Image

from ..content import PrintImage
from ..security import sanitize_log_message, validate_image_url, validate_local_image_path

_LOGGER = logging.getLogger(__name__)

_DOWNLOAD_TIMEOUT_S = 15


async def _download(url: str) -> bytes:
    timeout = aiohttp.ClientTimeout(total=_DOWNLOAD_TIMEOUT_S)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url) as resp:
            resp.raise_for_status()
            return await resp.read()


def _open_local(path: str) -> Image.Image:
    with Image.open(path) as img:
        img.load()
        return img.copy()


def _scale(img: Image.Image, width: int | None, height: int | None) -> Image.Image:
    """Resize to the requested dimensions, keeping aspect ratio when only one is given."""
    if not width and not height:
        return img
    orig_w, orig_h = img.width, img.height
    new_w = width or max(1, round(orig_w * (height / orig_h)))  # type: ignore[operator]
    new_h = height or max(1, round(orig_h * (width / orig_w)))  # type: ignore[operator]
    _LOGGER.debug("Resizing image from %sx%s to %sx%s", orig_w, orig_h, new_w, new_h)
    return img.resize((new_w, new_h))


async def load_image(item: PrintImage) -> Image.Image:
    """Resolve an image item to a Pillow image.

    ``http(s)`` sources are downloaded with aiohttp; anything else is a
    local file opened in the executor.
    """
    if item.path.lower().startswith(("http://", "https://")):
        url = validate_image_url(item.path)
        _LOGGER.debug("Downloading image from URL: %s", sanitize_log_message(url))
        content = await _download(url)
        img = Image.open(io.BytesIO(content))
    else:
        path = validate_local_image_path(item.path)
        _LOGGER.debug("Opening local image: %s", path)
        img = await asyncio.get_running_loop().run_in_executor(None, _open_local, path)
    return _scale(img, item.width, item.height)

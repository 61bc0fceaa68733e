import io
import logging

from PIL import Image

from . import sixel
from .client import Client


logger = logging.getLogger(__name__)

GLYPH_SIZE: int = 16


class ImageError(Exception):
    pass


def decode(data: bytes) -> Image.Image:
    try:
        # Animated formats open on their first frame, which is all we show.
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageError(f"Cannot decode image: {e}") from e

    return image


def resize(image: Image.Image, size: int = GLYPH_SIZE) -> Image.Image:
    # Bicubic here is Catmull-Rom, which keeps tiny emoji from going mushy.
    return image.convert("RGBA").resize((size, size), Image.BICUBIC)


def render(data: bytes, size: int = GLYPH_SIZE) -> bytes:
    image = resize(decode(data), size)
    try:
        return sixel.encode(image)
    except ValueError as e:
        raise ImageError(f"Cannot encode image: {e}") from e


def fetchEmoji(client: Client, proxy: str, url: str) -> bytes:
    """
    Download an emoji through the instance media proxy and turn it into a
    sixel glyph. Raises ClientError for network failures and ImageError for
    anything wrong with the bytes themselves.
    """

    data = client.fetchProxiedImage(proxy, url, purpose="emoji")
    logger.debug("Fetched %d bytes for %s", len(data), url)
    return render(data)

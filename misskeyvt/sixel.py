"""
DEC sixel encoder. Each palette entry in use gets one #n;2;r;g;b register,
the same layout misskey-tui's encoder emits.
"""

from typing import Dict, List, Sequence, Tuple

from PIL import Image


DCS: bytes = b"\x1bP"
ST: bytes = b"\x1b\\"

# Color registers are scarce on real hardware, and these are tiny glyphs anyway.
MAX_COLORS: int = 64
ALPHA_THRESHOLD: int = 128


def _color(palette: Sequence[int], index: int) -> Tuple[int, int, int]:
    rgb = list(palette[(index * 3):((index * 3) + 3)])
    while len(rgb) < 3:
        rgb.append(0)

    # Sixel color definitions are in percent, not 0-255.
    return (rgb[0] * 100 // 255, rgb[1] * 100 // 255, rgb[2] * 100 // 255)


def _runLength(values: List[int]) -> bytes:
    # Nothing past the last set pixel needs to be sent.
    while values and values[-1] == 0:
        values = values[:-1]

    chunks: List[str] = []
    pos = 0
    while pos < len(values):
        value = values[pos]
        count = 1
        while pos + count < len(values) and values[pos + count] == value:
            count += 1

        char = chr(63 + value)
        if count > 3:
            chunks.append(f"!{count}{char}")
        else:
            chunks.append(char * count)
        pos += count

    return "".join(chunks).encode("ascii")


def encode(image: Image.Image, *, colors: int = MAX_COLORS) -> bytes:
    """
    Encode an image as a DEC sixel escape sequence. Pixels that are mostly
    transparent are left undrawn, so the glyph sits on whatever background
    the terminal already has.
    """

    rgba = image.convert("RGBA")
    width, height = rgba.size
    if width == 0 or height == 0:
        raise ValueError("Cannot encode an empty image!")

    paletted = rgba.convert("RGB").quantize(colors=colors)
    palette = paletted.getpalette() or []
    # Both are one byte per pixel, row by row.
    indexes = list(paletted.tobytes())
    alphas = list(rgba.getchannel("A").tobytes())

    # P2=1 keeps unset pixels transparent, raster attributes pin a 1:1 aspect.
    output: List[bytes] = [DCS, b"0;1;0q", f'"1;1;{width};{height}'.encode("ascii")]

    used = sorted({indexes[i] for i in range(len(indexes)) if alphas[i] >= ALPHA_THRESHOLD})
    for index in used:
        r, g, b = _color(palette, index)
        output.append(f"#{index};2;{r};{g};{b}".encode("ascii"))

    for top in range(0, height, 6):
        if top > 0:
            output.append(b"-")

        bands: Dict[int, List[int]] = {}
        for y in range(top, min(top + 6, height)):
            bit = 1 << (y - top)
            for x in range(width):
                pos = (y * width) + x
                if alphas[pos] < ALPHA_THRESHOLD:
                    continue

                index = indexes[pos]
                if index not in bands:
                    bands[index] = [0] * width
                bands[index][x] |= bit

        for i, index in enumerate(sorted(bands)):
            if i > 0:
                # Return to the start of the band for the next color.
                output.append(b"$")
            output.append(f"#{index}".encode("ascii"))
            output.append(_runLength(bands[index]))

    output.append(ST)
    return b"".join(output)

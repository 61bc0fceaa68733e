from .text import NORMAL, ControlCodes, Line, pad

from typing import List, Sequence, Tuple


def boxtop(width: int) -> Line:
    return (
        ("┌" + ("─" * (width - 2)) + "┐"),
        [NORMAL] * width,
    )


def boxbottom(width: int) -> Line:
    return (
        ("└" + ("─" * (width - 2)) + "┘"),
        [NORMAL] * width,
    )


def boxmiddle(line: Tuple[str, Sequence[ControlCodes]], width: int, padding: int = 0) -> Line:
    inner = width - 2 - (padding * 2)
    text = line[0][:inner]
    codes = list(line[1][:inner])
    if len(text) < inner:
        amount = inner - len(text)

        text = text + (" " * amount)
        codes = [*codes, *([NORMAL] * amount)]

    spacer = " " * padding
    text = "│" + spacer + text + spacer + "│"
    codes = [NORMAL, *([NORMAL] * padding), *codes, *([NORMAL] * padding), NORMAL]
    return (text, codes)


def fill(line: Tuple[str, Sequence[ControlCodes]], width: int, code: ControlCodes = NORMAL) -> Line:
    text = pad(line[0], width)
    codes = list(line[1][:width])
    return (text, [*codes, *([code] * (width - len(codes)))])


def styled(text: str, code: ControlCodes) -> Line:
    return (text, [code] * len(text))


def replace(original: Tuple[str, Sequence[ControlCodes]], replacement: Line, offset: int = 0) -> Line:
    originalText, originalCodes = original
    text, codes = replacement

    if offset >= 0:
        # Offset is positive, from the left.
        if (offset + len(text)) > len(originalText):
            amount = max(0, len(originalText) - offset)
            text = text[:amount]
            codes = codes[:amount]
    else:
        # Offset is negative, from the right.
        offset = (len(originalText) - len(text)) + offset
        if offset < 0:
            text = text[(-offset):]
            codes = codes[(-offset):]
            offset = 0

    return (
        originalText[:offset] + text + originalText[(offset + len(text)):],
        [*originalCodes[:offset], *codes, *originalCodes[(offset + len(codes)):]],
    )


def join(chunks: List[Tuple[str, Sequence[ControlCodes]]]) -> Line:
    accum: Line = ("", [])
    for chunk in chunks:
        accum = (accum[0] + chunk[0], [*accum[1], *chunk[1]])
    return accum

from typing import List, Optional

from .client import NoteDict
from .notes import (
    countSummary,
    displayTarget,
    formatTimestamp,
    plainText,
    reactionSummary,
    renoteBanner,
    userTitle,
)
from .style import Style
from .text import ControlCodes, Line, truncate, wordwrap


def clipped(text: str, code: ControlCodes, width: int) -> Line:
    text = truncate(text, width)
    return (text, [code] * len(text))


def wrapped(text: str, code: ControlCodes, width: int) -> List[Line]:
    return [(t, list(c)) for (t, c) in wordwrap(text, [code] * len(text), max(1, width))]


def noteLines(note: NoteDict, width: int, style: Style) -> List[Line]:
    """
    Everything shown inside the detail note box: an optional renote banner,
    the author, the body, and then the reaction, count and timestamp lines.
    """

    target = displayTarget(note)
    lines: List[Line] = []

    banner = renoteBanner(note)
    if banner:
        lines.append(clipped(plainText(banner), style.metadata, width))

    lines.append(clipped(plainText(userTitle(target["user"])), style.title, width))
    lines.extend(wrapped(plainText(target.get("text") or ""), style.body, width))
    lines.append(("", []))

    reactions = " | ".join(reactionSummary(target.get("reactions") or {}))
    if reactions:
        lines.extend(wrapped(plainText(reactions), style.body, width))
    lines.append(clipped(countSummary(target), style.metadata, width))

    timestamp = formatTimestamp(target.get("createdAt", ""))
    if timestamp:
        lines.append(clipped(timestamp, style.metadata, width))

    return lines


def parentLines(parent: Optional[NoteDict], width: int, style: Style) -> List[Line]:
    if parent is None:
        return []

    target = displayTarget(parent)
    lines = [clipped(f"Replying to @{target['user']['username']}", style.metadata, width)]
    for text, codes in wrapped(plainText(target.get("text") or ""), style.body, width - 2):
        lines.append(("\u2502 " + text, [style.metadata, style.metadata, *codes]))
    return lines

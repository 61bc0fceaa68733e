from typing import NamedTuple


# Rows that are always spent no matter what is on screen.
TABS_HEIGHT: int = 1
STATUS_HEIGHT: int = 1
REPLIES_HEADER_HEIGHT: int = 1
BOX_BORDER_HEIGHT: int = 2


class DetailLayout(NamedTuple):
    parentHeight: int
    noteHeight: int
    listHeight: int


def timelineListHeight(rows: int) -> int:
    return max(0, rows - TABS_HEIGHT - STATUS_HEIGHT)


def detailLayout(rows: int, parentLines: int, noteLines: int) -> DetailLayout:
    """
    Split the screen for the detail view. The parent quote gets what it
    needs, the note box gets its content but never more than half the
    screen, and the reply list takes whatever is left over after the
    replies header and the status bar. Nothing goes negative on a tiny
    terminal, it just gets squeezed out.
    """

    available = max(0, rows - STATUS_HEIGHT)
    parentHeight = min(parentLines, available)
    available -= parentHeight

    noteHeight = min(noteLines, max(1, rows // 2), max(0, available - BOX_BORDER_HEIGHT))
    available -= noteHeight + BOX_BORDER_HEIGHT

    listHeight = max(0, available - REPLIES_HEADER_HEIGHT)
    return DetailLayout(parentHeight, noteHeight, listHeight)

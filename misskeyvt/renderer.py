import logging
from typing import Optional, Set

from vtpy import Terminal

from .text import NORMAL, emit
from .view import Frame


logger = logging.getLogger(__name__)


class Renderer:
    """
    Puts frames on the terminal. Only rows that differ from the last frame
    drawn are sent, since a full repaint at 9600 baud takes a couple of
    seconds. Any row that had or will have a glyph on it is repainted along
    with its glyphs so images never get stranded under new text.
    """

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal
        self.__last: Optional[Frame] = None

    def invalidate(self) -> None:
        self.__last = None

    def draw(self, frame: Frame) -> None:
        last = self.__last
        dirty: Set[int] = set()

        for row, line in enumerate(frame.lines):
            if last is None or row >= len(last.lines) or last.lines[row] != line:
                dirty.add(row)

        if last is not None and last.glyphs != frame.glyphs:
            dirty.update(glyph.row for glyph in last.glyphs)
            dirty.update(glyph.row for glyph in frame.glyphs)
        dirty = {row for row in dirty if row < len(frame.lines)}

        if not dirty:
            return

        codes = NORMAL
        self.terminal.sendCommand(Terminal.SET_NORMAL)
        for row in sorted(dirty):
            text, lineCodes = frame.lines[row]
            self.terminal.moveCursor(row + 1, 1)
            codes = emit(self.terminal, text, lineCodes, codes)

        if codes != NORMAL:
            self.terminal.sendCommand(Terminal.SET_NORMAL)

        for glyph in frame.glyphs:
            if glyph.row not in dirty:
                continue

            self.terminal.sendCommand(Terminal.SAVE_CURSOR)
            self.terminal.moveCursor(glyph.row + 1, glyph.column + 1)
            self.terminal.sendCommand(glyph.data)
            self.terminal.sendCommand(Terminal.RESTORE_CURSOR)

        logger.debug("Repainted %d rows and %d glyphs", len(dirty), len(frame.glyphs))
        self.__last = frame

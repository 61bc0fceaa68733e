from typing import List, Optional, Tuple

from vtpy import Terminal

from .client import NoteDict
from .text import ControlCodes


class NoteList:
    """
    A scrolling, selectable list of notes. Each note takes a fixed number
    of rows (title, description, spacer), so everything here is simple
    arithmetic on indexes.
    """

    ITEM_HEIGHT: int = 3

    def __init__(self) -> None:
        self.notes: List[NoteDict] = []
        self.selected = 0
        self.offset = 0
        self.width = 0
        self.height = 0

    @property
    def pageSize(self) -> int:
        return max(1, self.height // self.ITEM_HEIGHT)

    def setSize(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.__clamp()

    def setItems(self, notes: List[NoteDict]) -> None:
        self.notes = list(notes)
        self.selected = 0
        self.offset = 0

    def appendItems(self, notes: List[NoteDict]) -> None:
        # Pages can overlap when new notes land between fetches.
        seen = {note["id"] for note in self.notes}
        self.notes += [note for note in notes if note["id"] not in seen]

    def selectedNote(self) -> Optional[NoteDict]:
        if 0 <= self.selected < len(self.notes):
            return self.notes[self.selected]
        return None

    def moveUp(self) -> bool:
        if self.selected <= 0:
            return False
        self.selected -= 1
        self.__clamp()
        return True

    def moveDown(self) -> bool:
        if self.selected >= len(self.notes) - 1:
            return False
        self.selected += 1
        self.__clamp()
        return True

    def atEnd(self) -> bool:
        return self.selected >= len(self.notes) - 1

    def visible(self) -> List[Tuple[int, NoteDict]]:
        return [
            (i, self.notes[i])
            for i in range(self.offset, min(len(self.notes), self.offset + self.pageSize))
        ]

    def __clamp(self) -> None:
        if self.selected >= len(self.notes):
            self.selected = max(0, len(self.notes) - 1)
        if self.selected < self.offset:
            self.offset = self.selected
        if self.selected >= self.offset + self.pageSize:
            self.offset = self.selected - self.pageSize + 1


class Viewport:
    def __init__(self) -> None:
        self.lines: List[Tuple[str, List[ControlCodes]]] = []
        self.offset = 0
        self.width = 0
        self.height = 0

    def setContent(self, lines: List[Tuple[str, List[ControlCodes]]]) -> None:
        self.lines = lines
        self.offset = 0

    def setSize(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self.offset = min(self.offset, self.limit)

    @property
    def limit(self) -> int:
        return max(0, len(self.lines) - self.height)

    def scrollUp(self) -> bool:
        if self.offset <= 0:
            return False
        self.offset -= 1
        return True

    def scrollDown(self) -> bool:
        if self.offset >= self.limit:
            return False
        self.offset += 1
        return True

    def visible(self) -> List[Tuple[str, List[ControlCodes]]]:
        return self.lines[self.offset:(self.offset + self.height)]


class TextArea:
    def __init__(self, placeholder: str = "") -> None:
        self.placeholder = placeholder
        self.text = ""

    def reset(self, placeholder: Optional[str] = None) -> None:
        self.text = ""
        if placeholder is not None:
            self.placeholder = placeholder

    def processInput(self, inputVal: bytes) -> bool:
        if inputVal in {Terminal.BACKSPACE, Terminal.DELETE}:
            self.text = self.text[:-1]
            return True

        if inputVal[:1] == b"\x1b":
            # Arrow keys and friends, we don't do cursor movement.
            return False
        if inputVal == b"\r":
            inputVal = b"\n"

        # Drop anything unprintable, the parent handles control keys.
        inputVal = bytes(
            v for v in inputVal if (v == 0x0A or (v >= 0x20 and v < 0x7F))
        )
        if not inputVal:
            return False

        self.text += inputVal.decode("ascii")
        return True

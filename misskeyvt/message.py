from typing import Dict, List, Optional

from .client import NoteDict, Timeline


class Message:
    pass


class KeyMessage(Message):
    def __init__(self, key: bytes) -> None:
        self.key = key


class WindowSizeMessage(Message):
    def __init__(self, rows: int, columns: int) -> None:
        self.rows = rows
        self.columns = columns


class TimelineLoadedMessage(Message):
    def __init__(
        self, timeline: Timeline, notes: List[NoteDict], *, generation: int, append: bool = False
    ) -> None:
        self.timeline = timeline
        self.notes = notes
        self.generation = generation
        self.append = append


class ParentNoteLoadedMessage(Message):
    def __init__(self, targetId: str, note: NoteDict) -> None:
        self.targetId = targetId
        self.note = note


class ChildrenLoadedMessage(Message):
    def __init__(self, targetId: str, notes: List[NoteDict]) -> None:
        self.targetId = targetId
        self.notes = notes


class NotePostedMessage(Message):
    def __init__(self, error: Optional[str] = None) -> None:
        self.error = error


class NoteRenotedMessage(Message):
    def __init__(self, error: Optional[str] = None) -> None:
        self.error = error


class ReactionResultMessage(Message):
    def __init__(self, reaction: str, error: Optional[str] = None) -> None:
        self.reaction = reaction
        self.error = error


class ClearStatusMessage(Message):
    def __init__(self, generation: int) -> None:
        self.generation = generation


class ErrorMessage(Message):
    # A generation or target ties a read error to the request that caused it, so
    # an error for a superseded request can be ignored like a superseded result.
    def __init__(
        self, error: str, *, generation: Optional[int] = None, targetId: Optional[str] = None
    ) -> None:
        self.error = error
        self.generation = generation
        self.targetId = targetId


class InstanceLoadedMessage(Message):
    def __init__(self, proxy: str, emojis: Dict[str, str]) -> None:
        self.proxy = proxy
        self.emojis = emojis


class EmojiImageLoadedMessage(Message):
    def __init__(self, name: str, data: bytes) -> None:
        self.name = name
        self.data = data


class EmojiImageFailedMessage(Message):
    def __init__(self, name: str) -> None:
        self.name = name


CTRL_C_INPUT: bytes = b"\x03"
CTRL_D_INPUT: bytes = b"\x04"
CTRL_X_INPUT: bytes = b"\x18"
ESCAPE_INPUT: bytes = b"\x1b"
TAB_INPUT: bytes = b"\t"
ENTER_INPUTS = {b"\n", b"\r"}

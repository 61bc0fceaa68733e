import logging
from enum import Enum, auto
from typing import Dict, List, Optional, Set

from vtpy import Terminal

from . import command
from .client import Client, NoteDict, Timeline, UserDict
from .command import Command
from .detail import noteLines, parentLines
from .layout import detailLayout, timelineListHeight
from .message import (
    Message,
    ChildrenLoadedMessage,
    ClearStatusMessage,
    EmojiImageFailedMessage,
    EmojiImageLoadedMessage,
    ErrorMessage,
    InstanceLoadedMessage,
    KeyMessage,
    NotePostedMessage,
    NoteRenotedMessage,
    ParentNoteLoadedMessage,
    ReactionResultMessage,
    TimelineLoadedMessage,
    WindowSizeMessage,
    CTRL_C_INPUT,
    CTRL_D_INPUT,
    CTRL_X_INPUT,
    ESCAPE_INPUT,
    TAB_INPUT,
    ENTER_INPUTS,
)
from .notes import HEART, displayTarget, emojiNames, expandShortcodes
from .style import DEFAULT_STYLE, Style
from .widgets import NoteList, TextArea, Viewport


logger = logging.getLogger(__name__)


STATUS_DELAY: float = 3.0

COMPOSE_PLACEHOLDER: str = "What's on your mind?"

# The box around the detail note eats a column of border and one of padding per side.
DETAIL_BOX_INSET: int = 4

TIMELINE_KEYS: Dict[bytes, Timeline] = {
    b"h": Timeline.HOME,
    b"l": Timeline.LOCAL,
    b"s": Timeline.SOCIAL,
    b"g": Timeline.GLOBAL,
}

CLOSE_DETAIL_KEYS = {b"q", ESCAPE_INPUT, Terminal.LEFT, Terminal.BACKSPACE}
CANCEL_COMPOSE_KEYS = {CTRL_X_INPUT, ESCAPE_INPUT}


class Mode(Enum):
    TIMELINE = auto()
    POSTING = auto()
    DETAIL = auto()


class DetailFocus(Enum):
    NOTE = auto()
    REPLIES = auto()


class Session:
    """
    The whole of the client's mutable state, and the only place it changes.

    The main loop feeds every message (key presses, size changes, command
    results) into update() one at a time. Each call mutates the session and
    hands back the commands that should be run next. Nothing in here blocks
    or talks to the network; commands are built from a snapshot of whatever
    they need, so they never read this object from a worker thread.
    """

    def __init__(
        self,
        client: Client,
        *,
        account: Optional[UserDict] = None,
        style: Style = DEFAULT_STYLE,
        graphics: bool = True,
        statusDelay: float = STATUS_DELAY,
    ) -> None:
        self.client = client
        self.account = account
        self.style = style
        self.graphics = graphics
        self.statusDelay = statusDelay

        self.mode = Mode.TIMELINE
        self.timeline = Timeline.HOME
        self.timelineGeneration = 0
        self.loading = True
        self.fetchingMore = False
        self.exiting = False

        self.status: Optional[str] = None
        self.statusGeneration = 0
        self.error: Optional[str] = None

        self.rows = 24
        self.columns = 80

        self.notes = NoteList()

        self.selectedNote: Optional[NoteDict] = None
        self.parentNote: Optional[NoteDict] = None
        # A note being opened stays pending until its replies arrive.
        self.pendingNote: Optional[NoteDict] = None
        self.pendingParent: Optional[NoteDict] = None
        self.replies = NoteList()
        self.detailFocus = DetailFocus.NOTE
        self.viewport = Viewport()

        self.replyTo: Optional[NoteDict] = None
        self.composer = TextArea(COMPOSE_PLACEHOLDER)

        self.emojis: Dict[str, str] = {}
        self.proxy: Optional[str] = None
        self.images: Dict[str, bytes] = {}
        self.requestedImages: Set[str] = set()

        self.__relayout()

    @property
    def targetId(self) -> Optional[str]:
        note = self.pendingNote if self.pendingNote is not None else self.selectedNote
        if note is None:
            return None
        return displayTarget(note)["id"]

    def start(self) -> List[Command]:
        self.loading = True
        return [self.__fetchTimeline(), command.fetchInstance(self.client)]

    def update(self, message: Message) -> List[Command]:
        if isinstance(message, KeyMessage):
            return self.__handleKey(message.key)
        if isinstance(message, WindowSizeMessage):
            self.rows = message.rows
            self.columns = message.columns
            self.__relayout()
            return []
        if isinstance(message, TimelineLoadedMessage):
            return self.__timelineLoaded(message)
        if isinstance(message, ChildrenLoadedMessage):
            return self.__childrenLoaded(message)
        if isinstance(message, ParentNoteLoadedMessage):
            return self.__parentLoaded(message)
        if isinstance(message, NotePostedMessage):
            return self.__notePosted(message)
        if isinstance(message, NoteRenotedMessage):
            if message.error is not None:
                return [self.__setStatus(f"Failed to renote: {message.error}")]
            return [self.__setStatus("Renoted!")]
        if isinstance(message, ReactionResultMessage):
            if message.error is not None:
                return [self.__setStatus(f"Failed to react: {message.error}")]
            return [self.__setStatus(f"Reacted with {message.reaction}")]
        if isinstance(message, ClearStatusMessage):
            if message.generation == self.statusGeneration:
                self.status = None
            return []
        if isinstance(message, ErrorMessage):
            return self.__errorReceived(message)
        if isinstance(message, InstanceLoadedMessage):
            self.emojis.update(message.emojis)
            self.proxy = message.proxy
            return self.__imageCommands(self.__loadedNotes())
        if isinstance(message, EmojiImageLoadedMessage):
            # First successful decode wins.
            self.images.setdefault(message.name, message.data)
            return []
        if isinstance(message, EmojiImageFailedMessage):
            logger.debug("No glyph for emoji %s", message.name)
            return []

        raise Exception(f"Unrecognized message {message!r}!")

    # Key handling.

    def __handleKey(self, key: bytes) -> List[Command]:
        if self.error is not None:
            # Dismissing the error is all this key press gets to do.
            self.error = None
            return []

        if key == CTRL_C_INPUT:
            self.exiting = True
            return []

        if self.loading:
            return []

        if self.mode == Mode.TIMELINE:
            return self.__timelineKey(key)
        if self.mode == Mode.POSTING:
            return self.__postingKey(key)
        if self.mode == Mode.DETAIL:
            return self.__detailKey(key)
        return []

    def __timelineKey(self, key: bytes) -> List[Command]:
        if key == b"q":
            self.exiting = True
            return []

        if key == Terminal.UP:
            self.notes.moveUp()
            return []

        if key == Terminal.DOWN:
            if self.notes.moveDown() or not self.notes.notes or self.fetchingMore:
                return []

            # Fell off the bottom, go get the next page.
            self.fetchingMore = True
            return [self.__fetchTimeline(until=self.notes.notes[-1]["id"])]

        if key in TIMELINE_KEYS:
            timeline = TIMELINE_KEYS[key]
            if timeline == self.timeline:
                return []
            self.timeline = timeline
            self.loading = True
            return [self.__fetchTimeline()]

        if key == b"R":
            self.loading = True
            return [self.__fetchTimeline()]

        if key == b"c":
            return self.__compose(None)

        selected = self.notes.selectedNote()
        if selected is None:
            return []

        if key == b"r":
            return self.__compose(selected)
        if key == b"f":
            return self.__react(selected)
        if key == b"b":
            return self.__renote(selected)
        if key in ENTER_INPUTS:
            return self.__openDetail(selected)

        return []

    def __postingKey(self, key: bytes) -> List[Command]:
        if key == CTRL_D_INPUT:
            text = self.composer.text
            if not text.strip():
                return [self.__setStatus("Cannot post an empty note!")]

            self.loading = True
            replyId = self.replyTo["id"] if self.replyTo is not None else None
            return [
                command.createNote(
                    self.client, expandShortcodes(text, self.emojis.keys()), replyId
                )
            ]

        if key in CANCEL_COMPOSE_KEYS:
            self.__leavePosting()
            return []

        self.composer.processInput(key)
        return []

    def __detailKey(self, key: bytes) -> List[Command]:
        if key in CLOSE_DETAIL_KEYS:
            self.mode = Mode.TIMELINE
            self.__leaveDetail()
            return []

        if key == TAB_INPUT:
            if self.detailFocus == DetailFocus.NOTE:
                self.detailFocus = DetailFocus.REPLIES
            else:
                self.detailFocus = DetailFocus.NOTE
            return []

        if key == Terminal.UP:
            if self.detailFocus == DetailFocus.NOTE:
                self.viewport.scrollUp()
            else:
                self.replies.moveUp()
            return []

        if key == Terminal.DOWN:
            if self.detailFocus == DetailFocus.NOTE:
                self.viewport.scrollDown()
            else:
                self.replies.moveDown()
            return []

        if self.selectedNote is None:
            return []

        if key == b"r":
            return self.__compose(self.selectedNote)
        if key == b"f":
            return self.__react(self.selectedNote)
        if key == b"b":
            return self.__renote(self.selectedNote)
        if key in ENTER_INPUTS and self.detailFocus == DetailFocus.REPLIES:
            reply = self.replies.selectedNote()
            if reply is not None:
                return self.__openDetail(reply)

        return []

    # Transitions.

    def __compose(self, note: Optional[NoteDict]) -> List[Command]:
        self.mode = Mode.POSTING
        if note is None:
            self.replyTo = None
            self.composer.reset(COMPOSE_PLACEHOLDER)
        else:
            self.replyTo = displayTarget(note)
            self.composer.reset(f"Replying to @{self.replyTo['user']['username']}...")
        return []

    def __leavePosting(self) -> None:
        self.mode = Mode.TIMELINE
        self.replyTo = None
        self.composer.reset(COMPOSE_PLACEHOLDER)
        self.__leaveDetail()

    def __leaveDetail(self) -> None:
        self.selectedNote = None
        self.parentNote = None
        self.pendingNote = None
        self.pendingParent = None
        self.replies.setItems([])
        self.viewport.setContent([])
        self.detailFocus = DetailFocus.NOTE

    def __openDetail(self, note: NoteDict) -> List[Command]:
        target = displayTarget(note)

        self.pendingNote = note
        self.pendingParent = None
        self.loading = True

        commands = [command.fetchChildren(self.client, target["id"])]
        if target.get("replyId"):
            commands.append(command.fetchParent(self.client, target["id"], target["replyId"]))
        return commands

    def __react(self, note: NoteDict) -> List[Command]:
        return [command.createReaction(self.client, displayTarget(note)["id"], HEART)]

    def __renote(self, note: NoteDict) -> List[Command]:
        return [command.createRenote(self.client, displayTarget(note)["id"])]

    def __fetchTimeline(self, until: Optional[str] = None) -> Command:
        if until is None:
            # A full load supersedes everything in flight, including a page fetch.
            self.timelineGeneration += 1
            self.fetchingMore = False
        return command.fetchTimeline(
            self.client, self.timeline, generation=self.timelineGeneration, until=until
        )

    def __setStatus(self, status: str) -> Command:
        self.statusGeneration += 1
        self.status = status
        return command.clearStatus(self.statusDelay, self.statusGeneration)

    # Results.

    def __timelineLoaded(self, message: TimelineLoadedMessage) -> List[Command]:
        if message.generation != self.timelineGeneration:
            logger.debug("Dropping stale timeline result from generation %d", message.generation)
            return []

        if message.append:
            self.fetchingMore = False
            self.notes.appendItems(message.notes)
        else:
            self.loading = False
            self.notes.setItems(message.notes)
        self.__relayout()

        return self.__imageCommands(message.notes)

    def __childrenLoaded(self, message: ChildrenLoadedMessage) -> List[Command]:
        if message.targetId != self.targetId:
            logger.debug("Dropping stale replies for %s", message.targetId)
            return []

        if self.pendingNote is not None:
            self.selectedNote = self.pendingNote
            self.parentNote = self.pendingParent
            self.pendingNote = None
            self.pendingParent = None

        self.loading = False
        self.mode = Mode.DETAIL
        self.detailFocus = DetailFocus.NOTE
        self.replies.setItems(message.notes)
        self.__relayout(resetScroll=True)

        notes = list(message.notes)
        if self.selectedNote is not None:
            notes.append(self.selectedNote)
        return self.__imageCommands(notes)

    def __parentLoaded(self, message: ParentNoteLoadedMessage) -> List[Command]:
        if message.targetId != self.targetId:
            logger.debug("Dropping stale parent for %s", message.targetId)
            return []

        if self.pendingNote is not None:
            self.pendingParent = message.note
            return []

        self.parentNote = message.note
        self.__relayout()
        return self.__imageCommands([message.note])

    def __notePosted(self, message: NotePostedMessage) -> List[Command]:
        self.loading = False
        self.__leavePosting()

        if message.error is not None:
            return [self.__setStatus(f"Failed to post note: {message.error}")]

        commands = [self.__setStatus("Note posted successfully!")]
        self.loading = True
        commands.append(self.__fetchTimeline())
        return commands

    def __errorReceived(self, message: ErrorMessage) -> List[Command]:
        if message.generation is not None and message.generation != self.timelineGeneration:
            logger.debug("Dropping stale timeline error: %s", message.error)
            return []
        if message.targetId is not None and message.targetId != self.targetId:
            logger.debug("Dropping stale detail error: %s", message.error)
            return []

        logger.warning("%s", message.error)
        self.error = message.error

        # Only the request that set the loading flag gets to clear it.
        if message.generation is not None:
            self.loading = False
            self.fetchingMore = False
        if message.targetId is not None:
            self.loading = False
            if self.pendingNote is not None:
                # The open failed, so whatever was on screen before stays.
                self.pendingNote = None
                self.pendingParent = None
            elif self.mode != Mode.DETAIL:
                self.__leaveDetail()
        return []

    # Bookkeeping.

    def __loadedNotes(self) -> List[NoteDict]:
        notes = list(self.notes.notes) + list(self.replies.notes)
        if self.selectedNote is not None:
            notes.append(self.selectedNote)
        if self.parentNote is not None:
            notes.append(self.parentNote)
        return notes

    def __imageCommands(self, notes: List[NoteDict]) -> List[Command]:
        if not self.graphics or self.proxy is None:
            return []

        commands: List[Command] = []
        for note in notes:
            for name in sorted(emojiNames(note)):
                if name in self.images or name in self.requestedImages:
                    continue
                url = self.emojis.get(name)
                if url is None:
                    continue

                self.requestedImages.add(name)
                commands.append(command.fetchEmojiImage(self.client, self.proxy, name, url))
        return commands

    def __relayout(self, resetScroll: bool = False) -> None:
        self.notes.setSize(self.columns, timelineListHeight(self.rows))

        if self.selectedNote is None:
            return

        width = max(1, self.columns - DETAIL_BOX_INSET)
        content = noteLines(self.selectedNote, width, self.style)
        parent = parentLines(self.parentNote, self.columns, self.style)
        layout = detailLayout(self.rows, len(parent), len(content))

        offset = 0 if resetScroll else self.viewport.offset
        self.viewport.setContent(content)
        self.viewport.setSize(width, layout.noteHeight)
        self.viewport.offset = min(offset, self.viewport.limit)
        self.replies.setSize(self.columns, layout.listHeight)

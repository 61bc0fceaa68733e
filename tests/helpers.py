import io
from typing import Any, Dict, List, Optional

from PIL import Image

from misskeyvt.client import ClientError, NoteDict, Timeline, UserDict
from misskeyvt.command import Command
from misskeyvt.message import Message, TimelineLoadedMessage
from misskeyvt.session import Session


def makeUser(username: str, name: Optional[str] = None) -> UserDict:
    user: UserDict = {"id": f"u-{username}", "username": username}
    if name is not None:
        user["name"] = name
    return user


def makeNote(
    noteId: str,
    text: Optional[str] = "",
    *,
    user: Optional[UserDict] = None,
    renote: Optional[NoteDict] = None,
    replyId: Optional[str] = None,
    reactions: Optional[Dict[str, int]] = None,
) -> NoteDict:
    note: NoteDict = {
        "id": noteId,
        "user": user or makeUser("alice", "Alice"),
        "createdAt": "2024-01-05T09:03:04.000Z",
        "text": text,
        "reactions": reactions or {},
        "repliesCount": 0,
        "renoteCount": 0,
    }
    if renote is not None:
        note["renote"] = renote
        note["renoteId"] = renote["id"]
    if replyId is not None:
        note["replyId"] = replyId
    return note


class FakeClient:
    """
    Stands in for the network. Every call is recorded, and any method named
    in failures raises a ClientError with that text instead of answering.
    """

    hostname = "example.test"

    def __init__(self) -> None:
        self.calls: List[Any] = []
        self.failures: Dict[str, str] = {}
        self.timelines: Dict[Timeline, List[NoteDict]] = {}
        self.pages: Dict[str, List[NoteDict]] = {}
        self.notes: Dict[str, NoteDict] = {}
        self.children: Dict[str, List[NoteDict]] = {}
        self.emojis: List[Dict[str, str]] = []
        self.images: Dict[str, bytes] = {}

    def __record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise ClientError(self.failures[name])

    def fetchTimeline(
        self, which: Timeline, *, limit: int = 30, until: Optional[str] = None
    ) -> List[NoteDict]:
        self.__record("fetchTimeline", which, until)
        if until is not None:
            return self.pages.get(until, [])
        return self.timelines.get(which, [])

    def fetchNote(self, noteId: str) -> NoteDict:
        self.__record("fetchNote", noteId)
        return self.notes[noteId]

    def fetchChildren(self, noteId: str) -> List[NoteDict]:
        self.__record("fetchChildren", noteId)
        return self.children.get(noteId, [])

    def createNote(self, text: str, *, replyId: Optional[str] = None) -> None:
        self.__record("createNote", text, replyId)

    def createRenote(self, noteId: str) -> None:
        self.__record("createRenote", noteId)

    def createReaction(self, noteId: str, reaction: str) -> None:
        self.__record("createReaction", noteId, reaction)

    def fetchMeta(self) -> Dict[str, Any]:
        self.__record("fetchMeta")
        return {"mediaProxy": "https://example.test/proxy", "emojis": self.emojis}

    def proxyUrl(self, meta: Dict[str, Any]) -> str:
        return meta["mediaProxy"]

    def fetchProxiedImage(self, proxy: str, url: str, *, purpose: str = "emoji") -> bytes:
        self.__record("fetchProxiedImage", url)
        return self.images[url]


def names(commands: List[Command]) -> List[str]:
    return [command.name for command in commands]


def runAll(session: Session, commands: List[Command]) -> List[Command]:
    """
    Run commands inline and feed their results back in until nothing but
    delayed commands are left, which are handed back untouched.
    """

    delayed: List[Command] = []
    pending = list(commands)
    while pending:
        command = pending.pop(0)
        if command.delay > 0:
            delayed.append(command)
            continue
        pending.extend(session.update(command.run()))
    return delayed


def loaded(session: Session, notes: List[NoteDict]) -> List[Command]:
    message: Message = TimelineLoadedMessage(
        session.timeline, notes, generation=session.timelineGeneration
    )
    return session.update(message)


def imageBytes(fmt: str = "PNG", size: int = 32, color: Any = (255, 0, 0, 255)) -> bytes:
    image = Image.new("RGBA", (size, size), color)
    if fmt in {"JPEG", "GIF"}:
        image = image.convert("RGB")

    data = io.BytesIO()
    image.save(data, format=fmt)
    return data.getvalue()

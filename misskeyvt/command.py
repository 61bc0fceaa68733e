import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from .client import Client, ClientError, Timeline
from .message import (
    Message,
    ChildrenLoadedMessage,
    ClearStatusMessage,
    EmojiImageFailedMessage,
    EmojiImageLoadedMessage,
    ErrorMessage,
    InstanceLoadedMessage,
    NotePostedMessage,
    NoteRenotedMessage,
    ParentNoteLoadedMessage,
    ReactionResultMessage,
    TimelineLoadedMessage,
)
from .pipeline import ImageError, fetchEmoji


logger = logging.getLogger(__name__)


class Command:
    """
    A deferred unit of work. The function closes over everything it needs
    at the time the command is created and never looks at live session
    state. Running it produces exactly one message.
    """

    def __init__(self, name: str, func: Callable[[], Message], *, delay: float = 0.0) -> None:
        self.name = name
        self.func = func
        self.delay = delay

    def run(self) -> Message:
        return self.func()

    def __repr__(self) -> str:
        return f"Command({self.name})"


def fetchTimeline(
    client: Client, timeline: Timeline, *, generation: int, until: Optional[str] = None
) -> Command:
    def run() -> Message:
        try:
            notes = client.fetchTimeline(timeline, until=until)
        except ClientError as e:
            return ErrorMessage(str(e), generation=generation)
        return TimelineLoadedMessage(timeline, notes, generation=generation, append=until is not None)

    return Command("fetchTimeline", run)


def fetchChildren(client: Client, noteId: str) -> Command:
    def run() -> Message:
        try:
            notes = client.fetchChildren(noteId)
        except ClientError as e:
            return ErrorMessage(str(e), targetId=noteId)
        return ChildrenLoadedMessage(noteId, notes)

    return Command("fetchChildren", run)


def fetchParent(client: Client, noteId: str, parentId: str) -> Command:
    def run() -> Message:
        try:
            note = client.fetchNote(parentId)
        except ClientError as e:
            return ErrorMessage(str(e), targetId=noteId)
        return ParentNoteLoadedMessage(noteId, note)

    return Command("fetchParent", run)


def createNote(client: Client, text: str, replyId: Optional[str] = None) -> Command:
    def run() -> Message:
        try:
            client.createNote(text, replyId=replyId)
        except ClientError as e:
            return NotePostedMessage(str(e))
        return NotePostedMessage()

    return Command("createNote", run)


def createRenote(client: Client, noteId: str) -> Command:
    def run() -> Message:
        try:
            client.createRenote(noteId)
        except ClientError as e:
            return NoteRenotedMessage(str(e))
        return NoteRenotedMessage()

    return Command("createRenote", run)


def createReaction(client: Client, noteId: str, reaction: str) -> Command:
    def run() -> Message:
        try:
            client.createReaction(noteId, reaction)
        except ClientError as e:
            return ReactionResultMessage(reaction, str(e))
        return ReactionResultMessage(reaction)

    return Command("createReaction", run)


def fetchInstance(client: Client) -> Command:
    def run() -> Message:
        try:
            meta = client.fetchMeta()
        except ClientError as e:
            return ErrorMessage(str(e))

        emojis = {
            entry["name"]: entry["url"]
            for entry in meta.get("emojis", [])
            if entry.get("name") and entry.get("url")
        }
        return InstanceLoadedMessage(client.proxyUrl(meta), emojis)

    return Command("fetchInstance", run)


def fetchEmojiImage(client: Client, proxy: str, name: str, url: str) -> Command:
    def run() -> Message:
        try:
            return EmojiImageLoadedMessage(name, fetchEmoji(client, proxy, url))
        except (ClientError, ImageError) as e:
            # Nothing to show the user, the emoji just stays as text.
            logger.debug("Emoji %s failed: %s", name, e)
            return EmojiImageFailedMessage(name)

    return Command(f"fetchEmojiImage({name})", run)


def clearStatus(delay: float, generation: int) -> Command:
    return Command("clearStatus", lambda: ClearStatusMessage(generation), delay=delay)


class Scheduler:
    """
    Runs commands off the main loop and funnels every result, along with
    input events posted by the main loop itself, into one ordered queue that
    only the main loop reads from.
    """

    def __init__(self, workers: int = 8) -> None:
        self.__queue: "queue.Queue[Message]" = queue.Queue()
        self.__executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="command")

    def post(self, message: Message) -> None:
        self.__queue.put(message)

    def dispatch(self, commands: Sequence[Command]) -> None:
        for command in commands:
            logger.debug("Dispatching %r", command)

            if command.delay > 0:
                # Timers sleep on their own daemon thread so they never hold up a worker or exit.
                timer = threading.Timer(command.delay, self.__run, args=(command,))
                timer.daemon = True
                timer.start()
            else:
                self.__executor.submit(self.__run, command)

    def __run(self, command: Command) -> None:
        try:
            message = command.run()
        except Exception as e:
            logger.exception("Command %r raised", command)
            message = ErrorMessage(f"Unexpected failure in {command.name}: {e}")

        self.__queue.put(message)

    def next(self, timeout: Optional[float] = None) -> Optional[Message]:
        try:
            if timeout is None or timeout <= 0:
                return self.__queue.get_nowait()
            return self.__queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self, timeout: Optional[float] = None) -> List[Message]:
        # Wait for the first message only, then take whatever else already arrived.
        messages: List[Message] = []
        message = self.next(timeout)
        while message is not None:
            messages.append(message)
            message = self.next()
        return messages

    def shutdown(self) -> None:
        self.__executor.shutdown(wait=False, cancel_futures=True)

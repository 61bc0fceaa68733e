import re
from datetime import datetime
from typing import Collection, Dict, List, Optional, Set, cast

import emoji
from tzlocal import get_localzone

from .client import NoteDict, UserDict
from .text import striplow


HEART: str = "❤️"
HEARTS = {HEART, "❤"}

# Custom emoji look like :name: in note text, and :name@host: in reactions
# where a host of "." means this instance.
EMOJI_TOKEN = re.compile(r":([A-Za-z0-9_+-]+)(@[A-Za-z0-9_.:-]*)?:")


def isPureRenote(note: NoteDict) -> bool:
    return bool(note.get("renote")) and not (note.get("text") or "")


def displayTarget(note: NoteDict) -> NoteDict:
    """
    The note that should actually be shown, or acted upon, for a timeline
    entry. A pure renote has nothing of its own to say, so everything about
    it (author, body, reactions, replies, thread lookups) comes from the
    note it renoted. The renoter only ever shows up in a banner.
    """

    if isPureRenote(note):
        return cast(NoteDict, note["renote"])
    return note


def displayName(user: UserDict) -> str:
    name = user.get("name")
    if name:
        return name
    return f"@{user['username']}"


def userTitle(user: UserDict) -> str:
    name = user.get("name")
    if name:
        return f"{name} (@{user['username']})"
    return f"@{user['username']}"


def noteTitle(note: NoteDict) -> str:
    target = displayTarget(note)
    title = userTitle(target["user"])
    if target is not note:
        title = f"{title}, {displayName(note['user'])} renoted"
    return title


def noteDescription(note: NoteDict) -> str:
    return displayTarget(note).get("text") or ""


def renoteBanner(note: NoteDict) -> Optional[str]:
    if not isPureRenote(note):
        return None
    return f"Renoted by {displayName(note['user'])}"


def plainText(text: str) -> str:
    # A VT-100 has no business displaying unicode emoji, spell them out instead.
    return emoji.demojize(striplow(text, allow_safe=True))


def isHeartReaction(reaction: str) -> bool:
    if reaction in HEARTS:
        return True
    return len(reaction) > 2 and reaction.startswith(":") and reaction.endswith(":")


def reactionSummary(reactions: Dict[str, int]) -> List[str]:
    hearts = 0
    others: List[str] = []

    for reaction in sorted(reactions):
        count = reactions[reaction]
        if isHeartReaction(reaction):
            hearts += count
        else:
            others.append(f"{reaction} {count}")

    if hearts > 0:
        return [f"{HEART} {hearts}", *others]
    return others


def countSummary(note: NoteDict) -> str:
    return f"Replies: {note.get('repliesCount', 0)}, Renotes: {note.get('renoteCount', 0)}"


def formatTimestamp(createdAt: str) -> str:
    try:
        timestamp = datetime.fromisoformat(createdAt.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return ""

    return (
        timestamp.astimezone(get_localzone())
        .strftime("%a, %b %d, %Y, %I:%M:%S %p")
        .replace(" 0", " ")
    )


def emojiNames(note: NoteDict) -> Set[str]:
    """
    Every custom emoji name this note would render, either in its text or
    in its reaction list. Remote emoji (with a host other than this
    instance) are skipped since we can't look them up.
    """

    target = displayTarget(note)
    names: Set[str] = set()

    for match in EMOJI_TOKEN.finditer(target.get("text") or ""):
        if not match.group(2):
            names.add(match.group(1))

    for reaction in (target.get("reactions") or {}):
        match = EMOJI_TOKEN.fullmatch(reaction)
        if match and match.group(2) in {None, "@."}:
            names.add(match.group(1))

    return names


def expandShortcodes(text: str, custom: Collection[str]) -> str:
    # Shortcodes that name an instance emoji are left for the server to render.
    def expand(match: "re.Match[str]") -> str:
        if match.group(2) or match.group(1) in custom:
            return match.group(0)
        return emoji.emojize(match.group(0), language="alias")

    return EMOJI_TOKEN.sub(expand, text)

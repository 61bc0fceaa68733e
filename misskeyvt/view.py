from typing import Dict, List, NamedTuple, Sequence, Tuple

from .client import NoteDict, Timeline
from .detail import parentLines
from .drawhelpers import boxbottom, boxmiddle, boxtop, fill, join, replace, styled
from .layout import detailLayout
from .notes import EMOJI_TOKEN, noteDescription, noteTitle, plainText
from .session import DETAIL_BOX_INSET, DetailFocus, Mode, Session
from .style import Style
from .text import NORMAL, ControlCodes, Line, center, highlight, sanitize, truncate, wordwrap
from .widgets import NoteList


class Glyph(NamedTuple):
    row: int
    column: int
    data: bytes


class Frame(NamedTuple):
    """
    Everything that should be on screen. Rows and columns are zero-based,
    every line is exactly as wide as the screen, and glyphs are sixel
    images to be drawn on top of the text after it is written.
    """

    lines: List[Line]
    glyphs: List[Glyph]


TAB_NAMES: List[Tuple[Timeline, str]] = [
    (Timeline.HOME, "Home"),
    (Timeline.LOCAL, "Local"),
    (Timeline.SOCIAL, "Social"),
    (Timeline.GLOBAL, "Global"),
]

# Each glyph covers two character cells.
GLYPH_CELLS: int = 2

HELP = {
    Mode.TIMELINE: "c compose, r reply, f react, b renote, q quit",
    Mode.POSTING: "Ctrl+D to post, Ctrl+X or Esc to cancel",
    Mode.DETAIL: "Tab focus, r reply, f react, b renote, q back",
}


def render(session: Session) -> Frame:
    rows = max(1, session.rows)
    columns = max(1, session.columns)

    if session.error is not None:
        lines = errorLines(session.error, rows, columns, session.style)
    else:
        if session.mode == Mode.POSTING:
            lines = postingLines(session, rows - 1, columns)
        elif session.mode == Mode.DETAIL:
            lines = detailLines(session, rows - 1, columns)
        else:
            lines = timelineLines(session, rows - 1, columns)

        # The status bar always sits on the last row.
        lines = lines[:(rows - 1)]
        lines.extend([("", [])] * ((rows - 1) - len(lines)))
        lines.append(statusLine(session, columns))

    lines = [fill(line, columns) for line in lines[:rows]]
    while len(lines) < rows:
        lines.append(fill(("", []), columns))

    if session.graphics and session.images:
        return placeGlyphs(lines, session.images)
    return Frame(lines, [])


def placeGlyphs(lines: List[Line], images: Dict[str, bytes]) -> Frame:
    """
    Swap every custom emoji token that has a cached image for blank cells,
    and note where the image goes. Tokens without an image stay as text.
    """

    newLines: List[Line] = []
    glyphs: List[Glyph] = []

    for row, (text, codes) in enumerate(lines):
        width = len(text)
        outText = ""
        outCodes: List[ControlCodes] = []
        last = 0

        for match in EMOJI_TOKEN.finditer(text):
            host = match.group(2)
            data = images.get(match.group(1))
            if data is None or host not in {None, "@."}:
                continue

            outText += text[last:match.start()]
            outCodes += codes[last:match.start()]
            glyphs.append(Glyph(row, len(outText), data))
            outText += " " * GLYPH_CELLS
            outCodes += codes[match.start():(match.start() + 1)] * GLYPH_CELLS
            last = match.end()

        if last == 0:
            newLines.append((text, codes))
            continue

        outText += text[last:]
        outCodes += codes[last:]
        newLines.append(fill((outText, outCodes), width))

    return Frame(newLines, glyphs)


def tabsLine(current: Timeline, columns: int, style: Style) -> Line:
    chunks: List[Line] = []
    for timeline, name in TAB_NAMES:
        code = style.activeTab if timeline == current else style.inactiveTab
        chunks.append(styled(f" {name} ", code))
        chunks.append(styled(" ", style.inactiveTab))
    return fill(join(chunks), columns, style.inactiveTab)


def statusLine(session: Session, columns: int) -> Line:
    style = session.style

    if session.status is not None:
        text = plainText(session.status)
    elif session.loading:
        text = "Loading..."
    elif session.fetchingMore:
        text = "Fetching more notes..."
    else:
        text = HELP[session.mode]

    line = fill(styled(" " + text, style.status), columns, style.status)
    if session.account is not None:
        who = f"{session.account['username']}@{session.client.hostname} "
        if len(text) + len(who) + 2 <= columns:
            line = replace(line, styled(who, style.status), columns - len(who))
    return line


def noteItem(note: NoteDict, columns: int, style: Style, selected: bool) -> List[Line]:
    title = truncate(plainText(noteTitle(note)), columns)
    description = plainText(noteDescription(note)).replace("\n", " ").strip()
    description = truncate(description, columns)

    if selected:
        return [
            fill(styled(title, style.selected), columns, style.selected),
            fill(styled(description, style.selected), columns, style.selected),
            ("", []),
        ]
    return [styled(title, style.title), styled(description, style.body), ("", [])]


def listLines(notes: NoteList, columns: int, style: Style, focused: bool = True) -> List[Line]:
    lines: List[Line] = []
    for index, note in notes.visible():
        lines.extend(noteItem(note, columns, style, focused and index == notes.selected))
    return lines[:notes.height]


def timelineLines(session: Session, rows: int, columns: int) -> List[Line]:
    lines = [tabsLine(session.timeline, columns, session.style)]
    if session.notes.notes:
        lines.extend(listLines(session.notes, columns, session.style))
    elif session.loading:
        lines.extend(centered(["Loading..."], rows - 1, columns))
    else:
        lines.extend(centered(["Nothing to see here!"], rows - 1, columns))
    return lines


def detailLines(session: Session, rows: int, columns: int) -> List[Line]:
    style = session.style
    lines: List[Line] = []

    if session.selectedNote is None:
        return lines

    parent = parentLines(session.parentNote, columns, style)
    layout = detailLayout(rows + 1, len(parent), len(session.viewport.lines))
    lines.extend(parent[:layout.parentHeight])

    # Box padding is whatever the inset leaves once the borders are drawn.
    padding = (DETAIL_BOX_INSET - 2) // 2
    lines.append(boxtop(columns))
    for line in session.viewport.visible():
        lines.append(boxmiddle(line, columns, padding))
    for _ in range(layout.noteHeight - len(session.viewport.visible())):
        lines.append(boxmiddle(("", []), columns, padding))
    lines.append(boxbottom(columns))

    focused = session.detailFocus == DetailFocus.REPLIES
    header = f"Replies ({len(session.replies.notes)})"
    if focused:
        lines.append(styled(header, style.header))
    else:
        lines.append(styled(header, NORMAL))

    if session.replies.notes:
        lines.extend(listLines(session.replies, columns, style, focused))
    elif layout.listHeight > 0:
        lines.append(styled("No replies yet.", style.metadata))

    return lines[:rows]


def postingLines(session: Session, rows: int, columns: int) -> List[Line]:
    style = session.style
    lines: List[Line] = []

    if session.replyTo is not None:
        title = truncate(plainText(noteTitle(session.replyTo)), max(1, columns - 9))
        lines.append(highlight(f"Reply to <b>{sanitize(title)}</b>"))
        quote = plainText(session.replyTo.get("text") or "")
        for text, codes in wordwrap(quote, [style.metadata] * len(quote), max(1, columns - 2))[:3]:
            lines.append(("│ " + text, [style.metadata, style.metadata, *codes]))
    else:
        lines.append(styled("New note", style.title))
    lines.append(("", []))

    if session.composer.text:
        body = session.composer.text + "_"
        code = style.body
    else:
        body = session.composer.placeholder
        code = style.metadata

    inner = max(1, columns - DETAIL_BOX_INSET)
    wrapped = wordwrap(body, [code] * len(body), inner, strip_trailing_newlines=False)

    # Leave room for the box borders and the help line below it.
    room = max(1, rows - len(lines) - 4)
    padding = (DETAIL_BOX_INSET - 2) // 2
    lines.append(boxtop(columns))
    for line in wrapped[-room:]:
        lines.append(boxmiddle(line, columns, padding))
    for _ in range(room - len(wrapped[-room:])):
        lines.append(boxmiddle(("", []), columns, padding))
    lines.append(boxbottom(columns))
    lines.append(("", []))
    lines.append(highlight("<b>Ctrl+D</b> to post, <b>Ctrl+X</b> or <b>Esc</b> to cancel"))

    return lines[:rows]


def centered(texts: Sequence[str], rows: int, columns: int, code: ControlCodes = NORMAL) -> List[Line]:
    top = max(0, (rows - len(texts)) // 2)
    lines: List[Line] = [("", [])] * top
    for text in texts:
        lines.append(styled(center(text, columns), code))
    return lines


def errorLines(error: str, rows: int, columns: int, style: Style) -> List[Line]:
    width = max(4, min(columns, 60))
    inner = width - 4

    message = plainText(error)
    body: List[Line] = [styled("An error occurred:", style.error), ("", [])]
    body.extend(wordwrap(message, [NORMAL] * len(message), max(1, inner)))
    body.extend([("", []), styled("Press any key to return.", NORMAL)])

    box = [boxtop(width), *[boxmiddle(line, width, 1) for line in body], boxbottom(width)]

    top = max(0, (rows - len(box)) // 2)
    left = (columns - width) // 2
    lines: List[Line] = [("", [])] * top
    for text, codes in box:
        lines.append((" " * left + text, [*([NORMAL] * left), *codes]))
    return lines

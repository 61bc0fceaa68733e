import re
from typing import Any, List, Sequence, Tuple, TypeVar

from vtpy import Terminal


class ControlCodes:
    def __init__(
        self, *, bold: bool = False, underline: bool = False, reverse: bool = False
    ) -> None:
        self.bold = bold
        self.underline = underline
        self.reverse = reverse

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ControlCodes):
            return NotImplemented
        return (
            self.bold == other.bold
            and self.underline == other.underline
            and self.reverse == other.reverse
        )

    def __repr__(self) -> str:
        return f"ControlCodes(bold={self.bold}, underline={self.underline}, reverse={self.reverse})"

    def codesFrom(self, prev: "ControlCodes") -> List[bytes]:
        if (
            ((not self.bold) and prev.bold)
            or ((not self.underline) and prev.underline)
            or ((not self.reverse) and prev.reverse)
        ):
            # Attributes can only be turned off all at once, so reset and re-enable what we keep.
            resetcodes: List[bytes] = [Terminal.SET_NORMAL]

            if self.bold:
                resetcodes.append(Terminal.SET_BOLD)
            if self.underline:
                resetcodes.append(Terminal.SET_UNDERLINE)
            if self.reverse:
                resetcodes.append(Terminal.SET_REVERSE)

            return resetcodes
        else:
            normalcodes: List[bytes] = []

            if (not prev.bold) and self.bold:
                normalcodes.append(Terminal.SET_BOLD)
            if (not prev.underline) and self.underline:
                normalcodes.append(Terminal.SET_UNDERLINE)
            if (not prev.reverse) and self.reverse:
                normalcodes.append(Terminal.SET_REVERSE)

            return normalcodes


NORMAL = ControlCodes()

Line = Tuple[str, List[ControlCodes]]

ConcatableSequence = TypeVar('ConcatableSequence', List[Any], str)


def __normalize(text: str, meta: ConcatableSequence) -> Tuple[str, ConcatableSequence]:
    newText = ""
    newMeta = meta[:0]

    for i, c in enumerate(text):
        if c == "\r":
            # Bare carriage returns become newlines, the ones in front of a newline go away.
            if text[(i + 1):(i + 2)] != "\n":
                newText += "\n"
                newMeta += meta[i:(i + 1)]
        elif c == "\t":
            newText += "    "
            newMeta += meta[i:(i + 1)] * 4
        else:
            newText += c
            newMeta += meta[i:(i + 1)]

    return (newText, newMeta)


def __wrap_paragraph(
    text: str, meta: ConcatableSequence, width: int, strip_trailing_spaces: bool
) -> List[Tuple[str, ConcatableSequence]]:
    lines: List[Tuple[str, ConcatableSequence]] = []

    while len(text) > width:
        # Candidate one: the last space that fits. The space itself is dropped.
        space = text.rfind(" ", 0, width + 1)

        # Candidate two: just after the last dash that fits and is followed by a word.
        dash = text.rfind("-", 0, width)
        while dash > 0 and not text[dash + 1].isalnum():
            dash = text.rfind("-", 0, dash)

        if dash > 0 and (dash + 1) > space:
            cut, rest = dash + 1, dash + 1
        elif space > 0:
            cut, rest = space, space + 1
            if strip_trailing_spaces:
                while rest < len(text) and text[rest] == " ":
                    rest += 1
        else:
            # No choice but to break mid-word.
            cut, rest = width, width

        lines.append((text[:cut], meta[:cut]))
        text = text[rest:]
        meta = meta[rest:]

    if text or not lines:
        lines.append((text, meta))

    if strip_trailing_spaces:
        for i, (line, lineMeta) in enumerate(lines):
            while line and line[-1] == " ":
                line = line[:-1]
                lineMeta = lineMeta[:-1]
            lines[i] = (line, lineMeta)

    return lines


def wordwrap(
    text: str,
    meta: ConcatableSequence,
    width: int,
    *,
    strip_trailing_spaces: bool = True,
    strip_trailing_newlines: bool = True,
) -> List[Tuple[str, ConcatableSequence]]:
    """
    Given a text string and a maximum allowed width, word-wraps that text by
    returning a list of lines, none of which are longer than the specified
    width. Prefers embedded newlines, then spaces, then a break after a dash,
    and finally mid-word if it must. The metadata sequence is sliced right
    alongside the text, so it must be the same length.
    """

    if not text:
        return [(text[:0], meta[:0])]

    if len(text) != len(meta):
        raise Exception("Metadata length must match text length!")
    if width < 1:
        raise Exception("Cannot wrap text to a width less than one!")

    text, meta = __normalize(text, meta)

    outLines: List[Tuple[str, ConcatableSequence]] = []
    start = 0
    for i, c in enumerate(text):
        if c == "\n":
            outLines += __wrap_paragraph(text[start:i], meta[start:i], width, strip_trailing_spaces)
            start = i + 1
    outLines += __wrap_paragraph(text[start:], meta[start:], width, strip_trailing_spaces)

    if strip_trailing_newlines:
        while outLines and (not outLines[-1][0]):
            outLines = outLines[:-1]
    return outLines


_TAGS = {
    "b": "bold",
    "bold": "bold",
    "u": "underline",
    "underline": "underline",
    "r": "reverse",
    "reverse": "reverse",
}


def striplow(text: str, allow_safe: bool = False) -> str:
    for i in range(32):
        # Allow newline characters, allow tabs.
        if allow_safe and i in {9, 10}:
            continue
        text = text.replace(chr(i), "")
    return text


def sanitize(text: str) -> str:
    text = text.replace("&", "&amp;")
    text = text.replace("<", "&lt;")
    text = text.replace(">", "&gt;")
    return text


def unsanitize(text: str) -> str:
    text = text.replace("&lt;", "<")
    text = text.replace("&gt;", ">")
    text = text.replace("&amp;", "&")
    return text


def highlight(text: str) -> Tuple[str, List[ControlCodes]]:
    """
    Turn a string with <b>, <u> and <r> markup into plain text plus one
    ControlCodes per character. Literal angle brackets and ampersands must
    be passed through sanitize() first.
    """

    depths = {"bold": 0, "underline": 0, "reverse": 0}
    cur = NORMAL

    texts: List[str] = []
    codes: List[ControlCodes] = []

    for part in re.split(r"(<[^<>]*>)", text):
        if not part:
            continue

        if part[:1] == "<" and part[-1:] == ">":
            closing = part[:2] == "</"
            attr = _TAGS.get(part.strip("</>").strip())
            if attr is None:
                continue

            depths[attr] = max(0, depths[attr] + (-1 if closing else 1))
            cur = ControlCodes(
                bold=depths["bold"] > 0,
                underline=depths["underline"] > 0,
                reverse=depths["reverse"] > 0,
            )
        else:
            part = unsanitize(part)
            texts.append(part)
            codes.extend([cur] * len(part))

    return ("".join(texts), codes)


def emit(
    terminal: Terminal,
    text: str,
    codes: Sequence[ControlCodes],
    last: ControlCodes,
) -> ControlCodes:
    # Send runs of identically formatted characters in one go, serial links are slow.
    run = ""
    for pos, ch in enumerate(text):
        code = codes[pos] if pos < len(codes) else NORMAL
        commands = code.codesFrom(last)
        if commands:
            if run:
                terminal.sendText(run)
                run = ""
            for command in commands:
                terminal.sendCommand(command)
        last = code
        run += ch

    if run:
        terminal.sendText(run)
    return last


def pad(line: str, length: int) -> str:
    if len(line) >= length:
        return line[:length]
    amount = length - len(line)
    return line + (" " * amount)


def truncate(line: str, length: int) -> str:
    if len(line) <= length:
        return line
    if length <= 3:
        return line[:length]
    return line[:(length - 3)] + "\u2022\u2022\u2022"


def center(line: str, length: int) -> str:
    if len(line) >= length:
        return line[:length]
    leftAdd = (length - len(line)) // 2
    return pad((" " * leftAdd) + line, length)

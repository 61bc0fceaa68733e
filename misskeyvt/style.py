from typing import NamedTuple

from .text import ControlCodes


class Style(NamedTuple):
    # A VT-100 has no color, so every style is some mix of bold, underline and reverse.
    title: ControlCodes = ControlCodes(bold=True)
    body: ControlCodes = ControlCodes()
    metadata: ControlCodes = ControlCodes()
    selected: ControlCodes = ControlCodes(reverse=True)
    activeTab: ControlCodes = ControlCodes(bold=True, reverse=True)
    inactiveTab: ControlCodes = ControlCodes(reverse=True)
    header: ControlCodes = ControlCodes(bold=True, underline=True)
    status: ControlCodes = ControlCodes(reverse=True)
    error: ControlCodes = ControlCodes(bold=True)


DEFAULT_STYLE = Style()

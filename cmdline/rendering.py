"""
Rich helpers for usage text: palette, painter and aligned columns.

Layout
- Every listing line starts with two spaces, then a label, then padding, then the
  description. The padding puts all descriptions of one listing in a column
  INDENT characters past its longest label.
- Option labels read "-x, --name"; a missing short spelling is four spaces, a
  missing long spelling is padded as if "--" plus the name were present.

Palette keys
- usage-label, program-name, usage-section, description-section, footer-section
- section-label, command-name, option-name, argument-description, hint-section
- panel-title

Customization
- A mapping named __styles__ in __main__ overrides palette entries.
- With colorful=False no style is applied at all.
"""
from collections import defaultdict

from rich.text import Text

# spaces between the longest label of a listing and the description column
INDENT = 4

PALETTE = {
    # === head ===
    "usage-label": "bold #00E6FF",
    "program-name": "bold #FF4D94",
    "usage-section": "bold #36C5F0",
    "description-section": "italic #A3A3A3",
    "footer-section": "#737373",

    # === listings ===
    "section-label": "bold #FFFFFF",
    "command-name": "bold #36C5F0",
    "option-name": "bold #00E6FF",
    "argument-description": "#9CA3AF",
    "hint-section": "#D1D5DB",

    # === fancy panel ===
    "panel-title": "bold #FF4D94",
}


class Painter:
    """
    Turns fragments into rich Text, styled from the palette only when colorful.
    """

    def __init__(self, colorful=False):
        self.colorful = bool(colorful)
        self.styles = defaultdict(str, PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def style(self, name, /):
        return self.styles[name] if self.colorful else ""

    def __call__(self, fragment, style="", /):
        if isinstance(fragment, Text):
            return fragment if self.colorful else Text(fragment.plain)
        return Text(str(fragment), self.style(style) if style else "")


def option_label(option, longest, /):
    """
    Plain "-x, --name" label padded so that descriptions line up.
    """
    label = ("-" + option.short + ", ") if option.short is not None else "    "
    if option.long is not None:
        label += "--" + option.long
        spaces = longest - len(option.long) + INDENT
    else:
        spaces = longest + 2 + INDENT
    return label, " " * spaces


def option_line(option, longest, paint, /):
    label, padding = option_label(option, longest)
    return Text.assemble(
        "  ",
        paint(label, "option-name"),
        padding,
        paint(option.descr, "argument-description"),
    )


def command_line(command, longest, paint, /):
    return Text.assemble(
        "  ",
        paint(command.name, "command-name"),
        " " * (longest - len(command.name) + INDENT),
        paint(command.descr, "argument-description"),
    )


__all__ = (
    "INDENT",
    "PALETTE",
    "Painter",
    "option_label",
    "option_line",
    "command_line",
)

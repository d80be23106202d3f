"""Lay out the logo and the collected facts as two aligned columns."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence, Tuple

from rich.console import Console
from rich.text import Text

from .config import Configuration
from .system_state import SystemSnapshot

# Fixed width of the logo column; not measured from LOGO.
LOGO_WIDTH = 60

PALETTE: Mapping[str, str] = {
    "blue": "bright_blue",
    "green": "bright_green",
    "red": "bright_red",
    "yellow": "bright_yellow",
    "magenta": "bright_magenta",
    "cyan": "bright_cyan",
    "white": "bright_white",
}

DEFAULT_ROLE_COLORS: Mapping[str, str] = {
    "label": "blue",
    "value": "white",
    "logo": "cyan",
}

# Display key -> SystemSnapshot attribute. The key doubles as the label.
FIELDS: Mapping[str, str] = {
    "OS": "name",
    "Architecture": "architecture",
    "Kernel": "kernel",
    "Shell": "shell",
    "Desktop": "desktop",
    "Packages": "packages",
    "Uptime": "uptime",
    "WM": "wm",
    "Theme": "theme",
    "Icons": "icons",
    "Terminal": "terminal",
}

LOGO = r"""
                 .88888888:.
                88888888.88888.
              .8888888888888888.
              888888888888888888
              88' _`88'_  `88888
              88 88 88 88  88888
              88_88_::_88_:88888
              88:::,::,:::::8888
              88`:::::::::'`8888
             .88  `::::'    8:88.
            8888            `8:888.
          .8888'             `888888.
         .8888:..  .::.  ...:'8888888:.
        .8888.'     :'     `'::`88:88888
       .8888        '         `.888:8888.
      888:8         .           888:88888
    .888:88        .:           888:88888:
    8888888.       ::           88:888888
    `.::.888.      ::          .88888888
   .::::::.888.    ::         :::`8888'.:.
  ::::::::::.888   '         .::::::::::::
  ::::::::::::.8    '      .:8::::::::::::.
 .::::::::::::::.        .:888:::::::::::::
 :::::::::::::::88:.__..:88888:::::::::::'
  `'.:::::::::::88888888888.88:::::::::'
        `':::_:' -- '' -'-' `':_::::'`
"""


def color_style(role: str, name: str) -> str:
    """Rich style for a palette name, falling back to the role's default color."""
    return PALETTE.get(name, PALETTE[DEFAULT_ROLE_COLORS[role]])


def info_rows(snapshot: SystemSnapshot, info_order: Iterable[str]) -> List[Tuple[str, str]]:
    """``(label, value)`` pairs in display order; unknown keys are skipped."""
    return [(key, getattr(snapshot, FIELDS[key])) for key in info_order if key in FIELDS]


def render(snapshot: SystemSnapshot, config: Configuration, logo: str = LOGO) -> List[Text]:
    logo_lines = logo.splitlines() if config.show_logo else []
    label_style = f"bold {color_style('label', config.colors.label)}"
    value_style = color_style("value", config.colors.value)
    logo_style = color_style("logo", config.colors.logo)
    info_lines = [
        Text.assemble((label, label_style), " ", (value, value_style))
        for label, value in info_rows(snapshot, config.info_order)
    ]

    width = LOGO_WIDTH + config.spacing
    lines: List[Text] = []
    for index in range(max(len(logo_lines), len(info_lines))):
        logo_line = Text(logo_lines[index], style=logo_style) if index < len(logo_lines) else None
        info_line = info_lines[index] if index < len(info_lines) else None
        if logo_line is not None and info_line is not None:
            lines.append(Text.assemble(_pad(logo_line, width), " ", info_line))
        elif logo_line is not None:
            lines.append(logo_line)
        elif info_line is not None:
            lines.append(Text.assemble(" " * width, " ", info_line))
    return lines


def print_lines(lines: Sequence[Text], console: Console) -> None:
    for line in lines:
        console.print(line, soft_wrap=True)


def _pad(text: Text, width: int) -> Text:
    padded = Text()
    padded.append_text(text)
    padded.pad_right(max(0, width - text.cell_len))
    return padded

"""
Renders posted text into an ASCII-art figure.
"""

from __future__ import annotations

import random
import textwrap
from typing import Optional

import cowsay

from figstore.errors import RenderError

BALLOON_WIDTH = 40
DEFAULT_STYLE = "cow"
# cowsay refuses whitespace-only text; a zero-width space draws an empty balloon.
EMPTY_BALLOON_TEXT = "\u200b"

# Figures we are happy to serve. Anything else the library ships is ignored.
ALLOWED_STYLES = (
    "beavis",
    "bud-frogs",
    "bunny",
    "cow",
    "daemon",
    "docker",
    "dragon",
    "elephant",
    "flaming-sheep",
    "ghostbusters",
    "gopher",
    "hellokitty",
    "kitty",
    "koala",
    "meow",
    "sage",
    "sheep",
    "skeleton",
    "squirrel",
    "stegosaurus",
    "turkey",
    "turtle",
)


def available_styles() -> list[str]:
    return [style for style in ALLOWED_STYLES if style in cowsay.char_names]


def pick_style(rng: random.Random | None = None) -> str:
    """Pick a random allowed style, falling back to the default figure."""
    candidate = (rng or random).choice(ALLOWED_STYLES)
    if candidate in cowsay.char_names:
        return candidate
    return DEFAULT_STYLE


def _wrap(text: str) -> str:
    lines = []
    for paragraph in text.splitlines() or [""]:
        lines.extend(textwrap.wrap(paragraph, BALLOON_WIDTH) or [""])
    return "\n".join(lines)


def render(text: str, style: Optional[str] = None) -> str:
    style = style or pick_style()
    if style not in cowsay.char_names:
        raise RenderError(f"Unknown figure style: {style}")
    try:
        wrapped = _wrap(text)
        if not wrapped.strip():
            wrapped = EMPTY_BALLOON_TEXT
        return cowsay.get_output_string(style, wrapped)
    except Exception as exc:
        raise RenderError(f"Failed to generate figure: {exc}") from exc

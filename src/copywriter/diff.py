from __future__ import annotations

import asyncio
import difflib
import re
from typing import TextIO

from rich.console import Console
from rich.text import Text

from copywriter.models import Change

_WORD_PATTERN = re.compile(r"\s+|\S+")

_STYLES = {"delete": "red", "insert": "green", "equal": "grey50"}
_MARKERS = {"delete": ("[-", "-]"), "insert": ("{+", "+}"), "equal": ("", "")}


def word_diff(old: str, new: str) -> list[tuple[str, str]]:
    """Diff *old* against *new* word by word.

    Returns ``(kind, text)`` pieces in display order, where kind is one of
    ``equal``, ``delete`` or ``insert``. Whitespace runs are tokens of their
    own, so joining the ``equal`` and ``delete`` pieces gives back *old*.
    """
    old_words = _WORD_PATTERN.findall(old)
    new_words = _WORD_PATTERN.findall(new)
    matcher = difflib.SequenceMatcher(None, old_words, new_words, autojunk=False)
    pieces: list[tuple[str, str]] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            pieces.append(("equal", "".join(old_words[i1:i2])))
            continue
        if i2 > i1:
            pieces.append(("delete", "".join(old_words[i1:i2])))
        if j2 > j1:
            pieces.append(("insert", "".join(new_words[j1:j2])))
    return pieces


def render_change(change: Change, plain: bool = False) -> Text:
    """Render *change* as its location line followed by the word diff.

    Plain rendering marks removed and added words as ``[-old-]{+new+}`` for
    output that cannot show colors.
    """
    text = Text(f"{change.path}:{change.line:,}\n")
    for kind, piece in word_diff(change.old, change.new):
        if plain:
            start, end = _MARKERS[kind]
            text.append(f"{start}{piece}{end}")
        else:
            text.append(piece, style=_STYLES[kind])
    return text


async def print_changes(queue: asyncio.Queue[Change | None], stream: TextIO | None = None) -> None:
    """Render queued changes until a ``None`` sentinel arrives.

    This task is the only writer of diff output, so blocks from different
    files never interleave.
    """
    console = Console(file=stream, highlight=False)
    plain = console.color_system is None or console.no_color
    while True:
        change = await queue.get()
        if change is None:
            break
        console.print(render_change(change, plain), soft_wrap=True)
        console.print()

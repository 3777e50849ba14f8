"""Year substitution and the owner-name filter shared by both file handlers."""

from __future__ import annotations

import re
from collections.abc import Iterable

YEAR_PATTERN = re.compile(r"\b\d{4}\b")


def replace_year(text: str, year: int) -> str:
    """Replace the rightmost four-digit run in *text* with *year*.

    Earlier years (e.g. the start of a ``2015-2023`` range) are left alone.
    Text without a four-digit run is returned unchanged.
    """
    matches = list(YEAR_PATTERN.finditer(text))
    if not matches:
        return text
    start, end = matches[-1].span()
    return f"{text[:start]}{year}{text[end:]}"


def is_allowed_to_edit(
    text: str,
    exclude_names: Iterable[str] = (),
    include_names: Iterable[str] = (),
) -> bool:
    """Return whether the copyright line *text* may be rewritten.

    Any excluded owner name forbids the edit, and at least one include name
    must appear. With no include names nothing is editable.
    """
    if any(name in text for name in exclude_names):
        return False
    return any(name in text for name in include_names)

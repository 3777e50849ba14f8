from __future__ import annotations

import asyncio
import codecs
import dataclasses
import logging
import re
from pathlib import Path

from copywriter.copyright import is_allowed_to_edit, replace_year
from copywriter.exceptions import CopywriterError
from copywriter.models import Change, FileResult, RunConfig

# [assembly: AssemblyCopyright("...")], optionally namespace-qualified and
# split across lines.
ASSEMBLY_COPYRIGHT_PATTERN = re.compile(
    r'(?P<prefix>\[\s*assembly\s*:\s*(?:System\s*\.\s*Reflection\s*\.\s*)?'
    r'AssemblyCopyright\s*\(\s*")'
    r"(?P<value>.*?)"
    r'(?P<suffix>"\s*\)\s*\])',
    re.DOTALL,
)

logger = logging.getLogger(__name__)

_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


def _detect_encoding(data: bytes) -> tuple[bytes, str]:
    for bom, codec in _BOMS:
        if data.startswith(bom):
            return bom, codec
    return b"", "utf-8"


def _displayable(text: str) -> str:
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def update_assembly_info(text: str, path: Path, config: RunConfig) -> tuple[str, list[Change]]:
    """Rewrite the year of every ``AssemblyCopyright`` attribute in *text*.

    Only the string literal changes; the tokens and whitespace around it are
    kept as they were. Line numbers refer to the line on which the
    attribute starts.
    """
    year = config.target_year
    changes: list[Change] = []

    def _replace(match: re.Match[str]) -> str:
        old_value = match.group("value")
        new_value = old_value
        if is_allowed_to_edit(old_value, config.exclude_names, config.include_names):
            new_value = replace_year(old_value, year)
        else:
            logger.debug("%s: not allowed to edit %r", path, old_value)
        replacement = match.group("prefix") + new_value + match.group("suffix")
        if new_value != old_value:
            line = text.count("\n", 0, match.start()) + 1
            changes.append(Change(path=path, line=line, old=match.group(0), new=replacement))
        return replacement

    new_text = ASSEMBLY_COPYRIGHT_PATTERN.sub(_replace, text)
    return new_text, changes


async def handle_assembly_info_file(
    path: Path, config: RunConfig, changes: asyncio.Queue[Change | None]
) -> FileResult:
    data = await asyncio.to_thread(path.read_bytes)
    bom, codec = _detect_encoding(data)
    # Legacy single-byte files are read as UTF-8 with undecodable bytes
    # smuggled through as surrogates, so they round-trip unchanged.
    errors = "surrogateescape" if codec == "utf-8" else "strict"
    try:
        text = data[len(bom) :].decode(codec, errors)
    except UnicodeDecodeError as exc:
        raise CopywriterError(f"{path}: {exc}") from exc
    new_text, file_changes = update_assembly_info(text, path, config)
    for change in file_changes:
        await changes.put(
            dataclasses.replace(change, old=_displayable(change.old), new=_displayable(change.new))
        )
    if file_changes:
        if config.dry_run:
            logger.info("Dry run, not writing %s", path)
        else:
            await asyncio.to_thread(path.write_bytes, bom + new_text.encode(codec, errors))
            logger.debug("Wrote %s", path)
    return FileResult(path=path, replacements=len(file_changes))

"""Rewrite ``<Copyright>`` elements in SDK-style ``.csproj`` files.

The document is never re-serialized. Expat reports the byte range of the
leading text node of every ``<Copyright>`` element, and only those ranges
are replaced, so the XML declaration (or its absence), byte order mark,
line endings, indentation and comments all survive untouched. Within a
changed node, entity and character references are written back as plain
(escaped) characters, so ``&#169;`` becomes ``©``.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from dataclasses import dataclass, field
from pathlib import Path
from xml.parsers import expat
from xml.sax.saxutils import escape

from copywriter.copyright import is_allowed_to_edit, replace_year
from copywriter.exceptions import ProjectFileError
from copywriter.models import Change, FileResult, RunConfig

COPYRIGHT_ELEMENT = "Copyright"
CDATA_OPEN = "<![CDATA["

logger = logging.getLogger(__name__)


@dataclass
class _TextNode:
    start: int
    line: int
    cdata: bool = False
    parts: list[str] = field(default_factory=list)
    end: int = -1

    @property
    def value(self) -> str:
        return "".join(self.parts)


class _CopyrightScanner:
    """Collect the leading text node of every ``<Copyright>`` element.

    An element whose first child is another element, a comment or a
    processing instruction, or which has no children at all, yields
    nothing. For CDATA nodes, ``start`` is the offset of ``<![CDATA[`` and
    ``end`` the offset of the closing ``]]>``.
    """

    def __init__(self) -> None:
        # With a namespace separator, elements in a namespace are reported
        # as "uri Copyright" and never match the bare name.
        self.parser = expat.ParserCreate(namespace_separator=" ")
        self.encoding: str | None = None
        self.nodes: list[_TextNode] = []
        self._awaiting_line: int | None = None
        self._current: _TextNode | None = None

        p = self.parser
        p.XmlDeclHandler = self._xml_decl
        p.StartElementHandler = self._start_element
        p.EndElementHandler = self._boundary
        p.CommentHandler = self._boundary
        p.ProcessingInstructionHandler = self._boundary
        p.CharacterDataHandler = self._character_data
        p.StartCdataSectionHandler = self._start_cdata
        p.EndCdataSectionHandler = self._end_cdata

    def scan(self, data: bytes) -> list[_TextNode]:
        self.parser.Parse(data, True)
        return self.nodes

    def _xml_decl(self, version: str, encoding: str | None, standalone: int) -> None:
        self.encoding = encoding

    def _start_element(self, name: str, attrs: dict[str, str]) -> None:
        self._boundary()
        if name == COPYRIGHT_ELEMENT:
            self._awaiting_line = self.parser.CurrentLineNumber

    def _boundary(self, *args: object) -> None:
        self._close_text()
        self._awaiting_line = None

    def _character_data(self, data: str) -> None:
        if self._current is not None:
            self._current.parts.append(data)
        elif self._awaiting_line is not None:
            self._current = _TextNode(
                start=self.parser.CurrentByteIndex,
                line=self._awaiting_line,
                parts=[data],
            )
            self._awaiting_line = None

    def _start_cdata(self) -> None:
        self._close_text()
        if self._awaiting_line is not None:
            self._current = _TextNode(
                start=self.parser.CurrentByteIndex,
                line=self._awaiting_line,
                cdata=True,
            )
            self._awaiting_line = None

    def _end_cdata(self) -> None:
        if self._current is not None and self._current.cdata:
            self._current.end = self.parser.CurrentByteIndex
            self.nodes.append(self._current)
            self._current = None

    def _close_text(self) -> None:
        if self._current is not None and not self._current.cdata:
            self._current.end = self.parser.CurrentByteIndex
            self.nodes.append(self._current)
            self._current = None


def _codec_for(data: bytes, declared: str | None) -> str:
    if data.startswith(codecs.BOM_UTF16_LE):
        return "utf-16-le"
    if data.startswith(codecs.BOM_UTF16_BE):
        return "utf-16-be"
    if declared and not declared.lower().startswith("utf-16"):
        return declared
    return "utf-8"


def update_project_file(
    data: bytes, path: Path, config: RunConfig
) -> tuple[bytes, list[Change]]:
    """Return the rewritten bytes of a project file and the changes made.

    When nothing changed, *data* is returned as is.
    """
    scanner = _CopyrightScanner()
    try:
        nodes = scanner.scan(data)
    except expat.ExpatError as exc:
        raise ProjectFileError(path, exc.lineno, expat.ErrorString(exc.code)) from exc

    codec = _codec_for(data, scanner.encoding)
    year = config.target_year
    changes: list[Change] = []
    pieces: list[bytes] = []
    position = 0
    for node in nodes:
        old = node.value
        if not is_allowed_to_edit(old, config.exclude_names, config.include_names):
            logger.debug("%s:%d: not allowed to edit %r", path, node.line, old)
            continue
        new = replace_year(old, year)
        if new == old:
            continue
        changes.append(Change(path=path, line=node.line, old=old, new=new))
        text = CDATA_OPEN + new if node.cdata else escape(new)
        pieces.append(data[position : node.start])
        pieces.append(text.encode(codec, "xmlcharrefreplace"))
        position = node.end

    if not changes:
        return data, changes
    pieces.append(data[position:])
    return b"".join(pieces), changes


async def handle_project_file(
    path: Path, config: RunConfig, changes: asyncio.Queue[Change | None]
) -> FileResult:
    data = await asyncio.to_thread(path.read_bytes)
    new_data, file_changes = update_project_file(data, path, config)
    for change in file_changes:
        await changes.put(change)
    if file_changes:
        if config.dry_run:
            logger.info("Dry run, not writing %s", path)
        else:
            await asyncio.to_thread(path.write_bytes, new_data)
            logger.debug("Wrote %s", path)
    return FileResult(path=path, replacements=len(file_changes))

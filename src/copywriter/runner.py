"""Run the handlers over every located file concurrently."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from copywriter.assembly_info import handle_assembly_info_file
from copywriter.diff import print_changes
from copywriter.locator import FileKind, classify, locate_files
from copywriter.models import Change, FileResult, RunConfig, RunTotals
from copywriter.project_file import handle_project_file

logger = logging.getLogger(__name__)


async def handle_file(
    path: Path, config: RunConfig, changes: asyncio.Queue[Change | None]
) -> FileResult:
    kind = classify(path)
    logger.debug("Handling %s as %s", path, kind)
    if kind is FileKind.PROJECT:
        return await handle_project_file(path, config, changes)
    if kind is FileKind.ASSEMBLY_INFO:
        return await handle_assembly_info_file(path, config, changes)
    return FileResult(path=path)


def summarize(results: Iterable[FileResult]) -> RunTotals:
    replacements = 0
    files_changed = 0
    for result in results:
        replacements += result.replacements
        if result.changed:
            files_changed += 1
    return RunTotals(replacements=replacements, files_changed=files_changed)


async def run(config: RunConfig, stream: TextIO | None = None) -> RunTotals:
    """Update every candidate file under ``config.root``.

    The first failing file aborts the run: remaining tasks are cancelled and
    the error propagates. Files written before that keep their new content.
    """
    paths = locate_files(config.root, config.max_depth, config.exclude_dirs)
    changes: asyncio.Queue[Change | None] = asyncio.Queue()
    printer = asyncio.create_task(print_changes(changes, stream))
    tasks = [asyncio.create_task(handle_file(path, config, changes)) for path in paths]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        for task in [*tasks, printer]:
            task.cancel()
        await asyncio.gather(*tasks, printer, return_exceptions=True)
        raise
    await changes.put(None)
    await printer
    return summarize(results)

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Iterable
from pathlib import Path

PROJECT_FILE_SUFFIX = ".csproj"
ASSEMBLY_INFO_NAME = "AssemblyInfo.cs"

logger = logging.getLogger(__name__)


class FileKind(enum.Enum):
    PROJECT = "project"
    ASSEMBLY_INFO = "assembly_info"


def classify(path: Path) -> FileKind | None:
    name = path.name.casefold()
    if name.endswith(PROJECT_FILE_SUFFIX.casefold()):
        return FileKind.PROJECT
    if name == ASSEMBLY_INFO_NAME.casefold():
        return FileKind.ASSEMBLY_INFO
    return None


def locate_files(
    root: Path,
    max_depth: int = 0,
    exclude_dirs: Iterable[str] = (),
) -> list[Path]:
    """Find project and assembly-info files under *root*.

    *max_depth* counts subdirectory levels below *root*; 0 only looks at
    *root* itself. Directories whose name matches one of *exclude_dirs*
    (case-insensitively) are not descended into. Directory symlinks are
    not followed.
    """
    excluded = {name.casefold() for name in exclude_dirs}
    results: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        depth = len(Path(dirpath).relative_to(root).parts)
        if depth >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = [d for d in dirnames if d.casefold() not in excluded]
        for name in filenames:
            path = Path(dirpath) / name
            if classify(path) is not None:
                results.append(path)
    results.sort(key=lambda p: p.as_posix())
    logger.debug("Found %d candidate files under %s", len(results), root)
    return results

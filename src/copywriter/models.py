from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class RunConfig:
    root: Path
    dry_run: bool = False
    max_depth: int = 0
    year: int | None = None
    exclude_dirs: frozenset[str] = field(default_factory=frozenset)
    exclude_names: frozenset[str] = field(default_factory=frozenset)
    include_names: frozenset[str] = field(default_factory=frozenset)

    @property
    def target_year(self) -> int:
        if self.year is not None:
            return self.year
        return datetime.now().year


@dataclass(frozen=True)
class Change:
    path: Path
    line: int  # 1-based
    old: str
    new: str


@dataclass(frozen=True)
class FileResult:
    path: Path
    replacements: int = 0

    @property
    def changed(self) -> bool:
        return self.replacements > 0


@dataclass(frozen=True)
class RunTotals:
    replacements: int
    files_changed: int

"""Lines-of-code counting for repositories.

The DataStore treats this module as a black box: give it a directory and
get back a `LineCount` whose `total` is stored as a Count row. Source files
are classified and measured with pygount.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from pygount.analysis import SourceAnalysis, SourceState

from .errors import CountError
from .global_config import DEFAULT_EXCLUDED_DIRS

logger = logging.getLogger(__name__)


@dataclass
class LineCount:
    """Code lines per language for one directory tree."""

    languages: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.languages.values())

    def add(self, language: str, code_lines: int) -> None:
        self.languages[language] = self.languages.get(language, 0) + code_lines


def iter_source_files(root: Path, excluded: Iterable[str] = DEFAULT_EXCLUDED_DIRS) -> Iterator[Path]:
    """Yield every file below `root`, never descending into excluded directory names."""
    skip = set(excluded)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip)
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def count_lines(path: Path | str, excluded: Iterable[str] = DEFAULT_EXCLUDED_DIRS) -> LineCount:
    """Count code lines below `path`, grouped by language.

    Files pygount cannot classify (binary, empty, unknown language, ...) are
    skipped. Comment and blank lines are not counted.

    Args:
        path: Directory (or single file) to measure.
        excluded: Directory names to skip anywhere in the tree.

    Returns:
        LineCount with a per-language breakdown.

    Raises:
        CountError: If `path` does not exist.

    Logs:
        - DEBUG: "Counted {n} files under {path}" when done.
    """
    root = Path(path).expanduser()
    if not root.exists():
        raise CountError(f"cannot count lines, path does not exist: {root}")

    files = [root] if root.is_file() else list(iter_source_files(root, excluded))
    result = LineCount()
    counted = 0
    for source in files:
        analysis = SourceAnalysis.from_file(str(source), root.name)
        if analysis.state != SourceState.analyzed:
            continue
        result.add(analysis.language, analysis.code_count)
        counted += 1

    logger.debug("Counted %d files under %s", counted, root)
    return result

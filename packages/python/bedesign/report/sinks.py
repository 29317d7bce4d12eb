"""
Output sinks for generated documents and figures.

The pipeline never opens files itself; it hands text to a sink. FileSink
writes below a root directory, MemorySink keeps everything in memory.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union


class OutputSink(ABC):
    """Destination of text documents and figure directories."""

    @abstractmethod
    def write_text(self, relpath: Union[str, Path], text: str) -> Path:
        """Store ``text`` under ``relpath`` and return its location."""

    @abstractmethod
    def directory(self, relpath: Union[str, Path]) -> Optional[Path]:
        """
        Real directory for binary artifacts (figures), created on demand.

        Returns None when the sink cannot hold files; figures are then skipped.
        """


class FileSink(OutputSink):
    """
    Write documents below ``root``.

    Example:
        >>> sink = FileSink("out")
        >>> sink.write_text("docs/report.md", "# Report")
        PosixPath('out/docs/report.md')
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def write_text(self, relpath: Union[str, Path], text: str) -> Path:
        path = self.root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def directory(self, relpath: Union[str, Path]) -> Optional[Path]:
        path = self.root / relpath
        path.mkdir(parents=True, exist_ok=True)
        return path


class MemorySink(OutputSink):
    """
    Keep documents in ``documents`` keyed by relative path.

    Args:
        figures_root: Optional real directory for figures; without it
            figures are not rendered
    """

    def __init__(self, figures_root: Optional[Union[str, Path]] = None):
        self.documents: Dict[str, str] = {}
        self.figures_root = Path(figures_root) if figures_root is not None else None

    def write_text(self, relpath: Union[str, Path], text: str) -> Path:
        key = Path(relpath).as_posix()
        self.documents[key] = text
        return Path(key)

    def directory(self, relpath: Union[str, Path]) -> Optional[Path]:
        if self.figures_root is None:
            return None
        path = self.figures_root / relpath
        path.mkdir(parents=True, exist_ok=True)
        return path

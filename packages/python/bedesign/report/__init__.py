"""
bedesign Report Module

Writing of project results:
- Console-style text blocks (save_block, try_run)
- Markdown questions mapping and report
- Output sinks (filesystem or in-memory)

Example:
    >>> from bedesign.report import MemorySink, save_block
    >>> sink = MemorySink()
    >>> sink.write_text("outputs/run.txt", "DONE.")
"""

from .blocks import (
    RULE,
    render,
    save_block,
    try_run,
)

from .documents import (
    md_table,
    build_questions_md,
    build_report_md,
)

from .sinks import (
    OutputSink,
    FileSink,
    MemorySink,
)

__all__ = [
    # Blocks
    "RULE",
    "render",
    "save_block",
    "try_run",
    # Documents
    "md_table",
    "build_questions_md",
    "build_report_md",
    # Sinks
    "OutputSink",
    "FileSink",
    "MemorySink",
]

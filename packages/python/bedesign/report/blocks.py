"""
Console-style text blocks for the outputs file.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import traceback
from enum import Enum
from typing import Any, Callable, Optional, TextIO, Tuple, TypeVar

import pandas as pd

logger = logging.getLogger(__name__)

RULE = "=" * 110
_MAX_LIST_ITEMS = 12

T = TypeVar("T")


def _format_value(value: Any) -> str:
    if value is None:
        return "missing"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return "NaN" if math.isnan(value) else f"{value:.6g}"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        inner = ", ".join(f"{f.name}={_format_value(getattr(value, f.name))}"
                          for f in dataclasses.fields(value) if f.repr)
        return f"{type(value).__name__}({inner})"
    if isinstance(value, (list, tuple)):
        if len(value) > _MAX_LIST_ITEMS:
            return f"[{len(value)} items]"
        items = ", ".join(_format_value(v) for v in value)
        return f"({items})" if isinstance(value, tuple) else f"[{items}]"
    return str(value)


def render(obj: Any) -> str:
    """
    Plain-text rendering of a result object.

    DataFrames print as tables, dataclasses and dicts as aligned
    ``key = value`` lines, strings as themselves.
    """
    if isinstance(obj, pd.DataFrame):
        return obj.to_string(index=False)
    if isinstance(obj, str):
        return obj
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        pairs = [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj) if f.repr]
        return _render_pairs(type(obj).__name__, pairs)
    if isinstance(obj, dict):
        return _render_pairs(None, list(obj.items()))
    if isinstance(obj, (list, tuple)):
        return ", ".join(_format_value(v) for v in obj)
    return _format_value(obj)


def _render_pairs(header: Optional[str], pairs) -> str:
    width = max((len(str(k)) for k, _ in pairs), default=0)
    lines = [header] if header else []
    lines += [f"  {str(k):<{width}} = {_format_value(v)}" for k, v in pairs]
    return "\n".join(lines)


def save_block(io: TextIO, title: str, obj: Any) -> None:
    """
    Write a titled block framed by 110-character rules.

    Example:
        >>> buf = io.StringIO()
        >>> save_block(buf, "Detected dataset names", {"parallel": "FSL2015_5"})
    """
    io.write(f"\n{RULE}\n{title}\n{RULE}\n\n")
    io.write(render(obj))
    io.write("\n")


def try_run(io: TextIO, title: str, fn: Callable[[], T]) -> Tuple[bool, Optional[T]]:
    """
    Run ``fn`` and write its result as a block.

    A failure is written as a ``[ERROR]`` block with the traceback and logged;
    it does not propagate, so the remaining tasks of the run still execute.

    Returns:
        (True, result) on success, (False, None) on failure
    """
    try:
        res = fn()
    except Exception as err:
        logger.error("%s failed: %s", title, err)
        io.write(f"\n{RULE}\n{title}  [ERROR]\n{RULE}\n\n")
        io.write("".join(traceback.format_exception(type(err), err, err.__traceback__)))
        return False, None
    save_block(io, title, res)
    return True, res

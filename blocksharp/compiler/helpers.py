import math
from typing import Any, Iterable, List, Optional

from .constants import COMMENT_PREFIX, INDENT, SCOPE_OUT_MARKER


def paren(code: str) -> str:
    return f"({code})"


def escape_cs_string(value: Any) -> str:
    text = "" if value is None else str(value)
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", "\\r")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )


def cs_string_literal(value: Any) -> str:
    return f'"{escape_cs_string(value)}"'


def format_int_literal(value: Any) -> str:
    # Number fields may hold floats or numeric strings; truncate and wrap to int32.
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0"
    if not math.isfinite(number):
        return "0"
    wrapped = (int(number) + 2**31) % 2**32 - 2**31
    return str(wrapped)


def format_float_literal(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0f"
    if not math.isfinite(number):
        return "0f"
    if number.is_integer() and abs(number) < 1e16:
        return f"{int(number)}f"
    return f"{number!r}f"


def format_bool_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "true" if value == "true" else "false"


def indent_lines(lines: Iterable[str], level: int, indent: str = INDENT) -> List[str]:
    pad = indent * level
    return [pad + line if line else line for line in lines]


def comment_out(lines: Iterable[str], reason: Optional[str] = SCOPE_OUT_MARKER) -> List[str]:
    out = []
    if reason:
        out.append(COMMENT_PREFIX + reason)
    out.extend(COMMENT_PREFIX + line for line in lines)
    return out


def find_scope_violations(source: str) -> List[int]:
    """Return 1-based line numbers of scope-out markers in generated code."""
    marker = COMMENT_PREFIX + SCOPE_OUT_MARKER
    return [
        line_no
        for line_no, line in enumerate(source.splitlines(), start=1)
        if line.rstrip().endswith(marker)
    ]

from __future__ import annotations

import re
import string
from typing import List, Optional


# RL1.6 line boundaries: CRLF, LF, CR, NEL, LS, PS.
_LINE_BOUNDARY_RE = re.compile(r"\r\n|[\n\r\u0085\u2028\u2029]")

_TRIM_CHARS = string.whitespace + "'\""


def split_lines(text: Optional[str]) -> List[str]:
    """Split text on every Unicode line boundary.

    Empty lines are kept; classification treats them as no-ops.
    """
    if not text:
        return []
    return _LINE_BOUNDARY_RE.split(text)


def clean_line(line: Optional[str]) -> str:
    return (line or "").strip(_TRIM_CHARS)


def is_comment_or_blank(line: str) -> bool:
    return not line or line.startswith("!")

from __future__ import annotations

import os
import re


class GenpacError(Exception):
    """Fatal condition in one of the collaborators around the compiler."""


class ConfigError(GenpacError):
    pass


class FetchError(GenpacError):
    pass


class OutputError(GenpacError):
    pass


def expose_internal_errors() -> bool:
    return (os.environ.get("EXPOSE_INTERNAL_ERRORS") or "").strip().lower() in (
        "1",
        "true",
        "yes",
        "on",
    )


def clean_text(text: str, *, max_len: int = 200) -> str:
    s = (text or "").replace("\r", " ").replace("\n", " ").strip()
    s = "".join(ch if (ch >= " " and ch != "\x7f") else " " for ch in s)
    s = re.sub(r"\s+", " ", s).strip()
    if max_len and len(s) > max_len:
        s = s[: max_len - 3].rstrip() + "..."
    return s


def public_error_message(
    e: Exception,
    *,
    default: str = "PAC generation failed. Check server logs for details.",
    max_len: int = 200,
) -> str:
    """Return a message that is safe to show to PAC clients.

    GenpacError and ValueError messages describe configuration or source
    problems and are shown. Anything else is hidden unless
    EXPOSE_INTERNAL_ERRORS is set.
    """
    if expose_internal_errors():
        detail = clean_text(f"{type(e).__name__}: {e}", max_len=max_len)
        return detail or default

    if isinstance(e, (GenpacError, ValueError)):
        msg = clean_text(str(e), max_len=max_len)
        return msg or default

    return default

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from genpac.rules.lines import split_lines


logger = logging.getLogger(__name__)


def load_user_rules(inline: Optional[Iterable[str]] = None, files: Optional[Iterable[str]] = None) -> List[str]:
    """Inline rules first, then the lines of each rule file in order.

    Unreadable files are logged and skipped.
    """
    rules: List[str] = []
    for r in inline or []:
        # An inline value may itself carry several lines.
        rules.extend(split_lines(r))

    for path in files or []:
        if not path:
            continue
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                rules.extend(split_lines(f.read()))
        except OSError as e:
            logger.error("Failed to read user rule file %s: %s", path, e)
            continue

    logger.info("Loaded %d user rule lines", len(rules))
    return rules

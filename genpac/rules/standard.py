from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from genpac.rules.lines import clean_line, is_comment_or_blank


# gfwlist / ABP rule syntax, in detection order:
# - '!' starts a comment
# - '@@' marks an exception (connect directly)
# - '/.../' is a literal regex body
# - any '^' means wildcard syntax with the separator placeholder
# - '||' anchors to a host right after the scheme
# - a leading or trailing '|' anchors the start or end of the URL
# - everything else is a plain substring glob for shExpMatch


_REGEX_META_RE = re.compile(r"([\\+|{}\[\]()^$.#])")

# Full-width question mark, not the ASCII one.
_FULLWIDTH_QUESTION = "\uff1f"

SEPARATOR_CLASS = r"(?:[^\w\-.%\u0080-\uFFFF]|$)"
DOMAIN_ANCHOR_PREFIX = r"^[\w\-]+:\/+(?!\/)(?:[^\/]+\.)?"


class Bucket(str, Enum):
    DIRECT = "direct"
    PROXY = "proxy"


class Form(str, Enum):
    WILDCARD = "wildcard"
    REGEXP = "regexp"


@dataclass(frozen=True)
class ClassifiedPattern:
    bucket: Bucket
    form: Form
    pattern: str


@dataclass
class CompiledRuleSet:
    """Patterns grouped by (bucket, form), in input order."""

    direct_regexp: List[str] = field(default_factory=list)
    direct_wildcard: List[str] = field(default_factory=list)
    proxy_regexp: List[str] = field(default_factory=list)
    proxy_wildcard: List[str] = field(default_factory=list)

    def add(self, item: ClassifiedPattern) -> None:
        if item.bucket is Bucket.DIRECT:
            target = self.direct_regexp if item.form is Form.REGEXP else self.direct_wildcard
        else:
            target = self.proxy_regexp if item.form is Form.REGEXP else self.proxy_wildcard
        target.append(item.pattern)

    def as_lists(self) -> List[List[str]]:
        # Evaluation order of the PAC matcher.
        return [
            list(self.direct_regexp),
            list(self.direct_wildcard),
            list(self.proxy_regexp),
            list(self.proxy_wildcard),
        ]

    def __len__(self) -> int:
        return (
            len(self.direct_regexp)
            + len(self.direct_wildcard)
            + len(self.proxy_regexp)
            + len(self.proxy_wildcard)
        )


def wildcard_to_regexp(pattern: str) -> str:
    """Translate a glob into an unanchored regex source.

    Metacharacters are escaped first, then '*' becomes '.*' and the
    full-width U+FF1F becomes '.'.
    """
    p = _REGEX_META_RE.sub(r"\\\1", pattern or "")
    p = p.replace("*", ".*")
    return p.replace(_FULLWIDTH_QUESTION, ".")


def classify_rule(line: Optional[str]) -> Optional[ClassifiedPattern]:
    s = clean_line(line)
    if is_comment_or_blank(s):
        return None

    bucket = Bucket.PROXY
    if s.startswith("@@"):
        s = s[2:]
        bucket = Bucket.DIRECT

    form = Form.REGEXP
    if s.startswith("/") and s.endswith("/"):
        s = s[1:-1]
    elif "^" in s:
        s = wildcard_to_regexp(s)
        s = s.replace(r"\^", SEPARATOR_CLASS)
    elif s.startswith("||"):
        s = DOMAIN_ANCHOR_PREFIX + wildcard_to_regexp(s[2:])
    elif s.startswith("|") or s.endswith("|"):
        s = wildcard_to_regexp(s)
        if s.startswith(r"\|"):
            s = "^" + s[2:]
        if s.endswith(r"\|"):
            s = s[:-2] + "$"
    else:
        form = Form.WILDCARD
        s = "*" + s.strip("*") + "*"

    return ClassifiedPattern(bucket=bucket, form=form, pattern=s)


def compile_standard(lines: Iterable[str]) -> CompiledRuleSet:
    """Classify every line in order. Nothing is deduplicated or sorted."""
    out = CompiledRuleSet()
    for raw in lines:
        item = classify_rule(raw)
        if item is not None:
            out.add(item)
    return out

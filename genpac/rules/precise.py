from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Set

from genpac.rules.lines import clean_line, is_comment_or_blank
from genpac.rules.suffixes import SuffixResolver
from genpac.rules.surmise import surmise_domain, surmise_rule_domains


logger = logging.getLogger(__name__)


@dataclass
class DomainBuckets:
    """Unsorted domain sets gathered from one rule source."""

    direct: Set[str] = field(default_factory=set)
    proxy: Set[str] = field(default_factory=set)
    skipped: int = 0


@dataclass(frozen=True)
class CompiledDomainSet:
    direct: List[str]
    proxy: List[str]

    def as_lists(self) -> List[List[str]]:
        return [list(self.direct), list(self.proxy)]


def collect_domains(lines: Iterable[str], resolver: SuffixResolver) -> DomainBuckets:
    out = DomainBuckets()
    for raw in lines:
        s = clean_line(raw)
        if is_comment_or_blank(s):
            continue

        if s.startswith("@@"):
            d = surmise_domain(s[2:].lstrip("@|."), resolver)
            if d:
                out.direct.add(d)
            else:
                out.skipped += 1
            continue

        found = surmise_rule_domains(s, resolver)
        if not found:
            out.skipped += 1
        out.proxy.update(found)
    return out


def compile_precise(
    user_lines: Iterable[str],
    gfwlist_lines: Iterable[str],
    resolver: SuffixResolver,
) -> CompiledDomainSet:
    """Pool both sources into two sorted domain lists.

    Source precedence is not kept: the output is two flat sets, and any domain
    present in both is kept only on the proxy side.
    """
    user = collect_domains(user_lines, resolver)
    gfwlist = collect_domains(gfwlist_lines, resolver)

    proxy = user.proxy | gfwlist.proxy
    direct = (user.direct | gfwlist.direct) - proxy

    logger.debug(
        "precise: direct=%d proxy=%d skipped=%d",
        len(direct),
        len(proxy),
        user.skipped + gfwlist.skipped,
    )
    return CompiledDomainSet(direct=sorted(direct), proxy=sorted(proxy))

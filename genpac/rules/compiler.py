from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Union

from genpac.rules.precise import CompiledDomainSet, compile_precise
from genpac.rules.standard import CompiledRuleSet, compile_standard
from genpac.rules.suffixes import SuffixResolver, get_default_resolver


@dataclass(frozen=True)
class StandardResult:
    user: CompiledRuleSet
    gfwlist: CompiledRuleSet

    precise = False

    def as_lists(self) -> List[Any]:
        # User rules come first so the PAC evaluates them first.
        return [self.user.as_lists(), self.gfwlist.as_lists()]


@dataclass(frozen=True)
class PreciseResult:
    domains: CompiledDomainSet

    precise = True

    @property
    def direct(self) -> List[str]:
        return self.domains.direct

    @property
    def proxy(self) -> List[str]:
        return self.domains.proxy

    def as_lists(self) -> List[Any]:
        return self.domains.as_lists()


CompileResult = Union[StandardResult, PreciseResult]


def compile_rules(
    user_lines: Iterable[str],
    gfwlist_lines: Iterable[str],
    *,
    precise: bool = False,
    resolver: Optional[SuffixResolver] = None,
) -> CompileResult:
    if precise:
        return PreciseResult(
            domains=compile_precise(user_lines, gfwlist_lines, resolver or get_default_resolver())
        )
    return StandardResult(user=compile_standard(user_lines), gfwlist=compile_standard(gfwlist_lines))


def serialize(result: CompileResult, *, compress: bool = False) -> str:
    data = result.as_lists()
    if compress:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(data, ensure_ascii=False, indent=4)

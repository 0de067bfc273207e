"""End-to-end PAC generation: sources in, rendered script out.

Glue between the collaborators (list fetch, user rules, rendering) and the
compiler core. Shared by the command line tool and the HTTP service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from genpac.rules.compiler import CompileResult, compile_rules
from genpac.rules.suffixes import SuffixResolver
from genpac.services.config import Settings
from genpac.services.gfwlist_store import GfwlistPayload, GfwlistStore
from genpac.services.pac_render import PacMeta, generated_stamp, render_pac
from genpac.services.user_rules import load_user_rules


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedPac:
    content: str
    meta: PacMeta
    result: CompileResult


def make_gfwlist_store(settings: Settings) -> GfwlistStore:
    return GfwlistStore(
        url=settings.gfwlist_url,
        local_path=settings.gfwlist_local,
        proxy=settings.gfwlist_proxy,
        update_local=settings.update_gfwlist_local,
    )


def generate(
    settings: Settings,
    *,
    store: Optional[GfwlistStore] = None,
    resolver: Optional[SuffixResolver] = None,
) -> GeneratedPac:
    logger.info(
        "Generating PAC: proxy=%s gfwlist=%s precise=%s compress=%s base64=%s",
        settings.pac_proxy,
        "disabled" if settings.gfwlist_disabled else (settings.gfwlist_url or settings.gfwlist_local),
        settings.precise,
        settings.compress,
        settings.base64,
    )

    if settings.gfwlist_disabled:
        gfwlist = GfwlistPayload(lines=[], modified="", source="disabled")
    else:
        gfwlist = (store or make_gfwlist_store(settings)).fetch()

    user_lines = load_user_rules(settings.user_rules, settings.user_rule_files)
    result = compile_rules(user_lines, gfwlist.lines, precise=settings.precise, resolver=resolver)

    meta = PacMeta(
        proxy=settings.pac_proxy,
        modified=gfwlist.modified,
        gfwlist_from=gfwlist.source,
        generated=generated_stamp(),
    )
    content = render_pac(result, meta, compress=settings.compress, base64_wrap=settings.base64)
    return GeneratedPac(content=content, meta=meta, result=result)

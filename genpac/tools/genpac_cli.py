#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from genpac import __version__
from genpac.services.config import DEFAULT_GFWLIST_URL, load_settings
from genpac.services.errors import GenpacError
from genpac.services.generator import generate
from genpac.services.pac_render import write_output


logger = logging.getLogger("genpac")


def _bool_flag(ap: argparse.ArgumentParser, name: str, help_text: str) -> None:
    # Tri-state so an absent flag does not override the config file.
    ap.add_argument(f"--{name}", dest=name.replace("-", "_"), action="store_const", const=True, default=None, help=help_text)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="genpac",
        description="Generate a proxy auto-config (PAC) file from gfwlist and user rules",
    )
    ap.add_argument("-p", "--proxy", default=None, help='PAC proxy string, e.g. "SOCKS5 127.0.0.1:1080; SOCKS 127.0.0.1:1080"')
    ap.add_argument("-o", "--output", default=None, help="Output file (default: standard output)")
    ap.add_argument("--gfwlist-url", default=None, help=f"gfwlist URL (default: {DEFAULT_GFWLIST_URL})")
    ap.add_argument("--gfwlist-proxy", default=None, help='Proxy used to fetch gfwlist, e.g. "PROXY 127.0.0.1:8080"')
    ap.add_argument("--gfwlist-local", default=None, help="Local gfwlist copy used when the download fails")
    ap.add_argument(
        "--no-update-gfwlist-local",
        dest="update_gfwlist_local",
        action="store_const",
        const=False,
        default=None,
        help="Do not refresh the local gfwlist copy after a successful download",
    )
    _bool_flag(ap, "gfwlist-disabled", "Ignore gfwlist and use user rules only")
    ap.add_argument("--user-rule", dest="user_rules", action="append", default=None, help="Inline user rule (repeatable)")
    ap.add_argument("--user-rule-from", dest="user_rule_files", action="append", default=None, help="User rule file (repeatable)")
    _bool_flag(ap, "compress", "Compact rules and use the minified template")
    _bool_flag(ap, "base64", "Wrap the PAC in a base64 envelope")
    _bool_flag(ap, "precise", "Compile rules to registrable domains instead of patterns")
    ap.add_argument("-c", "--config-from", default=None, help="INI config file with a [config] section")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


_OVERRIDE_KEYS = (
    "proxy",
    "output",
    "gfwlist_url",
    "gfwlist_proxy",
    "gfwlist_local",
    "update_gfwlist_local",
    "gfwlist_disabled",
    "user_rules",
    "user_rule_files",
    "compress",
    "base64",
    "precise",
)


def main(argv: Optional[List[str]] = None) -> int:
    ns = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.INFO,
        format="[genpac] %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    overrides: Dict[str, Any] = {k: getattr(ns, k) for k in _OVERRIDE_KEYS}
    try:
        settings = load_settings(config_from=ns.config_from, overrides=overrides)
        pac = generate(settings)
        write_output(pac.content, settings.output)
    except GenpacError as e:
        logger.error("%s", e)
        return 1

    if settings.precise:
        logger.info(
            "compiled: direct_domains=%d proxy_domains=%d",
            len(pac.result.direct),
            len(pac.result.proxy),
        )
    else:
        logger.info(
            "compiled: user_rules=%d gfwlist_rules=%d",
            len(pac.result.user),
            len(pac.result.gfwlist),
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

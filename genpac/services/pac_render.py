from __future__ import annotations

import base64
import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined

from genpac import __version__
from genpac.rules.compiler import CompileResult, serialize
from genpac.services.errors import OutputError


logger = logging.getLogger(__name__)

PAC_MIMETYPE = "application/x-ns-proxy-autoconfig"

_env: Optional[Environment] = None


def _environment() -> Environment:
    global _env
    if _env is None:
        # Output is JavaScript, not HTML.
        _env = Environment(
            loader=PackageLoader("genpac", "templates"),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
    return _env


@dataclass(frozen=True)
class PacMeta:
    proxy: str = "DIRECT"
    modified: str = ""
    gfwlist_from: str = ""
    generated: str = ""
    version: str = __version__


def generated_stamp() -> str:
    return time.strftime("%a, %d %b %Y %H:%M:%S %z")


def template_name(*, precise: bool, compress: bool) -> str:
    if precise:
        return "pac_precise.js.j2"
    return "pac.min.js.j2" if compress else "pac.js.j2"


def render_pac(result: CompileResult, meta: PacMeta, *, compress: bool = False, base64_wrap: bool = False) -> str:
    generated = meta.generated or generated_stamp()
    tpl = _environment().get_template(template_name(precise=result.precise, compress=compress))
    content = tpl.render(
        version=meta.version,
        generated=generated,
        modified=meta.modified,
        gfwlist_from=meta.gfwlist_from,
        proxy=meta.proxy or "DIRECT",
        rules=serialize(result, compress=compress),
    )
    if not base64_wrap:
        return content

    logger.warning("Some browsers do not support base64 encoded PAC files.")
    payload = base64.b64encode(content.encode("utf-8")).decode("ascii")
    return _environment().get_template("pac_base64.js.j2").render(version=meta.version, payload=payload)


def write_output(content: str, path: str = "") -> None:
    """Write the PAC to path, or to stdout when path is empty."""
    if not path:
        sys.stdout.write(content)
        if not content.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()
        return

    tmp = path + ".tmp"
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(tmp, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.replace(tmp, path)
    except OSError as e:
        try:
            if os.path.exists(tmp):
                os.unlink(tmp)
        except OSError:
            pass
        raise OutputError(f"Failed to write PAC file {path}: {e}") from e
    logger.info("PAC file written: %s", path)

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Optional

from flask import Flask, jsonify

from genpac.services.config import settings_from_env
from genpac.services.errors import public_error_message
from genpac.services.generator import GeneratedPac, generate
from genpac.services.pac_render import PAC_MIMETYPE


logger = logging.getLogger(__name__)

app = Flask(__name__)

# Generating a PAC means downloading gfwlist; keep the last result around.
_CACHE_LOCK = threading.Lock()
_CACHE_TS = 0.0
_CACHE_VALUE: Optional[GeneratedPac] = None


def _cache_ttl_seconds() -> int:
    try:
        return max(0, int((os.environ.get("GENPAC_CACHE_TTL") or "300").strip()))
    except ValueError:
        return 300


def get_pac() -> GeneratedPac:
    global _CACHE_TS, _CACHE_VALUE
    ttl = _cache_ttl_seconds()
    now_mono = time.monotonic()
    with _CACHE_LOCK:
        if _CACHE_VALUE is not None and (now_mono - _CACHE_TS) < float(ttl):
            return _CACHE_VALUE

        pac = generate(settings_from_env())
        _CACHE_VALUE = pac
        _CACHE_TS = time.monotonic()
        return pac


def _pac_response(filename: str):
    try:
        pac = get_pac()
    except Exception as e:
        logger.exception("PAC generation failed")
        return app.response_class(public_error_message(e), status=502, mimetype="text/plain")

    resp = app.response_class(pac.content, mimetype=PAC_MIMETYPE)
    resp.headers["Content-Disposition"] = f'inline; filename="{filename}"'
    if pac.meta.modified:
        resp.headers["X-Gfwlist-Last-Modified"] = pac.meta.modified
    return resp


@app.route("/proxy.pac", methods=["GET"])
def proxy_pac():
    return _pac_response("proxy.pac")


@app.route("/wpad.dat", methods=["GET"])
def wpad_dat():
    # WPAD convention: clients request http://wpad.<domain>/wpad.dat
    return _pac_response("wpad.dat")


@app.route("/healthz", methods=["GET"])
def health():
    return jsonify({"ok": True})

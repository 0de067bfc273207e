"""Reduce filter rules to registrable domains.

Rules are not URLs: they carry globs, anchors, escaped regex bodies and
alternation groups. Each rule is first stripped down by a fixed list of
textual rewrite steps, then a host is pulled out of what remains and reduced
to its registrable domain (eTLD+1) by a SuffixResolver. Any failure along the
way yields None rather than an exception.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple
from urllib.parse import unquote, urlparse

from genpac.rules.suffixes import SuffixResolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteStep:
    name: str
    pattern: Pattern[str]
    replacement: str

    def apply(self, s: str) -> str:
        return self.pattern.sub(self.replacement, s)


# Applied in order, only to rules containing '*'.
ASTERISK_STEPS: Tuple[RewriteStep, ...] = (
    RewriteStep("trim-edges", re.compile(r"^\*+|\*+$"), ""),
    RewriteStep("path-segment-glob", re.compile(r"/[a-zA-Z0-9]*\*\."), "/"),
    RewriteStep("glob-word", re.compile(r"\*[a-zA-Z0-9_%]+"), ""),
    RewriteStep("leading-word-glob", re.compile(r"^[a-zA-Z0-9_%]+\*"), ""),
)

# Applied to every rule after the asterisk steps.
ANCHOR_STEPS: Tuple[RewriteStep, ...] = (
    RewriteStep("separator", re.compile(r"\^"), "/"),
    RewriteStep("end-anchor", re.compile(r"\|+$"), ""),
    RewriteStep("leading-dots", re.compile(r"^\.+"), ""),
)

_IPV4_RE = re.compile(r"^\d{1,3}(?:\.\d{1,3}){3}$")

# name.(alt1|alt2|...) as found in gfwlist regex rules.
_ALTERNATION_RE = re.compile(r"([a-z0-9][a-z0-9\-]*\.)\(([^()]+)\)", re.IGNORECASE)

# First dotted host inside a regex body, plus whatever follows it.
_REGEX_HOST_HINT_RE = re.compile(r"(?:[a-z0-9\-]+\.)+[a-z0-9\-]+.*", re.IGNORECASE)

# Resolved domains must look like hostnames.
_DOMAIN_CHARS_RE = re.compile(r"^[\w\-.]+$")


def clear_decoration(rule: str) -> str:
    s = rule or ""
    if "*" in s:
        for step in ASTERISK_STEPS:
            s = step.apply(s)
    for step in ANCHOR_STEPS:
        s = step.apply(s)
    return s


def _hostname(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def extract_host(rule: str) -> str:
    """Pull a host-like string out of a decoration-free rule. '' if none."""
    s = rule or ""
    if "%2f" in s.lower():
        s = unquote(s)

    if s.startswith("http:") or s.startswith("https:"):
        return _hostname(s)

    slash = s.find("/")
    if slash >= 0:
        paren = s.find("(")
        if 0 <= paren < slash:
            return s[:slash]
        if "*/" in s:
            return s[:slash]
        if s.startswith("//"):
            return _hostname("http:" + s)
        return _hostname("http://" + s)

    if "." in s:
        return s
    return ""


def _normalize_host(host: str) -> str:
    h = (host or "").strip().strip("*").lower()
    # Drop a port unless this is a bracketed IPv6 literal.
    if ":" in h and not h.startswith("["):
        h = h.split(":", 1)[0]
    return h.strip(".")


def resolve_domain(host: str, resolver: SuffixResolver) -> Optional[str]:
    h = _normalize_host(host)
    if not h or _IPV4_RE.match(h):
        return None
    try:
        domain = resolver.registrable_domain(h)
    except Exception:
        logger.debug("suffix lookup failed for %r", h, exc_info=True)
        return None
    if not domain or "." not in domain or domain.endswith("."):
        return None
    domain = domain.lower()
    if not _DOMAIN_CHARS_RE.match(domain):
        return None
    return domain


def surmise_domain(rule: str, resolver: SuffixResolver) -> Optional[str]:
    """Best-effort registrable domain for a single rule body."""
    try:
        host = extract_host(clear_decoration(rule))
    except Exception:
        logger.debug("host extraction failed for %r", rule, exc_info=True)
        return None
    if not host:
        return None
    return resolve_domain(host, resolver)


def expand_alternation(rule: str) -> List[str]:
    """Expand 'name.(a|b|c)' into ['name.a', 'name.b', 'name.c']."""
    m = _ALTERNATION_RE.search(rule or "")
    if not m:
        return []
    prefix = m.group(1)
    return [prefix + alt for alt in m.group(2).split("|") if alt]


def _unescape_regex_body(rule: str) -> str:
    s = rule
    if len(s) >= 2 and s.startswith("/") and s.endswith("/"):
        s = s[1:-1]
    return s.replace(r"\/", "/").replace(r"\.", ".")


def surmise_rule_domains(rule: str, resolver: SuffixResolver) -> List[str]:
    """Domains implied by one blocking rule, in discovery order.

    Regex rules and rules with alternation groups may yield several domains;
    everything else yields at most one.
    """
    s = rule or ""
    is_regexp = s.startswith("/") or ".*" in s
    if is_regexp:
        s = _unescape_regex_body(s)
    else:
        s = s.lstrip("|")

    out: List[str] = []
    for candidate in expand_alternation(s):
        d = surmise_domain(candidate, resolver)
        if d and d not in out:
            out.append(d)
    if out:
        return out

    if is_regexp:
        m = _REGEX_HOST_HINT_RE.search(s)
        if not m:
            return []
        s = m.group(0)

    d = surmise_domain(s, resolver)
    return [d] if d else []

"""Public-suffix lookups used to reduce hosts to registrable domains.

The resolver is passed in rather than looked up globally so that tests can
supply a small synthetic table.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional, Protocol, Set


class SuffixResolver(Protocol):
    def registrable_domain(self, host: str) -> Optional[str]:
        ...


class TldextractResolver:
    """Resolver backed by tldextract's bundled public-suffix snapshot.

    Runs fully offline: no list download and no disk cache.
    """

    def __init__(self, include_private: bool = False, extra_suffixes: Iterable[str] = ()):
        import tldextract

        self._extract = tldextract.TLDExtract(
            cache_dir=None,
            suffix_list_urls=(),
            fallback_to_snapshot=True,
            include_psl_private_domains=include_private,
            extra_suffixes=tuple(extra_suffixes),
        )

    def registrable_domain(self, host: str) -> Optional[str]:
        h = (host or "").strip().lower()
        if not h:
            return None
        ext = self._extract(h)
        if not ext.domain or not ext.suffix:
            return None
        return f"{ext.domain}.{ext.suffix}"


class SuffixTableResolver:
    """Resolver over an in-memory suffix table.

    Understands plain suffixes, '*.' wildcard rules and '!' exception rules.
    The longest matching rule wins and hosts matching no rule resolve to None.
    """

    def __init__(self, suffixes: Iterable[str]):
        self._plain: Set[str] = set()
        self._wildcard_parents: Set[str] = set()
        self._exceptions: Set[str] = set()
        for raw in suffixes:
            s = (raw or "").strip().lower().strip(".")
            if not s:
                continue
            if s.startswith("!"):
                self._exceptions.add(s[1:])
            elif s.startswith("*."):
                self._wildcard_parents.add(s[2:])
            else:
                self._plain.add(s)

    @classmethod
    def from_psl_text(cls, text: str) -> "SuffixTableResolver":
        rules = []
        for line in (text or "").splitlines():
            s = line.strip()
            if not s or s.startswith("//"):
                continue
            # Only the first whitespace-delimited token is the rule.
            rules.append(s.split()[0])
        return cls(rules)

    def public_suffix(self, host: str) -> Optional[str]:
        labels = (host or "").strip().lower().strip(".").split(".")
        if not labels or not all(labels):
            return None
        for i in range(len(labels)):
            candidate = ".".join(labels[i:])
            if candidate in self._exceptions:
                return ".".join(labels[i + 1:]) or None
            if candidate in self._plain:
                return candidate
            if i + 1 < len(labels) and ".".join(labels[i + 1:]) in self._wildcard_parents:
                return candidate
        return None

    def registrable_domain(self, host: str) -> Optional[str]:
        suffix = self.public_suffix(host)
        if not suffix:
            return None
        labels = (host or "").strip().lower().strip(".").split(".")
        n = suffix.count(".") + 1
        if len(labels) <= n:
            return None
        return ".".join(labels[-(n + 1):])


_default: Optional[SuffixResolver] = None
_default_lock = threading.Lock()


def get_default_resolver() -> SuffixResolver:
    global _default
    with _default_lock:
        if _default is None:
            _default = TldextractResolver()
        return _default

from __future__ import annotations

import base64

import pytest

from genpac.rules.suffixes import SuffixTableResolver


SUFFIXES = [
    "com",
    "net",
    "org",
    "io",
    "uk",
    "co.uk",
    "jp",
    "co.jp",
    "hk",
    "com.hk",
    "ac",
    "ad",
]


@pytest.fixture
def resolver() -> SuffixTableResolver:
    return SuffixTableResolver(SUFFIXES)


def encode_gfwlist(text: str) -> bytes:
    """Base64 envelope as served upstream, wrapped at 64 columns."""
    raw = base64.b64encode(text.encode("utf-8"))
    return b"\n".join(raw[i:i + 64] for i in range(0, len(raw), 64)) + b"\n"


SAMPLE_GFWLIST = "\n".join(
    [
        "[AutoProxy 0.2.9]",
        "! Checksum: abc",
        "! Last Modified: Sat, 01 Jun 2024 08:00:00 -0400",
        "||blocked.example.com",
        "|http://ads.example.net",
        "@@||allowed.example.org",
        "/^https?:\\/\\/[^\\/]+foo\\.io/",
        "plain.example.co.uk",
        "",
    ]
)


@pytest.fixture
def gfwlist_bytes() -> bytes:
    return encode_gfwlist(SAMPLE_GFWLIST)

import pytest

import genpac.app as app_module
from genpac.services.errors import FetchError
from genpac.services.generator import GeneratedPac
from genpac.services.pac_render import PAC_MIMETYPE, PacMeta


PAC_BODY = "function FindProxyForURL(url, host) { return 'DIRECT'; }\n"


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("GENPAC_CONFIG", raising=False)
    monkeypatch.delenv("EXPOSE_INTERNAL_ERRORS", raising=False)
    monkeypatch.setattr(app_module, "_CACHE_VALUE", None)
    monkeypatch.setattr(app_module, "_CACHE_TS", 0.0)
    app_module.app.testing = True
    return app_module.app.test_client()


def _fake_generate(calls, modified="Sat, 01 Jun 2024 08:00:00 -0400"):
    def fake(settings, **kw):
        calls.append(settings)
        return GeneratedPac(content=PAC_BODY, meta=PacMeta(modified=modified), result=None)

    return fake


def test_proxy_pac_is_served_and_cached(client, monkeypatch):
    monkeypatch.setenv("GENPAC_CACHE_TTL", "60")
    calls = []
    monkeypatch.setattr(app_module, "generate", _fake_generate(calls))

    r1 = client.get("/proxy.pac")
    r2 = client.get("/proxy.pac")
    assert r1.status_code == 200
    assert PAC_MIMETYPE in r1.headers.get("Content-Type", "")
    assert r1.get_data(as_text=True) == PAC_BODY
    assert r1.headers.get("X-Gfwlist-Last-Modified") == "Sat, 01 Jun 2024 08:00:00 -0400"
    assert r2.get_data(as_text=True) == PAC_BODY
    assert len(calls) == 1


def test_zero_ttl_regenerates(client, monkeypatch):
    monkeypatch.setenv("GENPAC_CACHE_TTL", "0")
    calls = []
    monkeypatch.setattr(app_module, "generate", _fake_generate(calls, modified=""))

    client.get("/proxy.pac")
    r = client.get("/proxy.pac")
    assert len(calls) == 2
    assert "X-Gfwlist-Last-Modified" not in r.headers


def test_wpad_dat(client, monkeypatch):
    monkeypatch.setattr(app_module, "generate", _fake_generate([]))
    r = client.get("/wpad.dat")
    assert r.status_code == 200
    assert 'filename="wpad.dat"' in r.headers.get("Content-Disposition", "")


def test_fetch_error_is_reported(client, monkeypatch):
    def fail(settings, **kw):
        raise FetchError("Fetching gfwlist failed and no local copy could be read.")

    monkeypatch.setattr(app_module, "generate", fail)
    r = client.get("/proxy.pac")
    assert r.status_code == 502
    assert "Fetching gfwlist failed" in r.get_data(as_text=True)


def test_internal_error_detail_is_hidden(client, monkeypatch):
    def fail(settings, **kw):
        raise RuntimeError("secret token abc123")

    monkeypatch.setattr(app_module, "generate", fail)
    r = client.get("/proxy.pac")
    assert r.status_code == 502
    assert "abc123" not in r.get_data(as_text=True)


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.get_json() == {"ok": True}

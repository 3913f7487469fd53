import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from fastapi.testclient import TestClient  # noqa: E402
from apps.api.main import app, get_resolver  # noqa: E402
from netutil_resolvers import StaticResolver  # noqa: E402


client = TestClient(app)


@pytest.fixture
def static_hosts():
    app.dependency_overrides[get_resolver] = lambda: StaticResolver(
        {"infra0.example.com": "10.0.1.10"}
    )
    yield
    app.dependency_overrides.clear()


def test_healthz():
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_normalize_rewrites_hosts(static_hosts):
    r = client.post(
        "/urls/normalize",
        json={
            "urls": [
                ["http://infra0.example.com:4001", "http://infra0.example.com:2379"],
                ["http://127.0.0.1:2380"],
            ]
        },
    )
    assert r.status_code == 200
    assert r.json() == {
        "urls": [
            ["http://10.0.1.10:4001", "http://10.0.1.10:2379"],
            ["http://127.0.0.1:2380"],
        ]
    }


def test_normalize_unresolvable_host(static_hosts):
    r = client.post("/urls/normalize", json={"urls": [["http://nope.example.com:2380"]]})
    assert r.status_code == 400
    assert "nope.example.com" in r.json()["detail"]


def test_normalize_invalid_url(static_hosts):
    r = client.post("/urls/normalize", json={"urls": [["nope.example.com:2380"]]})
    assert r.status_code == 400
    assert "invalid url" in r.json()["detail"].lower()


def test_normalize_drops_userinfo(static_hosts):
    r = client.post("/urls/normalize", json={"urls": [["http://user@infra0.example.com:2380"]]})
    assert r.status_code == 200
    assert r.json() == {"urls": [["http://10.0.1.10:2380"]]}


def test_normalize_rejects_path(static_hosts):
    r = client.post("/urls/normalize", json={"urls": [["http://infra0.example.com:2380/members"]]})
    assert r.status_code == 400
    assert "path" in r.json()["detail"]


def test_normalize_requires_lists():
    r = client.post("/urls/normalize", json={"urls": []})
    assert r.status_code == 422


def test_compare_hostname_and_ip(static_hosts):
    r = client.post(
        "/urls/compare",
        json={"a": ["http://infra0.example.com:2380"], "b": ["http://10.0.1.10:2380"]},
    )
    assert r.status_code == 200
    assert r.json() == {"equal": True}


def test_compare_different_schemes(static_hosts):
    r = client.post(
        "/urls/compare",
        json={"a": ["http://10.0.1.10:2380"], "b": ["https://10.0.1.10:2380"]},
    )
    assert r.json() == {"equal": False}


def test_invalid_configuration_is_server_error(monkeypatch):
    monkeypatch.setenv("NETUTIL_RESOLVER", "carrier-pigeon")
    r = client.post("/urls/compare", json={"a": [], "b": []})
    assert r.status_code == 500

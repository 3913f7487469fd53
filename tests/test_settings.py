import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
CORE_DIR = ROOT / "packages" / "core"
if str(CORE_DIR) not in sys.path:
    sys.path.insert(0, str(CORE_DIR))

from netutil import TCPAddr, resolve_tcp_addr  # noqa: E402
from netutil_resolvers import DnsResolver, StaticResolver  # noqa: E402
from netutil_settings import Settings, build_resolver, load_settings, parse_hosts  # noqa: E402


def test_load_settings_defaults():
    s = load_settings({})
    assert s.resolver == "system"
    assert s.dns_timeout == 2.0
    assert s.hosts == {}


def test_load_settings_from_env():
    s = load_settings(
        {
            "NETUTIL_RESOLVER": "DNS",
            "NETUTIL_DNS_TIMEOUT": "0.5",
            "NETUTIL_HOSTS": "infra0.example.com=10.0.1.10, infra1.example.com=10.0.1.11",
        }
    )
    assert s.resolver == "dns"
    assert s.dns_timeout == 0.5
    assert s.hosts == {"infra0.example.com": "10.0.1.10", "infra1.example.com": "10.0.1.11"}


def test_load_settings_reads_os_environ(monkeypatch):
    monkeypatch.setenv("NETUTIL_RESOLVER", "static")
    assert load_settings().resolver == "static"


@pytest.mark.parametrize(
    "env",
    [
        {"NETUTIL_RESOLVER": "carrier-pigeon"},
        {"NETUTIL_DNS_TIMEOUT": "soon"},
        {"NETUTIL_HOSTS": "no-equals-sign"},
    ],
)
def test_load_settings_rejects_invalid(env):
    with pytest.raises(ValueError):
        load_settings(env)


def test_parse_hosts_ignores_blank_entries():
    assert parse_hosts(" ,a=10.0.0.1,,") == {"a": "10.0.0.1"}


def test_build_resolver_system_default():
    assert build_resolver(Settings()) is resolve_tcp_addr


def test_build_resolver_dns():
    r = build_resolver(Settings(resolver="dns", dns_timeout=1.5))
    assert isinstance(r, DnsResolver)
    assert r.timeout == 1.5


def test_build_resolver_hosts_wrap_base():
    r = build_resolver(Settings(hosts={"a.example.com": "10.0.0.1"}))
    assert isinstance(r, StaticResolver)
    assert r.fallback is resolve_tcp_addr
    assert r("a.example.com:80") == TCPAddr(ip="10.0.0.1", port=80)


def test_build_resolver_static_has_no_fallback():
    r = build_resolver(Settings(resolver="static", hosts={"a.example.com": "10.0.0.1"}))
    assert isinstance(r, StaticResolver)
    assert r.fallback is None

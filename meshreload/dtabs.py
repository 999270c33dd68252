from __future__ import annotations

import requests

from .settings import settings

# Older version in production, newer one reachable on staging.
DEMOTE_DTAB = """
/srv=>/#/consul/development;
/host/foobar=>/srv/foobar-v1;
/host/www.foobar=>/srv/foobar-v1;
/host/staging.foobar=>/srv/foobar-v2;
/host=>/srv;
/svc=>/host;
/http/1.1/*=>/host;
"""

# Newer version everywhere, older one kept on retired.
PROMOTE_DTAB = """
/srv=>/#/consul/development;
/host/foobar=>/srv/foobar-v2;
/host/www.foobar=>/srv/foobar-v2;
/host/staging.foobar=>/srv/foobar-v2;
/host/retired.foobar=>/srv/foobar-v1;
/host=>/srv;
/svc=>/host;
/http/1.1/*=>/host;
"""

DTABS = {"demote": DEMOTE_DTAB, "promote": PROMOTE_DTAB}


def parse_dtab(text: str) -> list[tuple[str, str]]:
    """Split a dtab into (prefix, destination) pairs."""
    out: list[tuple[str, str]] = []
    for entry in text.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        prefix, sep, dest = entry.partition("=>")
        if not sep or not prefix.strip() or not dest.strip():
            raise ValueError(f"Invalid dtab entry: {entry!r}")
        out.append((prefix.strip(), dest.strip()))
    return out


def kv_url(consul: str, key: str) -> str:
    return f"{consul.rstrip('/')}/v1/kv/{key.lstrip('/')}"


def write_dtab(consul: str, key: str, dtab: str, timeout_s: float | None = None) -> requests.Response:
    """PUT a dtab into the Consul KV store (namerd reads it from there)."""
    parse_dtab(dtab)
    return requests.put(kv_url(consul, key), data=dtab.encode("utf-8"), timeout=timeout_s or settings.http_timeout_s)


def call_gateway(gateway: str, env: str = "www", path: str = "/api/foobar", timeout_s: float | None = None) -> requests.Response:
    """Request `path` from the gateway as if addressed to <env>.gateway."""
    return requests.get(
        f"{gateway.rstrip('/')}{path}",
        headers={"Host": f"{env}.gateway"},
        timeout=timeout_s or settings.http_timeout_s,
    )

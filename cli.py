from __future__ import annotations

import argparse
import sys

import requests

from meshreload.dtabs import DTABS, call_gateway, write_dtab
from meshreload.settings import settings


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Mesh versioning and discovery CLI")
    p.add_argument("--consul", default=settings.consul_addr, help="Consul HTTP address")
    p.add_argument("--gateway", default=settings.gateway_addr, help="Gateway base URL")
    p.add_argument("--key", default=settings.dtab_key, help="Consul KV key holding the dtab")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("demote", aliases=["setup"], help="Restore older version, demote newer to staging")
    sub.add_parser("promote", help="Promote newer version to production")

    s_call = sub.add_parser("call", help="Request foobar from a specific environment")
    s_call.add_argument("env", nargs="?", default="www")

    args = p.parse_args(argv)
    cmd = "demote" if args.cmd == "setup" else args.cmd

    if cmd in DTABS:
        try:
            r = write_dtab(args.consul, args.key, DTABS[cmd])
        except requests.RequestException as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if not r.ok:
            print(f"Error: Consul returned HTTP {r.status_code}: {r.text}", file=sys.stderr)
            return 1
        print("DTab written to Consul")
        return 0

    if cmd == "call":
        try:
            r = call_gateway(args.gateway, args.env)
        except requests.RequestException as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        if r.status_code > 299:
            print([r.status_code], r.text)
            return 1
        print("RESPONSE:", r.text)
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))

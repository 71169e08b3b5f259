from __future__ import annotations

import argparse
import json
import logging
import os
import subprocess
import sys
from pathlib import Path

from .backup import DEFAULT_ANNOUNCE, run_backup
from .client import RconClient
from .constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_MS
from .errors import AuthenticationError, RconError


def _connect(args: argparse.Namespace) -> RconClient:
    if not args.password:
        raise AuthenticationError("no password given (use --password or RCON_PASSWORD)")
    client = RconClient.connect(args.host, args.port, timeout_ms=args.timeout_ms)
    try:
        client.login(args.password)
    except BaseException:
        client.close()
        raise
    return client


def cmd_exec(args: argparse.Namespace) -> int:
    with _connect(args) as client:
        replies = [client.execute(c) for c in args.commands]

    if args.json:
        print(json.dumps([{"command": c, "reply": r} for c, r in zip(args.commands, replies)], indent=2))
    else:
        for reply in replies:
            print(reply)
    return 0


def cmd_backup(args: argparse.Namespace) -> int:
    with _connect(args) as client:
        result = run_backup(
            client,
            world_dir=Path(args.world),
            backup_dir=Path(args.backup_dir),
            announce=args.announce,
        )

    payload = {
        "archive": str(result.paths.archive),
        "snapshot": str(result.paths.snapshot),
        "replies": result.replies,
    }
    print(json.dumps(payload, indent=2) if args.json else payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rconkit", description="Remote console client.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--host", default=DEFAULT_HOST)
        x.add_argument("--port", type=int, default=DEFAULT_PORT)
        x.add_argument("--password", default=os.environ.get("RCON_PASSWORD"))
        x.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS)
        x.add_argument("--json", action="store_true")

    ex = sub.add_parser("exec", help="run commands and print the replies")
    add_common(ex)
    ex.add_argument("commands", nargs="+", metavar="CMD")
    ex.set_defaults(func=cmd_exec)

    bk = sub.add_parser("backup", help="pause saving, tar the world, resume saving")
    add_common(bk)
    bk.add_argument("--world", required=True)
    bk.add_argument("--backup-dir", default="backups")
    bk.add_argument("--announce", default=DEFAULT_ANNOUNCE)
    bk.set_defaults(func=cmd_backup)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return int(args.func(args))
    except AuthenticationError as exc:
        print(f"rconkit: {exc}", file=sys.stderr)
        return 1
    except (RconError, OSError, subprocess.CalledProcessError) as exc:
        print(f"rconkit: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

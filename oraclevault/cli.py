"""oraclevault.cli

Command line interface entry point for oraclevault.

Design constraints:
- argparse-based.
- Lazy imports: do not import heavy dependencies at parse time.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oraclevault.core.config import Config

EPILOG = "Resting liquidity, priced by the oracle, changed only after the timelock."


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oraclevault",
        description="Oracle-guarded liquidity vault.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_tick = sub.add_parser("tick", help="Convert between ticks and prices")
    tick_sub = p_tick.add_subparsers(dest="tick_command")
    p_price = tick_sub.add_parser("price", help="Human price of a tick")
    p_price.add_argument("tick", type=int)
    p_from = tick_sub.add_parser("tick", help="Tick of a human price")
    p_from.add_argument("price", type=str)
    for p in (p_price, p_from):
        p.add_argument("--base-decimals", type=int, default=18)
        p.add_argument("--quote-decimals", type=int, default=18)

    p_journal = sub.add_parser("journal", help="Show journal events")
    p_journal.add_argument("--limit", type=int, default=20)
    p_journal.add_argument("--verify", action="store_true", help="Verify the hash chain and exit.")

    sub.add_parser("status", help="Print system status")

    p_api = sub.add_parser("api", help="Start FastAPI server")
    p_api.add_argument("--host", default=None)
    p_api.add_argument("--port", type=int, default=None)

    return parser


def _print_version() -> None:
    from oraclevault import __version__

    print(f"oraclevault v{__version__}")


def _load_config(repo_root: Path) -> Config:
    from oraclevault.core.config import Config

    cfg_path = repo_root / "config" / "default.yaml"
    if cfg_path.exists():
        return Config.from_yaml(cfg_path)
    return Config()


class _JsonFormatter(logging.Formatter):
    _STANDARD = set(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        body = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        body.update({k: v for k, v in vars(record).items() if k not in self._STANDARD})
        return json.dumps(body, default=str)


def configure_logging(config: Config) -> None:
    handler = logging.StreamHandler(sys.stderr)
    if config.logging.json_output:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(config.logging.level.upper())


def _cmd_tick(ctx: CliContext, args: argparse.Namespace) -> int:
    from oraclevault.core.tick import price_from_tick_human, tick_from_price

    if args.tick_command == "price":
        try:
            price = price_from_tick_human(
                args.tick, base_decimals=args.base_decimals, quote_decimals=args.quote_decimals
            )
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        print(f"{price:.18g}")
        return 0

    if args.tick_command == "tick":
        try:
            tick = tick_from_price(args.price, base_decimals=args.base_decimals, quote_decimals=args.quote_decimals)
        except (ArithmeticError, ValueError) as e:
            print(f"error: invalid price {args.price!r}: {e}", file=sys.stderr)
            return 2
        print(tick)
        return 0

    print("usage: oraclevault tick {price,tick} ...", file=sys.stderr)
    return 2


def _cmd_journal(ctx: CliContext, args: argparse.Namespace) -> int:
    from oraclevault.core.database import Database

    config = _load_config(ctx.repo_root)
    db_path = ctx.repo_root / config.journal_path
    if not db_path.exists():
        print(f"error: journal not found: {db_path}", file=sys.stderr)
        return 2

    db = Database(db_path)
    try:
        if args.verify:
            ok = db.verify_hash_chain()
            print(f"hash chain: {'ok' if ok else 'BROKEN'} ({db.count()} events)")
            return 0 if ok else 1

        for ev in db.get_events(limit=args.limit):
            print(f"{ev.seq:>6} {ev.ts.isoformat()} {ev.type} {json.dumps(ev.payload, sort_keys=True)}")
        return 0
    finally:
        db.close()


def _cmd_status(ctx: CliContext, args: argparse.Namespace) -> int:
    from oraclevault.core.exceptions import OracleVaultError

    repo_root = ctx.repo_root
    cfg_path = repo_root / "config" / "default.yaml"

    try:
        config = _load_config(repo_root)
        config_status = str(cfg_path) if cfg_path.exists() else "built-in defaults"
    except OracleVaultError as e:
        print(f"- config: {cfg_path} (error: {e})")
        return 1

    db_path = repo_root / config.journal_path
    db_status = "present" if db_path.exists() else "missing"

    print("oraclevault status")
    print(f"- config: {config_status}")
    print(f"- journal: {db_path} ({db_status})")
    print(
        f"- oracle defaults: timelock {config.oracle.timelock_minutes}m, "
        f"max deviation {config.oracle.max_deviation_ticks} ticks"
    )
    print(f"- fees: max annual rate {config.fees.max_annual_rate} / 100000")
    print(f"- minimum liquidity: {config.vault.minimum_liquidity}")
    return 0


def _cmd_api(ctx: CliContext, args: argparse.Namespace) -> int:
    config = _load_config(ctx.repo_root)

    host = args.host or config.api.host
    port = args.port or config.api.port

    import uvicorn

    uvicorn.run("api.main:create_app", host=host, port=port, reload=False, factory=True)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    from oraclevault.core.exceptions import ConfigError

    try:
        configure_logging(_load_config(ctx.repo_root))
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "tick": _cmd_tick,
        "journal": _cmd_journal,
        "status": _cmd_status,
        "api": _cmd_api,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())

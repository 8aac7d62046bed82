"""
Command line entry for the focusdesk store.

  focusdesk init                       create schema and default settings
  focusdesk serve --port 8765          run the HTTP API with uvicorn
  focusdesk call create_note --args '{"title": "t", "content": "c"}'
  focusdesk commands                   list command names
"""
from __future__ import annotations

import argparse
import json
import logging
import sys

from .commands import COMMANDS, invoke
from .db import Database, ensure_schema, read_config_yaml
from .services.settings_svc import ensure_default_settings


def _open_db(args) -> Database:
    db = Database(path=args.db)
    ensure_schema(db)
    ensure_default_settings(db)
    return db


def cmd_init(args) -> int:
    db = _open_db(args)
    db.close()
    print(f"Initialized database at {db.path}")
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    from .api import create_app

    app = create_app(Database(path=args.db))
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def cmd_call(args) -> int:
    try:
        payload = json.loads(args.args) if args.args else {}
    except json.JSONDecodeError as e:
        print(f"--args is not valid JSON: {e}", file=sys.stderr)
        return 2
    if not isinstance(payload, dict):
        print("--args must be a JSON object", file=sys.stderr)
        return 2
    db = _open_db(args)
    try:
        res = invoke(db, args.command, payload)
    finally:
        db.close()
    if not res.ok:
        print(res.error, file=sys.stderr)
        return 1
    print(json.dumps(res.data, ensure_ascii=False, indent=2, default=str))
    return 0


def cmd_commands(args) -> int:
    for name in sorted(COMMANDS):
        print(name)
    return 0


def main(argv: list[str] | None = None) -> int:
    cfg = read_config_yaml()
    parser = argparse.ArgumentParser(description="focusdesk local store (SQLite)")
    parser.add_argument("--db", default=None, help="database file (default: FOCUSDESK_DB_PATH / config.yaml)")
    parser.add_argument("--log-level", default=cfg.get("log_level", "INFO"))
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create schema and default settings")
    p_init.set_defaults(func=cmd_init)

    p_serve = sub.add_parser("serve", help="run the HTTP API")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8765)
    p_serve.set_defaults(func=cmd_serve)

    p_call = sub.add_parser("call", help="invoke one command and print the JSON result")
    p_call.add_argument("command")
    p_call.add_argument("--args", default=None, help="JSON object of keyword arguments")
    p_call.set_defaults(func=cmd_call)

    p_cmds = sub.add_parser("commands", help="list command names")
    p_cmds.set_defaults(func=cmd_commands)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

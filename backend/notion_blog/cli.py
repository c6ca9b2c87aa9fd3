# backend/notion_blog/cli.py

"""
静的サイトのビルドから呼ぶためのコマンドラインエントリーポイント。

    python -m notion_blog export --out src/_data/notion.json
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .notion.config import get_notion_config
from .notion.service import build_posts_sync
from .utils.config import EnvVarMissingError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notion_blog")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser(
        "export",
        help="Fetch published posts from Notion and write them as JSON.",
    )
    export.add_argument(
        "--out",
        default="-",
        help="Output file path, or '-' for stdout (default).",
    )
    export.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indent width (default: 2).",
    )
    export.add_argument(
        "--no-cache",
        action="store_true",
        help="Bypass the on-disk Notion response cache.",
    )
    export.set_defaults(_handler=_cmd_export)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _cmd_export(args: argparse.Namespace) -> int:
    config = get_notion_config()
    if args.no_cache:
        config = dataclasses.replace(config, cache_duration_seconds=0)

    result = build_posts_sync(config)
    text = json.dumps(result, indent=args.indent, ensure_ascii=False)

    if args.out == "-":
        print(text)
    else:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text + "\n", encoding="utf-8")
        _eprint(f"posts={len(result['posts'])} out={out_path}")

    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except EnvVarMissingError as e:
        _eprint(str(e))
        return 2
    except OSError as e:
        _eprint(f"Failed to write output: {e}")
        return 3
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130

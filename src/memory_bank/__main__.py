"""Entry point: python -m memory_bank [serve|init|info|update]

- No args / "serve": MCP server on stdio (what assistants launch)
- "init":            Create memory-bank/ under a project root
- "info":            Print the aggregated Memory Bank
- "update":          Print update guidance for a change
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from memory_bank.config import load_config


def _setup_logging(level: str) -> None:
    # stderr only: stdout is the protocol channel in serve mode
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memory-bank-mcp")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("serve", help="MCP server on stdio (default)")

    init = sub.add_parser("init", help="Initialize the Memory Bank")
    init.add_argument("root", help="Project root directory")
    init.add_argument("--force", action="store_true", help="Overwrite existing files")

    info = sub.add_parser("info", help="Show Memory Bank contents")
    info.add_argument("root", help="Project root directory")

    update = sub.add_parser("update", help="Show update guidance for a change")
    update.add_argument("root", help="Project root directory")
    update.add_argument(
        "change_type", help="architecture, feature, bugfix, refactor, decision or progress"
    )
    update.add_argument("description", help="Brief description of the change")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = load_config()
    _setup_logging(config.log_level)

    if args.cmd in (None, "serve"):
        from memory_bank.server import serve

        try:
            asyncio.run(serve(config))
        except KeyboardInterrupt:
            pass
        return 0

    from memory_bank.tools import get_memory_bank_tools

    tools = get_memory_bank_tools(config)
    if args.cmd == "init":
        text = tools["init-memory-bank"].handler({"rootPath": args.root, "force": args.force})
    elif args.cmd == "info":
        text = tools["get-memory-bank-info"].handler({"rootPath": args.root})
    else:
        text = tools["update-memory-bank"].handler(
            {
                "rootPath": args.root,
                "changeType": args.change_type,
                "description": args.description,
            }
        )
    print(text)
    # Tool failures are reported as text; surface them in the exit status
    return 1 if text.startswith("Error ") else 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from .config import load_config
from .logging_utils import setup_logging
from .orchestrate import Orchestrator, RunResult


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="playstats")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml (default: config.yaml).")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Fetch recent plays, merge into history and rebuild stats.")
    run.add_argument("--no-enrichment", action="store_true", help="Skip the top tracks/artists fetch.")

    sub.add_parser("recompute", help="Rebuild stats from stored history without fetching.")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logger = setup_logging(args.log_level)
    cfg = load_config(args.config)
    if getattr(args, "no_enrichment", False):
        cfg.raw["enrichment"] = {"enabled": False}
    orchestrator = Orchestrator(cfg, logger)

    async def _run() -> RunResult:
        if args.command == "run":
            return await orchestrator.run()
        return await orchestrator.recompute()

    result = asyncio.run(_run())
    print(result.message)
    if not result.ok:
        sys.exit(1)

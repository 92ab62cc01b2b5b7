"""AWS Lambda entry point for the scheduled ingestion run."""

from __future__ import annotations

import asyncio
import os
from typing import Any, Dict

from .config import load_config
from .logging_utils import setup_logging
from .orchestrate import Orchestrator


def handler(event: Any = None, context: Any = None) -> Dict[str, Any]:
    logger = setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    try:
        cfg = load_config(os.getenv("PLAYSTATS_CONFIG", "config.yaml"))
        result = asyncio.run(Orchestrator(cfg, logger).run())
    except Exception as exc:
        logger.error("handler_failed", exc_info=exc, extra={"extra": {"error_type": type(exc).__name__}})
        return {"statusCode": 500, "body": f"Error fetching plays or saving stats: {exc}"}
    return {"statusCode": 200 if result.ok else 500, "body": result.message}

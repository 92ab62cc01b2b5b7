from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .api_client import ApiClient, ApiConfig
from .auth import TokenClient
from .config import Config, get_spotify_credentials
from .errors import AuthFailure, PlayStatsError, StoreReadFailure
from .logging_utils import log_json
from .merge import merge_plays
from .s3_io import S3IO, new_run_id
from .stats import aggregate_stats
from .top_lists import CATEGORIES, DEFAULT_LIMIT, WINDOWS, fetch_top_lists


@dataclass
class RunResult:
    ok: bool
    message: str
    added: int = 0
    total: int = 0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Orchestrator:
    """Sequences one ingestion run against the configured bucket.

    Only one run may touch a given history document at a time; the
    read-merge-write of the history is not transactional.
    """

    def __init__(
        self,
        config: Config,
        logger,
        s3: Optional[S3IO] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.logger = logger
        self.s3 = s3 or S3IO(config.bucket, config.region)
        self.api_cfg = ApiConfig(**config.api)
        self._transport = transport
        self._run_id = new_run_id()

    async def run(self) -> RunResult:
        log_json(self.logger, "run_start", run_id=self._run_id, bucket=self.config.bucket)
        try:
            added, total = await self._ingest()
        except PlayStatsError as exc:
            return self._failed(exc, "Error fetching plays or saving stats")
        except Exception as exc:
            return self._failed(exc, "Error fetching plays or saving stats", unexpected=True)
        log_json(self.logger, "run_complete", run_id=self._run_id, added=added, total=total)
        return RunResult(ok=True, message=f"Saved {added} new plays. Stats updated.", added=added, total=total)

    async def recompute(self) -> RunResult:
        """Rebuild the stats document from stored history without fetching."""
        try:
            history = self._load_history()
            self._save_report(self._build_report(history), top_lists=None)
        except PlayStatsError as exc:
            return self._failed(exc, "Error recomputing stats")
        except Exception as exc:
            return self._failed(exc, "Error recomputing stats", unexpected=True)
        return RunResult(ok=True, message=f"Stats rebuilt from {len(history)} plays.", total=len(history))

    def _failed(self, exc: Exception, prefix: str, unexpected: bool = False) -> RunResult:
        detail = {"run_id": self._run_id, "error_type": type(exc).__name__, "error": str(exc)}
        if unexpected:
            self.logger.error("run_failed", exc_info=exc, extra={"extra": detail})
        else:
            log_json(self.logger, "run_failed", **detail)
        return RunResult(ok=False, message=f"{prefix}: {exc}")

    async def _ingest(self) -> tuple[int, int]:
        try:
            client_id, client_secret, refresh_token = get_spotify_credentials()
        except RuntimeError as exc:
            raise AuthFailure(str(exc)) from exc
        auth = TokenClient(client_id, client_secret, refresh_token, self.api_cfg, transport=self._transport)
        try:
            token = await auth.fetch_access_token()
        finally:
            await auth.close()

        api = ApiClient(token, self.api_cfg, transport=self._transport)
        api.set_logger(self.logger)
        try:
            recent = await api.get_recently_played(limit=self.config.recent_limit)
            log_json(self.logger, "recent_fetched", run_id=self._run_id, count=len(recent))
            history = self._load_history()

            merged, added = merge_plays(history, recent, logger=self.logger)
            log_json(
                self.logger,
                "history_merged",
                run_id=self._run_id,
                added=added,
                total=len(merged),
            )
            if added > 0:
                self.s3.put_json(self.config.history_key, merged)
                log_json(self.logger, "history_saved", run_id=self._run_id, key=self.config.history_key)
            else:
                log_json(self.logger, "history_unchanged", run_id=self._run_id)

            report = self._build_report(merged)
            top_lists = await self._fetch_enrichment(api)
        finally:
            await api.close()

        self._save_report(report, top_lists=top_lists)
        return added, len(merged)

    async def _fetch_enrichment(self, api: ApiClient) -> Optional[Dict[str, Any]]:
        enrichment = self.config.enrichment
        if not enrichment.get("enabled", False):
            return None
        return await fetch_top_lists(
            api,
            self.logger,
            windows=enrichment.get("windows", WINDOWS),
            categories=enrichment.get("categories", CATEGORIES),
            limit=int(enrichment.get("limit", DEFAULT_LIMIT)),
        )

    def _load_history(self) -> List[Dict[str, Any]]:
        history = self.s3.get_json(self.config.history_key, default=[])
        if not isinstance(history, list):
            raise StoreReadFailure(f"{self.config.history_key} is not a JSON array")
        if not all(isinstance(item, dict) for item in history):
            raise StoreReadFailure(f"{self.config.history_key} holds entries that are not play objects")
        return history

    def _build_report(self, history: List[Dict[str, Any]]) -> Dict[str, Any]:
        report = aggregate_stats(history).to_dict()
        report["generated_at"] = _now()
        return report

    def _save_report(self, report: Dict[str, Any], top_lists: Optional[Dict[str, Any]]) -> None:
        if top_lists is not None:
            report["top_lists"] = top_lists
        self.s3.put_json(self.config.stats_key, report)
        log_json(self.logger, "stats_saved", run_id=self._run_id, key=self.config.stats_key, total_plays=report["total_plays"])

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Sequence, Tuple

from .api_client import ApiClient
from .errors import EnrichmentFetchFailure
from .logging_utils import warn_json

WINDOWS = ("short_term", "medium_term", "long_term")
CATEGORIES = ("tracks", "artists")
DEFAULT_LIMIT = 50


def _summarize(category: str, item: Dict[str, Any]) -> Dict[str, Any]:
    entry: Dict[str, Any] = {"name": item.get("name")}
    if category == "tracks":
        artists = item.get("artists") or []
        first = artists[0] if artists and isinstance(artists[0], dict) else {}
        entry["artist"] = first.get("name")
    return entry


async def _fetch_slot(api: ApiClient, category: str, window: str, limit: int) -> List[Dict[str, Any]]:
    try:
        items = await api.get_top_items(category, window, limit=limit)
        return [_summarize(category, item) for item in items[:limit]]
    except Exception as exc:
        raise EnrichmentFetchFailure(category, window, str(exc) or type(exc).__name__) from exc


async def fetch_top_lists(
    api: ApiClient,
    logger: logging.Logger,
    windows: Sequence[str] = WINDOWS,
    categories: Sequence[str] = CATEGORIES,
    limit: int = DEFAULT_LIMIT,
) -> Dict[str, Dict[str, List[Dict[str, Any]]]]:
    """Fetch every (window, category) ranked list concurrently.

    All requests are awaited to completion. A slot whose request fails is
    logged and reported as an empty list; the other slots are unaffected.
    """
    slots: List[Tuple[str, str]] = [(w, c) for w in windows for c in categories]
    results = await asyncio.gather(
        *(_fetch_slot(api, c, w, limit) for w, c in slots),
        return_exceptions=True,
    )
    report: Dict[str, Dict[str, List[Dict[str, Any]]]] = {w: {c: [] for c in categories} for w in windows}
    for (window, category), result in zip(slots, results):
        if isinstance(result, BaseException):
            warn_json(logger, "top_list_failed", window=window, category=category, error=str(result))
            continue
        report[window][category] = result
    return report

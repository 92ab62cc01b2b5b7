from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .logging_utils import warn_json

PLAY_KEY = "played_at"


def play_key(item: Dict[str, Any]) -> Optional[str]:
    return item.get(PLAY_KEY)


def merge_plays(
    existing: Optional[Sequence[Dict[str, Any]]],
    incoming: Iterable[Dict[str, Any]],
    logger: Optional[logging.Logger] = None,
) -> Tuple[List[Dict[str, Any]], int]:
    """Append plays from ``incoming`` whose timestamp is not already stored.

    Returns the merged history (stored order, then new plays in incoming
    order) and the number of plays added. Neither input is mutated.

    Duplicates inside ``incoming`` resolve first-wins: once a timestamp is
    accepted it is indexed, so a later item with the same ``played_at`` is
    dropped. Items without a ``played_at`` are dropped as well and counted in
    a ``plays_without_timestamp`` warning when a logger is given.
    """
    merged: List[Dict[str, Any]] = list(existing or [])
    seen: Set[str] = {key for key in (play_key(p) for p in merged) if key is not None}
    added = 0
    unkeyed = 0
    for item in incoming:
        key = play_key(item)
        if key is None:
            unkeyed += 1
            continue
        if key in seen:
            continue
        seen.add(key)
        merged.append(item)
        added += 1
    if unkeyed and logger is not None:
        warn_json(logger, "plays_without_timestamp", count=unkeyed)
    return merged, added

from __future__ import annotations


class PlayStatsError(Exception):
    """Base class for failures that end a run with a failure result."""


class AuthFailure(PlayStatsError):
    pass


class RecentFetchFailure(PlayStatsError):
    pass


class StoreReadFailure(PlayStatsError):
    pass


class StoreWriteFailure(PlayStatsError):
    pass


class EnrichmentFetchFailure(PlayStatsError):
    """Raised for a single top-list slot; never ends a run."""

    def __init__(self, category: str, window: str, reason: str) -> None:
        super().__init__(f"{category}/{window}: {reason}")
        self.category = category
        self.window = window

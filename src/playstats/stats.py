"""Listening statistics over the full play history.

``aggregate_stats`` makes one pass over the history and builds five
independent aggregates. Each aggregate only skips a play when a field it needs
is missing; a play is never dropped from the whole report.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_DAY = "unknown"


@dataclass
class NameCount:
    name: str
    count: int


@dataclass
class AlbumCount:
    name: Optional[str]
    artist: str
    count: int = 0


@dataclass
class StatsReport:
    total_plays: int
    tracks: List[NameCount]
    artists: List[NameCount]
    daily_counts: Dict[str, int]
    daily_unique_tracks: Dict[str, int]
    top_albums: List[AlbumCount]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _Accumulator:
    total: int = 0
    tracks: Counter = field(default_factory=Counter)
    artists: Counter = field(default_factory=Counter)
    daily: Counter = field(default_factory=Counter)
    daily_tracks: Dict[str, Set[str]] = field(default_factory=dict)
    albums: Dict[str, AlbumCount] = field(default_factory=dict)

    def add(self, item: Dict[str, Any]) -> None:
        self.total += 1
        day = play_day(item.get("played_at"))
        self.daily[day] += 1

        track = item.get("track")
        if not isinstance(track, dict):
            return
        artists = track.get("artists")
        artist_names = _artist_names(artists)

        name = track.get("name")
        primary = _primary_artist(artists)
        if name is not None and primary is not None:
            self.tracks[f"{name} - {primary}"] += 1

        for artist in artist_names:
            self.artists[artist] += 1

        track_id = track.get("id")
        if track_id is not None:
            self.daily_tracks.setdefault(day, set()).add(track_id)

        album = track.get("album")
        if isinstance(album, dict) and album.get("id") is not None:
            entry = self.albums.get(album["id"])
            if entry is None:
                album_artist = _primary_artist(album.get("artists"))
                entry = AlbumCount(
                    name=album.get("name"),
                    artist=UNKNOWN_ARTIST if album_artist is None else album_artist,
                )
                self.albums[album["id"]] = entry
            entry.count += 1

    def report(self) -> StatsReport:
        # Counter.most_common and sorted() are stable, so ties keep first-seen order.
        return StatsReport(
            total_plays=self.total,
            tracks=[NameCount(name, count) for name, count in self.tracks.most_common()],
            artists=[NameCount(name, count) for name, count in self.artists.most_common()],
            daily_counts=dict(self.daily),
            daily_unique_tracks={day: len(ids) for day, ids in self.daily_tracks.items()},
            top_albums=sorted(self.albums.values(), key=lambda a: a.count, reverse=True),
        )


def play_day(played_at: Optional[str]) -> str:
    """Calendar date of a play timestamp as given, e.g. ``2024-01-01``."""
    if played_at is None:
        return UNKNOWN_DAY
    return played_at.split("T", 1)[0]


def _primary_artist(artists: Any) -> Optional[str]:
    if not isinstance(artists, list) or not artists or not isinstance(artists[0], dict):
        return None
    return artists[0].get("name")


def _artist_names(artists: Any) -> List[str]:
    if not isinstance(artists, list):
        return []
    return [a["name"] for a in artists if isinstance(a, dict) and a.get("name") is not None]


def aggregate_stats(history: Sequence[Dict[str, Any]]) -> StatsReport:
    acc = _Accumulator()
    for item in history:
        acc.add(item)
    return acc.report()

"""Shared test fixtures for the playstats test suite.

Provides moto-based S3 mocks, a canned Spotify API transport and sample play
events matching the recently-played response shape.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Optional

import boto3
import httpx
import pytest
from moto import mock_aws

from playstats.config import Config


BUCKET = "spotify-play-history"


# ---------------------------------------------------------------------------
# AWS credential safety — prevent accidental real AWS calls
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True, scope="session")
def aws_credentials():
    """Set fake AWS credentials for the entire test session."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
    yield
    for key in (
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SECURITY_TOKEN",
        "AWS_SESSION_TOKEN",
        "AWS_DEFAULT_REGION",
    ):
        os.environ.pop(key, None)


@pytest.fixture()
def spotify_credentials(monkeypatch):
    monkeypatch.setenv("SPOTIFY_CLIENT_ID", "client-id")
    monkeypatch.setenv("SPOTIFY_CLIENT_SECRET", "client-secret")
    monkeypatch.setenv("SPOTIFY_REFRESH_TOKEN", "refresh-token")


@pytest.fixture()
def s3_bucket():
    """Create a moto mock S3 bucket and yield the boto3 client."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


# ---------------------------------------------------------------------------
# Configuration fixture
# ---------------------------------------------------------------------------

@pytest.fixture()
def sample_config() -> Config:
    return Config({
        "bucket": BUCKET,
        "region": "us-east-1",
        "api": {
            "base_url": "https://api.spotify.test/v1",
            "accounts_url": "https://accounts.spotify.test",
            "timeout_seconds": 5,
            "max_concurrency": 6,
        },
        "store": {"history_key": "plays.json", "stats_key": "stats.json"},
        "recent_limit": 50,
        "enrichment": {"enabled": False},
    })


# ---------------------------------------------------------------------------
# Sample data — recently-played item shape
# ---------------------------------------------------------------------------

def make_play(
    played_at: Optional[str],
    track_id: Optional[str] = "t1",
    name: Optional[str] = "Song A",
    artists: Optional[List[str]] = None,
    album_id: Optional[str] = "al1",
    album_name: str = "Album1",
    album_artists: Optional[List[str]] = None,
) -> Dict[str, Any]:
    artists = ["Artist1"] if artists is None else artists
    album_artists = artists if album_artists is None else album_artists
    track: Dict[str, Any] = {"name": name, "artists": [{"name": a} for a in artists]}
    if track_id is not None:
        track["id"] = track_id
    album: Dict[str, Any] = {"name": album_name, "artists": [{"name": a} for a in album_artists]}
    if album_id is not None:
        album["id"] = album_id
    track["album"] = album
    item: Dict[str, Any] = {"track": track, "context": None}
    if played_at is not None:
        item["played_at"] = played_at
    return item


@pytest.fixture()
def sample_plays() -> List[Dict[str, Any]]:
    return [
        make_play("2024-01-01T10:00:00.000Z", "a", "Song A", ["Artist1"], "al1", "Album1"),
        make_play("2024-01-01T10:04:00.000Z", "b", "Song B", ["Artist2", "Artist1"], "al2", "Album2"),
        make_play("2024-01-01T10:08:00.000Z", "a", "Song A", ["Artist1"], "al1", "Album1"),
        make_play("2024-01-02T09:00:00.000Z", "c", "Song C", ["Artist3"], "al3", "Album3"),
    ]


# ---------------------------------------------------------------------------
# Fake Spotify API
# ---------------------------------------------------------------------------

class FakeSpotify:
    """Routes token, recently-played and top-items requests to canned data."""

    def __init__(self, recent: List[Dict[str, Any]]) -> None:
        self.recent = recent
        self.token_status = 200
        self.recent_status = 200
        self.failing_top: set = set()
        self.top_items: Dict[str, List[Dict[str, Any]]] = {
            "tracks": [{"name": "Top Song", "artists": [{"name": "Top Artist"}]}],
            "artists": [{"name": "Top Artist"}],
        }
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/api/token"):
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "access-token", "token_type": "Bearer"})
        if path.endswith("/me/player/recently-played"):
            if self.recent_status != 200:
                return httpx.Response(self.recent_status, json={"error": {"status": self.recent_status}})
            return httpx.Response(200, json={"items": self.recent})
        if "/me/top/" in path:
            category = path.rsplit("/", 1)[-1]
            window = request.url.params.get("time_range")
            if (category, window) in self.failing_top:
                return httpx.Response(503, json={"error": "unavailable"})
            return httpx.Response(200, json={"items": self.top_items[category]})
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture()
def fake_spotify(sample_plays) -> FakeSpotify:
    return FakeSpotify(sample_plays)


@pytest.fixture()
def play_factory() -> Callable[..., Dict[str, Any]]:
    return make_play

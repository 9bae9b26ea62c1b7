"""Manifest and ads-directory builders shared by the tests."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

SPACES_ENV = {
    "DO_SPACES_ACCESS_KEY": "test-access-key",
    "DO_SPACES_SECRET_KEY": "test-secret-key",
    "DO_SPACES_BUCKET": "oyk-ads",
    "DO_SPACES_ENDPOINT": "nyc3.digitaloceanspaces.com",
    "DO_SPACES_REGION": "nyc3",
}

PUBLIC_BASE = "https://oyk-ads.nyc3.digitaloceanspaces.com"


def make_ad(**overrides: Any) -> Dict[str, Any]:
    """A valid video ad entry; keyword arguments replace fields."""
    ad = {
        "id": "oyk-game-1",
        "title": "Amazing Adventure Game",
        "description": "Embark on an epic journey.",
        "mediaType": "video",
        "mediaUrl": "media/game1-trailer.mp4",
        "clickUrl": "https://oykgames.com/game1",
        "creditsReward": 25,
    }
    ad.update(overrides)
    return ad


def make_manifest(*ads: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": "1.0.0",
        "lastUpdated": "2026-01-01T00:00:00.000Z",
        "ads": list(ads) if ads else [make_ad()],
    }


def write_ads_dir(
    root: Path,
    manifest: Optional[Dict[str, Any]] = None,
    media: Iterable[str] = ("game1-trailer.mp4",),
) -> Path:
    """Lay out <root>/config.json and <root>/media/<files>."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "config.json").write_text(json.dumps(manifest or make_manifest()), encoding="utf-8")
    media = list(media)
    if media:
        (root / "media").mkdir(exist_ok=True)
        for name in media:
            (root / "media" / name).write_bytes(f"bytes of {name}".encode())
    return root

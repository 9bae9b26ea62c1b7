"""
Example ads directory bootstrap.

Used by ``ads-publish --init`` to lay out a new ads directory:

    <config-dir>/
    ├── config.json     # Ad definitions
    ├── media/          # Video and image files
    └── README.md
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ads_publisher.utils.logging import get_logger

logger = get_logger(__name__)

README_TEMPLATE = """# Custom Ads Configuration

This directory contains the configuration and media files for your custom ads.

## Files:
- `config.json` - Ad definitions and configuration
- `media/` - Directory containing video and image files

## Usage:
1. Add your video/image files to the `media/` directory
2. Update `config.json` with your ad definitions
3. Run `ads-publish --config-dir <this directory>` to upload to Spaces

## Ad Configuration:
Each ad in the `ads` array should have:
- `id`: Unique identifier
- `title`: Display title
- `description`: Ad description
- `mediaType`: 'video' or 'image'
- `mediaUrl`: Path to media file (relative to this directory)
- `clickUrl`: URL to redirect users when they click
- `creditsReward`: Number of credits to award
- `active`: Whether the ad is currently active
- `duration` (optional): Video duration in seconds
- `thumbnailUrl` (optional): Thumbnail image
- `metadata` (optional): Additional metadata

## Media Files:
Supported formats:
- Videos: .mp4, .mov, .avi, .webm
- Images: .jpg, .jpeg, .png, .gif, .webp

Files should be reasonably sized (< 50MB for videos, < 5MB for images).
"""


def example_manifest(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Return the example manifest written by ``create_example_config``."""
    stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return {
        "version": "1.0.0",
        "lastUpdated": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "ads": [
            {
                "id": "oyk-game-1",
                "title": "Amazing Adventure Game",
                "description": (
                    "Embark on an epic journey in this amazing adventure game! "
                    "Discover new worlds, collect treasures, and defeat enemies."
                ),
                "mediaType": "video",
                "mediaUrl": "media/game1-trailer.mp4",
                "thumbnailUrl": "media/game1-thumb.jpg",
                "clickUrl": "https://oykgames.com/game1",
                "creditsReward": 25,
                "duration": 30,
                "active": True,
                "metadata": {
                    "gameId": "adventure-quest",
                    "category": "adventure",
                    "tags": ["adventure", "rpg", "fantasy"],
                },
            },
            {
                "id": "oyk-game-2",
                "title": "Space Shooter Pro",
                "description": "Defend Earth from alien invaders in this action-packed space shooter!",
                "mediaType": "image",
                "mediaUrl": "media/game2-screenshot.jpg",
                "clickUrl": "https://oykgames.com/game2",
                "creditsReward": 15,
                "active": True,
                "metadata": {
                    "gameId": "space-shooter",
                    "category": "action",
                    "tags": ["shooter", "action", "space"],
                },
            },
        ],
    }


def create_example_config(config_dir: Union[str, Path]) -> bool:
    """
    Create an example ads directory if ``config_dir`` does not exist.

    Args:
        config_dir: Directory to create

    Returns:
        True if the directory was created, False if it already existed
        (existing directories are never touched)
    """
    target = Path(config_dir).resolve()
    if target.exists():
        logger.info(f"Config directory already exists, not creating example: {target}")
        return False

    logger.info(f"Creating example configuration in {target}")
    (target / "media").mkdir(parents=True)

    with open(target / "config.json", "w", encoding="utf-8") as f:
        json.dump(example_manifest(), f, indent=2)
        f.write("\n")

    (target / "README.md").write_text(README_TEMPLATE, encoding="utf-8")
    return True

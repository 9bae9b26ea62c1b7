"""
Ad manifest loader and validator.

The manifest (config.json) describes every ad that the consuming app shows:

    ```json
    {
      "version": "1.0.0",
      "lastUpdated": "2026-10-18T09:00:00.000Z",
      "ads": [
        {
          "id": "oyk-game-1",
          "title": "Amazing Adventure Game",
          "description": "Embark on an epic journey...",
          "mediaType": "video",
          "mediaUrl": "media/game1-trailer.mp4",
          "thumbnailUrl": "media/game1-thumb.jpg",
          "clickUrl": "https://oykgames.com/game1",
          "creditsReward": 25,
          "duration": 30,
          "active": true,
          "metadata": {"category": "adventure"}
        }
      ]
    }
    ```

Usage:
    >>> from ads_publisher.manifest import load_manifest, validate_manifest
    >>> manifest = load_manifest("ads/config.json")
    >>> validate_manifest(manifest)  # raises ManifestValidationError
"""

import json
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ads_publisher.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)


class MediaType(str, Enum):
    VIDEO = "video"
    IMAGE = "image"


REQUIRED_AD_FIELDS = [
    "id",
    "title",
    "description",
    "mediaType",
    "mediaUrl",
    "clickUrl",
    "creditsReward",
]

VALID_MEDIA_TYPES = [media_type.value for media_type in MediaType]


@dataclass
class ManifestError:
    """Single validation problem in a manifest."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"


class ManifestValidationError(ValueError):
    """Raised when a manifest fails validation; carries every problem found."""

    def __init__(self, errors: List[ManifestError]) -> None:
        self.errors = list(errors)
        if len(self.errors) == 1:
            message = str(self.errors[0])
        else:
            details = "\n".join(f"  - {error}" for error in self.errors)
            message = f"{len(self.errors)} problems in ad manifest:\n{details}"
        super().__init__(message)


def load_manifest(manifest_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load the ad manifest from a JSON file.

    Args:
        manifest_path: Path to config.json

    Returns:
        Parsed manifest

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the path is not a file
        json.JSONDecodeError: If the file is not valid JSON
    """
    path = Path(manifest_path)
    logger.info(f"Loading ad manifest from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Ad manifest not found: {path}")

    if not path.is_file():
        raise ValueError(f"Ad manifest path is not a file: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            manifest = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON in {path}: {e}")
            raise

    return manifest


def collect_manifest_errors(manifest: Any) -> List[ManifestError]:
    """
    Check a parsed manifest and return every problem found.

    Args:
        manifest: Parsed config.json contents

    Returns:
        List of validation errors (empty if valid)
    """
    errors: List[ManifestError] = []

    if not isinstance(manifest, dict):
        errors.append(
            ManifestError("manifest", "Must be a JSON object", type(manifest).__name__)
        )
        return errors

    if _is_blank(manifest.get("version")):
        errors.append(ManifestError("version", "Ad config missing version field"))

    ads = manifest.get("ads")
    if ads is None:
        errors.append(ManifestError("ads", "Ad config missing ads array"))
        return errors
    if not isinstance(ads, list):
        errors.append(
            ManifestError("ads", "Ad config ads field must be an array", type(ads).__name__)
        )
        return errors

    seen_ids: Dict[Any, int] = {}
    for index, ad in enumerate(ads):
        errors.extend(_validate_ad(index, ad))

        if isinstance(ad, dict) and not _is_blank(ad.get("id")):
            ad_id = ad["id"]
            if not _is_hashable(ad_id):
                continue
            if ad_id in seen_ids:
                errors.append(
                    ManifestError(
                        f"ads[{index}].id",
                        f"Ad {index} has duplicate id (first used by ad {seen_ids[ad_id]})",
                        ad_id,
                    )
                )
            else:
                seen_ids[ad_id] = index

    return errors


@log_function_call
def validate_manifest(manifest: Any) -> None:
    """
    Validate a parsed manifest before anything is uploaded.

    Args:
        manifest: Parsed config.json contents

    Raises:
        ManifestValidationError: If any check fails. The message names the
            offending field and ad index, e.g. "Ad 0 missing required field: title".
    """
    errors = collect_manifest_errors(manifest)
    if errors:
        logger.warning(f"Ad manifest validation failed with {len(errors)} error(s)")
        raise ManifestValidationError(errors)

    _warn_on_optional_fields(manifest["ads"])
    logger.info(f"Ad configuration is valid ({len(manifest['ads'])} ads)")


def _validate_ad(index: int, ad: Any) -> List[ManifestError]:
    prefix = f"ads[{index}]"

    if not isinstance(ad, dict):
        return [ManifestError(prefix, f"Ad {index} must be an object", type(ad).__name__)]

    errors: List[ManifestError] = []
    for field in REQUIRED_AD_FIELDS:
        if _is_blank(ad.get(field)):
            errors.append(
                ManifestError(f"{prefix}.{field}", f"Ad {index} missing required field: {field}")
            )

    media_type = ad.get("mediaType")
    if not _is_blank(media_type) and media_type not in VALID_MEDIA_TYPES:
        errors.append(
            ManifestError(
                f"{prefix}.mediaType",
                f"Ad {index} has invalid mediaType (must be 'video' or 'image')",
                media_type,
            )
        )

    credits = ad.get("creditsReward")
    if not _is_blank(credits) and not _is_positive_number(credits):
        errors.append(
            ManifestError(
                f"{prefix}.creditsReward",
                f"Ad {index} has invalid creditsReward (must be positive number)",
                credits,
            )
        )

    return errors


def _warn_on_optional_fields(ads: List[Dict[str, Any]]) -> None:
    for index, ad in enumerate(ads):
        if "duration" in ad and not _is_positive_number(ad["duration"]):
            logger.warning(f"Ad {index} has non-positive or non-numeric duration: {ad['duration']!r}")
        if "active" in ad and not isinstance(ad["active"], bool):
            logger.warning(f"Ad {index} has non-boolean active flag: {ad['active']!r}")
        if "metadata" in ad and not isinstance(ad["metadata"], dict):
            logger.warning(f"Ad {index} metadata is not an object: {type(ad['metadata']).__name__}")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _is_positive_number(value: Any) -> bool:
    # bool is an int subclass but "true" is not a reward
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # isfinite() overflows on ints too large for a float
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return value > 0


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True

"""
Ad publisher implementation.

Rewrites local media references in a validated manifest to public Spaces
URLs, uploads every media file, then uploads the rewritten manifest. Keys
that already exist are skipped unless ``force`` is set; in dry-run mode all
existence checks still run but nothing is written.

Example usage:
    >>> from ads_publisher.publisher import publish_ads
    >>> from ads_publisher.storage import SpacesStorage
    >>> storage = SpacesStorage.from_config(config)
    >>> report = publish_ads(manifest, config, storage)
    >>> print(f"{report.uploaded} uploaded, {report.skipped} skipped")
"""

import copy
import json
import posixpath
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
from dataclasses import dataclass, field

from ads_publisher.storage.base import ObjectStorage
from ads_publisher.utils.config import PublisherConfig
from ads_publisher.utils.logging import get_logger, log_function_call
from ads_publisher.utils.metrics import PublishMetrics

logger = get_logger(__name__)

MEDIA_PREFIX = "ads/media"
MANIFEST_KEY = "ads/config.json"

VIDEO_EXTENSIONS = [".mp4", ".mov", ".avi", ".webm"]
IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".webp"]
MEDIA_EXTENSIONS = VIDEO_EXTENSIONS + IMAGE_EXTENSIONS

CONTENT_TYPES = {
    ".json": "application/json",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".webm": "video/webm",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".txt": "text/plain",
    ".md": "text/markdown",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

REWRITTEN_URL_FIELDS = ["mediaUrl", "thumbnailUrl"]


class PublishError(Exception):
    """Raised when the manifest itself cannot be published."""


@dataclass
class PublishItem:
    """
    Outcome for one object.

    Attributes:
        key: Destination key in the bucket
        kind: "media" or "manifest"
        status: "uploaded", "skipped" or "failed"
        local_path: Source file (None for the manifest)
        size_bytes: Bytes written or that would have been written
        dry_run: True if the write was suppressed
        error_message: Failure description (None unless failed)
    """

    key: str
    kind: str
    status: str
    local_path: Optional[str] = None
    size_bytes: int = 0
    dry_run: bool = False
    error_message: Optional[str] = None


@dataclass
class PublishReport:
    """Summary of one publish run."""

    public_base_url: str
    ad_count: int
    media_files: List[str] = field(default_factory=list)
    items: List[PublishItem] = field(default_factory=list)
    manifest: Dict[str, Any] = field(default_factory=dict)
    dry_run: bool = False
    duration_seconds: float = 0.0

    @property
    def uploaded(self) -> int:
        return sum(1 for item in self.items if item.status == "uploaded")

    @property
    def skipped(self) -> int:
        return sum(1 for item in self.items if item.status == "skipped")

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if item.status == "failed")

    @property
    def manifest_url(self) -> str:
        return f"{self.public_base_url}/{MANIFEST_KEY}"

    @property
    def media_url(self) -> str:
        return f"{self.public_base_url}/{MEDIA_PREFIX}/"


def content_type_for(filename: str) -> str:
    """Return the MIME type for ``filename`` based on its extension."""
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), DEFAULT_CONTENT_TYPE)


def media_key(filename: str) -> str:
    """Destination key for a media file."""
    return f"{MEDIA_PREFIX}/{filename}"


def public_media_url(public_base_url: str, filename: str) -> str:
    """Public URL a media file is served from once published."""
    return f"{public_base_url.rstrip('/')}/{media_key(filename)}"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@log_function_call
def discover_media_files(media_dir: Union[str, Path]) -> List[str]:
    """
    List uploadable media files in ``media_dir``.

    Only regular files with an allowed extension (case-insensitive) are
    returned, sorted by name. A missing directory is not an error.

    Args:
        media_dir: Directory to scan

    Returns:
        File names (not paths)
    """
    media_path = Path(media_dir)
    if not media_path.is_dir():
        logger.warning(f"Media directory not found or empty: {media_path}")
        return []

    media_files = sorted(
        entry.name
        for entry in media_path.iterdir()
        if entry.is_file() and entry.suffix.lower() in MEDIA_EXTENSIONS
    )
    logger.info(f"Found {len(media_files)} media files")
    return media_files


def rewrite_manifest_urls(
    manifest: Dict[str, Any],
    media_files: Iterable[str],
    public_base_url: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Point local media references at their published URLs.

    ``mediaUrl`` and ``thumbnailUrl`` values that do not start with ``http``
    are replaced by ``<public_base_url>/ads/media/<basename>`` when the
    basename is one of ``media_files``; everything else is left as is.
    ``lastUpdated`` is set to the current time.

    Args:
        manifest: Validated manifest (not modified)
        media_files: File names found in the media directory
        public_base_url: Base URL of the bucket
        now: Timestamp override for ``lastUpdated``

    Returns:
        Rewritten copy of the manifest

    Example:
        >>> rewritten = rewrite_manifest_urls(
        ...     {"version": "1", "ads": [{"mediaUrl": "media/x.mp4"}]},
        ...     ["x.mp4"],
        ...     "https://cdn.example.com",
        ... )
        >>> rewritten["ads"][0]["mediaUrl"]
        'https://cdn.example.com/ads/media/x.mp4'
    """
    available = set(media_files)
    updated = copy.deepcopy(manifest)

    for ad in updated.get("ads", []):
        for url_field in REWRITTEN_URL_FIELDS:
            value = ad.get(url_field)
            if not value or not isinstance(value, str) or value.startswith("http"):
                continue
            filename = posixpath.basename(value.replace("\\", "/"))
            if filename in available:
                ad[url_field] = public_media_url(public_base_url, filename)
                logger.debug(f"Ad {ad.get('id')}: {url_field} {value} -> {ad[url_field]}")
            else:
                logger.warning(
                    f"Ad {ad.get('id')}: {url_field} {value} not found in media directory, leaving as is"
                )

    updated["lastUpdated"] = utc_timestamp(now)
    return updated


def upload_media_file(
    storage: ObjectStorage,
    media_dir: Path,
    filename: str,
    config: PublisherConfig,
) -> PublishItem:
    """
    Publish one media file, honouring the skip/force/dry-run policy.

    Read or upload errors are caught and returned as a failed item.
    """
    local_path = media_dir / filename
    key = media_key(filename)

    if not config.force and storage.exists(key):
        logger.info(f"Skipping {filename} (already exists, use --force to overwrite)")
        return PublishItem(key=key, kind="media", status="skipped", local_path=str(local_path))

    logger.info(f"Uploading {filename}...")
    try:
        body = local_path.read_bytes()
        if not config.dry_run:
            storage.put_object(key, body, content_type_for(filename), public=True)
    except Exception as e:
        error_msg = f"Failed to upload {local_path} to {key}: {e}"
        logger.error(error_msg, exc_info=True)
        return PublishItem(
            key=key,
            kind="media",
            status="failed",
            local_path=str(local_path),
            dry_run=config.dry_run,
            error_message=error_msg,
        )

    logger.info(f"Uploaded {filename} to {key}")
    return PublishItem(
        key=key,
        kind="media",
        status="uploaded",
        local_path=str(local_path),
        size_bytes=len(body),
        dry_run=config.dry_run,
    )


def upload_manifest(
    storage: ObjectStorage,
    manifest: Dict[str, Any],
    config: PublisherConfig,
) -> PublishItem:
    """
    Publish the rewritten manifest to ``ads/config.json``.

    Raises:
        PublishError: If the upload fails
    """
    if not config.force and storage.exists(MANIFEST_KEY):
        logger.info("Skipping config.json (already exists, use --force to overwrite)")
        return PublishItem(key=MANIFEST_KEY, kind="manifest", status="skipped")

    logger.info("Uploading updated configuration...")
    body = json.dumps(manifest, indent=2, ensure_ascii=False).encode("utf-8")

    if not config.dry_run:
        try:
            storage.put_object(MANIFEST_KEY, body, CONTENT_TYPES[".json"], public=True)
        except Exception as e:
            raise PublishError(f"Failed to upload configuration to {MANIFEST_KEY}: {e}") from e

    logger.info(f"Uploaded configuration to {MANIFEST_KEY}")
    return PublishItem(
        key=MANIFEST_KEY,
        kind="manifest",
        status="uploaded",
        size_bytes=len(body),
        dry_run=config.dry_run,
    )


@log_function_call
def publish_ads(
    manifest: Dict[str, Any],
    config: PublisherConfig,
    storage: ObjectStorage,
    metrics: Optional[PublishMetrics] = None,
    now: Optional[datetime] = None,
) -> PublishReport:
    """
    Publish a validated manifest and its media.

    Media files are processed one at a time in name order; the manifest is
    always written last so its URLs never point at objects that are not
    there yet.

    Args:
        manifest: Validated manifest
        config: Run configuration (config dir, dry-run, force, public URL)
        storage: Destination object storage
        metrics: Optional metrics sink
        now: Timestamp override for ``lastUpdated``

    Returns:
        PublishReport with per-object outcomes

    Raises:
        PublishError: If the manifest upload fails
    """
    start_time = time.time()
    public_base_url = config.public_base_url

    if config.dry_run:
        logger.info("DRY RUN: No files will actually be uploaded")

    media_files = discover_media_files(config.media_dir)
    updated_manifest = rewrite_manifest_urls(manifest, media_files, public_base_url, now=now)

    report = PublishReport(
        public_base_url=public_base_url,
        ad_count=len(updated_manifest.get("ads", [])),
        media_files=media_files,
        manifest=updated_manifest,
        dry_run=config.dry_run,
    )

    for filename in media_files:
        item = upload_media_file(storage, config.media_dir, filename, config)
        report.items.append(item)
        _record(metrics, item)

    try:
        item = upload_manifest(storage, updated_manifest, config)
    except PublishError:
        _record(metrics, PublishItem(key=MANIFEST_KEY, kind="manifest", status="failed"))
        raise
    report.items.append(item)
    _record(metrics, item)

    report.duration_seconds = time.time() - start_time
    logger.info(
        f"Publish complete: {report.uploaded} uploaded, {report.skipped} skipped, "
        f"{report.failed} failed ({report.duration_seconds:.2f}s)"
    )
    return report


def _record(metrics: Optional[PublishMetrics], item: PublishItem) -> None:
    if metrics is not None:
        size = 0 if item.dry_run else item.size_bytes
        metrics.record_object(kind=item.kind, status=item.status, size=size)


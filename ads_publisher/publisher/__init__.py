"""
Publisher for ad media and manifests.

Rewrites local media references to public URLs and uploads media files and
the manifest to object storage with skip-if-exists semantics.
"""

from .publisher import (
    MANIFEST_KEY,
    MEDIA_EXTENSIONS,
    MEDIA_PREFIX,
    PublishError,
    PublishItem,
    PublishReport,
    content_type_for,
    discover_media_files,
    publish_ads,
    public_media_url,
    rewrite_manifest_urls,
    upload_manifest,
    upload_media_file,
)

__all__ = [
    "MANIFEST_KEY",
    "MEDIA_EXTENSIONS",
    "MEDIA_PREFIX",
    "PublishError",
    "PublishItem",
    "PublishReport",
    "content_type_for",
    "discover_media_files",
    "publish_ads",
    "public_media_url",
    "rewrite_manifest_urls",
    "upload_manifest",
    "upload_media_file",
]

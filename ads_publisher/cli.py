"""
Command-line entry point: publish custom ads to DigitalOcean Spaces.

Usage:
    ads-publish
    ads-publish --config-dir ./custom-ads
    ads-publish --config-dir ./custom-ads --dry-run
    ads-publish --config-dir ./custom-ads --force
    ads-publish --config-dir ./new-ads --init
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ads_publisher.manifest import (
    ManifestValidationError,
    create_example_config,
    load_manifest,
    validate_manifest,
)
from ads_publisher.publisher import PublishError, PublishReport, publish_ads
from ads_publisher.storage import ObjectStorage, SpacesStorage
from ads_publisher.utils.config import (
    REQUIRED_ENV_VARS,
    MissingEnvironmentError,
    PublisherConfig,
)
from ads_publisher.utils.logging import get_logger, get_run_id, setup_logging
from ads_publisher.utils.metrics import PublishMetrics

logger = get_logger(__name__)

EPILOG = """
Directory structure expected:
  <config-dir>/
  ├── config.json              # Ad definitions
  ├── media/
  │   ├── game1-trailer.mp4
  │   ├── game1-thumb.jpg
  │   └── game2-preview.mp4
  └── README.md                # Optional documentation

Environment variables required:
  DO_SPACES_ACCESS_KEY         # DigitalOcean Spaces access key
  DO_SPACES_SECRET_KEY         # DigitalOcean Spaces secret key
  DO_SPACES_BUCKET             # DigitalOcean Spaces bucket name
  DO_SPACES_ENDPOINT           # DigitalOcean Spaces endpoint
  DO_SPACES_REGION             # DigitalOcean Spaces region
  DO_SPACES_PUBLIC_URL         # Optional public URL override
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = _ArgumentParser(
        prog="ads-publish",
        description="Upload Custom Ads to DigitalOcean Spaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
        allow_abbrev=False,
    )

    parser.add_argument(
        "--config-dir",
        default=".",
        metavar="<path>",
        help="Path to ads configuration directory (default: .)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be uploaded without actually uploading",
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing files",
    )

    parser.add_argument(
        "--init",
        action="store_true",
        help="Create an example configuration in --config-dir if it does not exist",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def print_summary(report: PublishReport) -> None:
    """Print the human-readable upload summary."""
    print("\n📊 Upload Summary:")
    print(f"   ✅ Uploaded: {report.uploaded} files")
    print(f"   ⏭️  Skipped: {report.skipped} files")
    if report.failed:
        print(f"   ❌ Failed: {report.failed} files")
        for item in report.items:
            if item.status == "failed":
                print(f"      • {Path(item.local_path or item.key).name}: {item.error_message}")
    print(f"   🎯 Total ads: {report.ad_count}")

    if report.dry_run:
        print("\n🧪 This was a dry run. Use without --dry-run to actually upload files.")
        return

    print("\n🎉 Upload completed successfully!")
    print("\n🔗 Your ads will be available at:")
    print(f"   Config: {report.manifest_url}")
    if report.media_files:
        print(f"   Media: {report.media_url}")
    print(
        "\n💡 Tip: Use the /api/ads/invalidate-cache endpoint to refresh "
        "the ad cache in your application."
    )


def run(config: PublisherConfig, storage: Optional[ObjectStorage] = None) -> int:
    """
    Validate and publish the ads in ``config.config_dir``.

    Args:
        config: Run configuration
        storage: Storage backend (a SpacesStorage is built from config if None)

    Returns:
        Process exit code
    """
    config_dir = Path(config.config_dir).resolve()

    print("🚀 Starting custom ads upload...")
    print(f"📁 Config directory: {config_dir}")
    print(f"🪣 Bucket: {config.bucket}")
    print(f"🌐 Public URL: {config.public_base_url}")
    if config.dry_run:
        print("🧪 DRY RUN: No files will actually be uploaded")

    if not config_dir.is_dir():
        print(f"❌ Config directory not found: {config_dir}", file=sys.stderr)
        print(
            "Create the directory and add your ads configuration "
            "(ads-publish --init --config-dir <path> creates an example).",
            file=sys.stderr,
        )
        return 1

    try:
        manifest = load_manifest(config.manifest_path)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load manifest: {e}")
        print(f"❌ Failed to load config.json from {config.manifest_path}", file=sys.stderr)
        print("Make sure the file exists and contains valid JSON.", file=sys.stderr)
        return 1

    try:
        validate_manifest(manifest)
    except ManifestValidationError as e:
        print(f"❌ Invalid ad configuration: {e}", file=sys.stderr)
        return 1
    print(f"✅ Ad configuration is valid ({len(manifest['ads'])} ads)")

    metrics = PublishMetrics()
    try:
        if storage is None:
            storage = SpacesStorage.from_config(config, metrics=metrics)

        with metrics.track_run():
            report = publish_ads(manifest, config, storage, metrics=metrics)

    except PublishError as e:
        print(f"❌ Upload failed: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"❌ Upload failed: {e}", file=sys.stderr)
        return 1

    finally:
        if config.metrics_file:
            metrics.write_textfile(config.metrics_file)

    print_summary(report)
    return 0


def main(argv: Optional[List[str]] = None, storage: Optional[ObjectStorage] = None) -> int:
    """Main entry point for the publish CLI."""
    args = parse_args(argv)

    if args.init:
        setup_logging(level="DEBUG" if args.verbose else "INFO")
        if create_example_config(args.config_dir):
            target = Path(args.config_dir).resolve()
            print(f"✅ Created example configuration in {target}")
            print(f"📝 Edit {target / 'config.json'} and add media files to {target / 'media'}")
            print(f"📖 See {target / 'README.md'} for more information")
        else:
            print(f"⚠️  {Path(args.config_dir).resolve()} already exists, nothing created")
        return 0

    try:
        config = PublisherConfig.from_env(
            config_dir=args.config_dir,
            dry_run=args.dry_run,
            force=args.force,
            verbose=args.verbose,
        )
    except MissingEnvironmentError as e:
        print(
            f"❌ Missing required environment variables: {', '.join(e.missing)}",
            file=sys.stderr,
        )
        print("Please set these environment variables before running this script.", file=sys.stderr)
        print(f"Required: {', '.join(REQUIRED_ENV_VARS)}", file=sys.stderr)
        return 1

    setup_logging(level=config.log_level)
    logger.info(f"Publish run {get_run_id()} started")

    try:
        return run(config, storage=storage)
    except KeyboardInterrupt:
        print("\n⚠️  Upload cancelled by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())

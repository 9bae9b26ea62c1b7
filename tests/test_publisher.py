"""
Unit tests for the publisher module.

Uses the in-memory storage fake so no network access or credentials are
needed; every write is recorded on the fake.
"""

import json
import logging
import re
from datetime import datetime, timezone

import pytest

from ads_publisher.manifest import validate_manifest
from ads_publisher.publisher import (
    MANIFEST_KEY,
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
from ads_publisher.storage import InMemoryStorage
from ads_publisher.utils.metrics import PublishMetrics
from helpers import PUBLIC_BASE, make_ad, make_manifest, write_ads_dir

FIXED_NOW = datetime(2026, 10, 18, 9, 30, 15, 123456, tzinfo=timezone.utc)


class TestContentTypeFor:
    """Test extension to MIME type mapping."""

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("trailer.mp4", "video/mp4"),
            ("clip.MOV", "video/quicktime"),
            ("old.avi", "video/x-msvideo"),
            ("loop.webm", "video/webm"),
            ("thumb.jpg", "image/jpeg"),
            ("thumb.JPEG", "image/jpeg"),
            ("banner.png", "image/png"),
            ("anim.gif", "image/gif"),
            ("hero.webp", "image/webp"),
            ("logo.svg", "image/svg+xml"),
            ("config.json", "application/json"),
            ("notes.txt", "text/plain"),
            ("README.md", "text/markdown"),
        ],
    )
    def test_known_extensions(self, filename, expected):
        assert content_type_for(filename) == expected

    @pytest.mark.parametrize("filename", ["archive.zip", "noextension", "movie.mkv"])
    def test_unknown_extensions_fall_back(self, filename):
        assert content_type_for(filename) == "application/octet-stream"


class TestDiscoverMediaFiles:
    """Test media directory scanning."""

    def test_filters_by_extension_and_sorts(self, tmp_path):
        media = tmp_path / "media"
        media.mkdir()
        for name in ["b.png", "a.mp4", "notes.txt", "C.WEBP", "clip.mkv", ".DS_Store"]:
            (media / name).write_bytes(b"x")

        assert discover_media_files(media) == ["C.WEBP", "a.mp4", "b.png"]

    def test_all_allowed_extensions(self, tmp_path):
        media = tmp_path / "media"
        media.mkdir()
        names = ["a.mp4", "b.mov", "c.avi", "d.webm", "e.jpg", "f.jpeg", "g.png", "h.gif", "i.webp"]
        for name in names:
            (media / name).write_bytes(b"x")

        assert discover_media_files(media) == names

    def test_skips_subdirectories(self, tmp_path):
        media = tmp_path / "media"
        (media / "nested.mp4").mkdir(parents=True)
        (media / "real.mp4").write_bytes(b"x")

        assert discover_media_files(media) == ["real.mp4"]

    def test_missing_directory_yields_nothing(self, tmp_path, caplog):
        assert discover_media_files(tmp_path / "media") == []
        assert "Media directory not found" in caplog.text

    def test_file_instead_of_directory_yields_nothing(self, tmp_path):
        not_a_dir = tmp_path / "media"
        not_a_dir.write_text("oops")

        assert discover_media_files(not_a_dir) == []


class TestRewriteManifestUrls:
    """Test local media reference rewriting."""

    def test_rewrites_local_media_url(self):
        manifest = make_manifest(make_ad(mediaUrl="media/x.mp4"))

        updated = rewrite_manifest_urls(manifest, ["x.mp4"], PUBLIC_BASE, now=FIXED_NOW)

        assert updated["ads"][0]["mediaUrl"] == f"{PUBLIC_BASE}/ads/media/x.mp4"

    def test_rewrites_thumbnail_url(self):
        manifest = make_manifest(make_ad(thumbnailUrl="media/thumb.jpg"))

        updated = rewrite_manifest_urls(
            manifest, ["game1-trailer.mp4", "thumb.jpg"], PUBLIC_BASE, now=FIXED_NOW
        )

        assert updated["ads"][0]["thumbnailUrl"] == f"{PUBLIC_BASE}/ads/media/thumb.jpg"
        assert updated["ads"][0]["mediaUrl"] == f"{PUBLIC_BASE}/ads/media/game1-trailer.mp4"

    def test_uses_basename_of_nested_path(self):
        manifest = make_manifest(make_ad(mediaUrl="./assets/videos/x.mp4"))

        updated = rewrite_manifest_urls(manifest, ["x.mp4"], PUBLIC_BASE, now=FIXED_NOW)

        assert updated["ads"][0]["mediaUrl"] == f"{PUBLIC_BASE}/ads/media/x.mp4"

    def test_leaves_absolute_urls_untouched(self):
        url = "https://cdn.example.com/x.mp4"
        manifest = make_manifest(make_ad(mediaUrl=url, thumbnailUrl="http://cdn.example.com/t.jpg"))

        updated = rewrite_manifest_urls(manifest, ["x.mp4", "t.jpg"], PUBLIC_BASE, now=FIXED_NOW)

        assert updated["ads"][0]["mediaUrl"] == url
        assert updated["ads"][0]["thumbnailUrl"] == "http://cdn.example.com/t.jpg"

    def test_leaves_undiscovered_files_untouched(self):
        manifest = make_manifest(make_ad(mediaUrl="media/missing.mp4"))

        updated = rewrite_manifest_urls(manifest, ["other.mp4"], PUBLIC_BASE, now=FIXED_NOW)

        assert updated["ads"][0]["mediaUrl"] == "media/missing.mp4"

    def test_absent_thumbnail_not_added(self):
        updated = rewrite_manifest_urls(make_manifest(), ["game1-trailer.mp4"], PUBLIC_BASE)

        assert "thumbnailUrl" not in updated["ads"][0]

    def test_stamps_last_updated(self):
        updated = rewrite_manifest_urls(make_manifest(), [], PUBLIC_BASE, now=FIXED_NOW)

        assert updated["lastUpdated"] == "2026-10-18T09:30:15.123Z"

    def test_default_timestamp_is_utc_iso(self):
        updated = rewrite_manifest_urls(make_manifest(), [], PUBLIC_BASE)

        stamp = updated["lastUpdated"]
        assert stamp.endswith("Z")
        assert stamp != "2026-01-01T00:00:00.000Z"
        datetime.strptime(stamp, "%Y-%m-%dT%H:%M:%S.%fZ")

    def test_does_not_mutate_input(self):
        manifest = make_manifest(make_ad(mediaUrl="media/x.mp4", metadata={"tags": ["a"]}))
        snapshot = json.loads(json.dumps(manifest))

        updated = rewrite_manifest_urls(manifest, ["x.mp4"], PUBLIC_BASE, now=FIXED_NOW)
        updated["ads"][0]["metadata"]["tags"].append("b")

        assert manifest == snapshot

    def test_preserves_other_fields(self):
        manifest = make_manifest(make_ad(metadata={"category": "action"}, active=False))
        manifest["owner"] = "growth-team"

        updated = rewrite_manifest_urls(manifest, [], PUBLIC_BASE, now=FIXED_NOW)

        assert updated["owner"] == "growth-team"
        assert updated["version"] == "1.0.0"
        assert updated["ads"][0]["metadata"] == {"category": "action"}
        assert updated["ads"][0]["active"] is False

    def test_public_media_url_strips_trailing_slash(self):
        assert public_media_url("https://cdn.example.com/", "x.mp4") == (
            "https://cdn.example.com/ads/media/x.mp4"
        )


class TestUploadMediaFile:
    """Test the per-file upload step."""

    def test_uploads_new_file_public_with_content_type(self, ads_dir, make_config, storage):
        item = upload_media_file(storage, ads_dir / "media", "game1-trailer.mp4", make_config())

        assert item.status == "uploaded"
        assert item.key == "ads/media/game1-trailer.mp4"
        stored = storage.objects["ads/media/game1-trailer.mp4"]
        assert stored.body == b"bytes of game1-trailer.mp4"
        assert stored.content_type == "video/mp4"
        assert stored.public is True
        assert item.size_bytes == len(stored.body)

    def test_skips_existing_file(self, ads_dir, make_config, storage):
        storage.put_object("ads/media/game1-trailer.mp4", b"old", "video/mp4")
        storage.put_calls.clear()

        item = upload_media_file(storage, ads_dir / "media", "game1-trailer.mp4", make_config())

        assert item.status == "skipped"
        assert storage.put_calls == []
        assert storage.get("ads/media/game1-trailer.mp4") == b"old"

    def test_force_overwrites_without_checking(self, ads_dir, make_config, storage):
        storage.put_object("ads/media/game1-trailer.mp4", b"old", "video/mp4")

        item = upload_media_file(
            storage, ads_dir / "media", "game1-trailer.mp4", make_config(force=True)
        )

        assert item.status == "uploaded"
        assert storage.exists_calls == []
        assert storage.get("ads/media/game1-trailer.mp4") == b"bytes of game1-trailer.mp4"

    def test_dry_run_checks_but_does_not_write(self, ads_dir, make_config, storage):
        item = upload_media_file(
            storage, ads_dir / "media", "game1-trailer.mp4", make_config(dry_run=True)
        )

        assert item.status == "uploaded"
        assert item.dry_run is True
        assert storage.exists_calls == ["ads/media/game1-trailer.mp4"]
        assert storage.put_calls == []

    def test_storage_failure_is_caught(self, ads_dir, make_config, storage):
        storage.fail_keys.add("ads/media/game1-trailer.mp4")

        item = upload_media_file(storage, ads_dir / "media", "game1-trailer.mp4", make_config())

        assert item.status == "failed"
        assert "game1-trailer.mp4" in item.error_message
        assert item.local_path.endswith("game1-trailer.mp4")

    def test_unreadable_file_is_caught(self, ads_dir, make_config, storage):
        item = upload_media_file(storage, ads_dir / "media", "vanished.mp4", make_config())

        assert item.status == "failed"
        assert storage.put_calls == []


class TestUploadManifest:
    """Test the manifest upload step."""

    def test_uploads_pretty_json(self, make_config, storage):
        manifest = make_manifest()

        item = upload_manifest(storage, manifest, make_config())

        assert item.status == "uploaded"
        stored = storage.objects[MANIFEST_KEY]
        assert stored.content_type == "application/json"
        assert stored.public is True
        assert json.loads(stored.body) == manifest
        assert stored.body.decode("utf-8") == json.dumps(manifest, indent=2)

    def test_skips_existing_manifest(self, make_config, storage):
        storage.put_object(MANIFEST_KEY, b"{}", "application/json")

        item = upload_manifest(storage, make_manifest(), make_config())

        assert item.status == "skipped"
        assert storage.get(MANIFEST_KEY) == b"{}"

    def test_force_overwrites_manifest(self, make_config, storage):
        storage.put_object(MANIFEST_KEY, b"{}", "application/json")

        item = upload_manifest(storage, make_manifest(), make_config(force=True))

        assert item.status == "uploaded"
        assert json.loads(storage.get(MANIFEST_KEY))["version"] == "1.0.0"

    def test_failure_raises_publish_error(self, make_config, storage):
        storage.fail_keys.add(MANIFEST_KEY)

        with pytest.raises(PublishError, match="ads/config.json"):
            upload_manifest(storage, make_manifest(), make_config())

    def test_dry_run_skips_write(self, make_config, storage):
        item = upload_manifest(storage, make_manifest(), make_config(dry_run=True))

        assert item.status == "uploaded"
        assert item.dry_run is True
        assert storage.put_calls == []


class TestPublishAds:
    """Test the end-to-end publish loop."""

    def test_uploads_media_then_manifest(self, tmp_path, make_config, storage):
        root = write_ads_dir(
            tmp_path / "ads",
            make_manifest(
                make_ad(thumbnailUrl="media/game1-thumb.jpg"),
                make_ad(id="oyk-game-2", mediaType="image", mediaUrl="media/game2.png"),
            ),
            media=["game1-trailer.mp4", "game1-thumb.jpg", "game2.png"],
        )
        config = make_config(config_dir=root)
        manifest = json.loads((root / "config.json").read_text())

        report = publish_ads(manifest, config, storage, now=FIXED_NOW)

        assert storage.put_calls == [
            "ads/media/game1-thumb.jpg",
            "ads/media/game1-trailer.mp4",
            "ads/media/game2.png",
            "ads/config.json",
        ]
        assert report.uploaded == 4
        assert report.skipped == 0
        assert report.failed == 0
        assert report.ad_count == 2

        published = json.loads(storage.get(MANIFEST_KEY))
        assert published["ads"][0]["mediaUrl"] == f"{PUBLIC_BASE}/ads/media/game1-trailer.mp4"
        assert published["ads"][0]["thumbnailUrl"] == f"{PUBLIC_BASE}/ads/media/game1-thumb.jpg"
        assert published["ads"][1]["mediaUrl"] == f"{PUBLIC_BASE}/ads/media/game2.png"
        assert published["lastUpdated"] == "2026-10-18T09:30:15.123Z"

    def test_manifest_is_always_last(self, tmp_path, make_config, storage):
        root = write_ads_dir(tmp_path / "ads", media=["z.mp4", "a.mp4", "m.jpg"])

        publish_ads(make_manifest(), make_config(config_dir=root), storage)

        assert storage.put_calls[-1] == MANIFEST_KEY

    def test_uses_public_url_override(self, ads_dir, make_config, storage):
        config = make_config(public_url="https://ads.oyk.gg/")

        report = publish_ads(make_manifest(), config, storage)

        published = json.loads(storage.get(MANIFEST_KEY))
        assert published["ads"][0]["mediaUrl"] == "https://ads.oyk.gg/ads/media/game1-trailer.mp4"
        assert report.manifest_url == "https://ads.oyk.gg/ads/config.json"

    def test_missing_media_dir_publishes_manifest_only(self, tmp_path, make_config, storage):
        root = write_ads_dir(tmp_path / "ads", media=[])

        report = publish_ads(make_manifest(), make_config(config_dir=root), storage)

        assert storage.put_calls == [MANIFEST_KEY]
        assert report.media_files == []
        published = json.loads(storage.get(MANIFEST_KEY))
        assert published["ads"][0]["mediaUrl"] == "media/game1-trailer.mp4"

    def test_media_failure_does_not_stop_loop(self, tmp_path, make_config, storage):
        root = write_ads_dir(tmp_path / "ads", media=["a.mp4", "b.mp4", "c.mp4"])
        storage.fail_keys.add("ads/media/b.mp4")

        report = publish_ads(make_manifest(), make_config(config_dir=root), storage)

        assert "ads/media/c.mp4" in storage.objects
        assert MANIFEST_KEY in storage.objects
        assert report.uploaded == 3
        assert report.failed == 1
        failed = [item for item in report.items if item.status == "failed"]
        assert failed[0].key == "ads/media/b.mp4"

    def test_manifest_failure_raises(self, ads_dir, make_config, storage):
        storage.fail_keys.add(MANIFEST_KEY)

        with pytest.raises(PublishError):
            publish_ads(make_manifest(), make_config(), storage)

        assert "ads/media/game1-trailer.mp4" in storage.objects

    def test_second_run_skips_everything(self, ads_dir, make_config, storage):
        first = publish_ads(make_manifest(), make_config(), storage)
        second = publish_ads(make_manifest(), make_config(), storage)

        assert (first.uploaded, first.skipped) == (2, 0)
        assert (second.uploaded, second.skipped) == (0, 2)
        assert storage.put_calls == ["ads/media/game1-trailer.mp4", MANIFEST_KEY]

    def test_dry_run_writes_nothing(self, ads_dir, make_config, storage):
        report = publish_ads(make_manifest(), make_config(dry_run=True), storage)

        assert storage.put_calls == []
        assert storage.objects == {}
        assert storage.exists_calls == ["ads/media/game1-trailer.mp4", MANIFEST_KEY]
        assert report.uploaded == 2
        assert report.dry_run is True
        assert all(item.dry_run for item in report.items)

    def test_dry_run_logs_match_real_run(self, ads_dir, make_config, caplog):
        def run_and_capture(config):
            caplog.clear()
            with caplog.at_level(logging.INFO):
                validate_manifest(make_manifest())
                publish_ads(make_manifest(), config, InMemoryStorage(), now=FIXED_NOW)
            # Drop the run duration, which differs between runs
            return [
                re.sub(r" \(\d+\.\d+s\)$", "", record.getMessage())
                for record in caplog.records
                if record.levelno >= logging.INFO
            ]

        real = run_and_capture(make_config())
        dry = run_and_capture(make_config(dry_run=True))

        assert "DRY RUN: No files will actually be uploaded" in dry
        assert [line for line in dry if not line.startswith("DRY RUN")] == real
        assert "Ad configuration is valid (1 ads)" in real
        assert "Uploaded configuration to ads/config.json" in real

    def test_records_metrics(self, ads_dir, make_config, storage):
        metrics = PublishMetrics()

        publish_ads(make_manifest(), make_config(), storage, metrics=metrics)
        publish_ads(make_manifest(), make_config(), storage, metrics=metrics)

        assert metrics.value("ads_publish_objects_total", kind="media", status="uploaded") == 1
        assert metrics.value("ads_publish_objects_total", kind="media", status="skipped") == 1
        assert metrics.value("ads_publish_objects_total", kind="manifest", status="uploaded") == 1
        assert metrics.value("ads_publish_objects_total", kind="manifest", status="skipped") == 1
        assert metrics.value("ads_publish_bytes_total") > 0

    def test_records_manifest_failure_metric(self, ads_dir, make_config, storage):
        metrics = PublishMetrics()
        storage.fail_keys.add(MANIFEST_KEY)

        with pytest.raises(PublishError):
            publish_ads(make_manifest(), make_config(), storage, metrics=metrics)

        assert metrics.value("ads_publish_objects_total", kind="manifest", status="failed") == 1


class TestPublishReport:
    """Test PublishReport counters and URLs."""

    def test_counts_by_status(self):
        report = PublishReport(
            public_base_url=PUBLIC_BASE,
            ad_count=1,
            items=[
                PublishItem(key="a", kind="media", status="uploaded"),
                PublishItem(key="b", kind="media", status="skipped"),
                PublishItem(key="c", kind="media", status="failed"),
                PublishItem(key=MANIFEST_KEY, kind="manifest", status="uploaded"),
            ],
        )

        assert report.uploaded == 2
        assert report.skipped == 1
        assert report.failed == 1

    def test_urls(self):
        report = PublishReport(public_base_url=PUBLIC_BASE, ad_count=0)

        assert report.manifest_url == f"{PUBLIC_BASE}/ads/config.json"
        assert report.media_url == f"{PUBLIC_BASE}/ads/media/"

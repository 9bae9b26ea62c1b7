"""Shared fixtures for publisher tests."""

from typing import Any

import pytest

from ads_publisher.storage import InMemoryStorage
from ads_publisher.utils.config import PublisherConfig
from helpers import SPACES_ENV, write_ads_dir


@pytest.fixture
def ads_dir(tmp_path):
    """Ads directory with one video ad and its trailer."""
    return write_ads_dir(tmp_path / "custom-ads")


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def make_config(ads_dir):
    """Factory for a PublisherConfig pointed at the ads_dir fixture."""

    def _make(**overrides: Any) -> PublisherConfig:
        values = dict(
            access_key="test-access-key",
            secret_key="test-secret-key",
            bucket="oyk-ads",
            endpoint="nyc3.digitaloceanspaces.com",
            region="nyc3",
            config_dir=ads_dir,
        )
        values.update(overrides)
        return PublisherConfig(**values)

    return _make


@pytest.fixture
def spaces_env(monkeypatch, tmp_path):
    """Export the required Spaces variables and run from an empty directory."""
    for name, value in SPACES_ENV.items():
        monkeypatch.setenv(name, value)
    for name in ("DO_SPACES_PUBLIC_URL", "ADS_METRICS_FILE", "LOG_FORMAT", "LOG_LEVEL", "APP_ENV"):
        monkeypatch.delenv(name, raising=False)
    # No stray .env files from the working directory
    monkeypatch.chdir(tmp_path)
    return dict(SPACES_ENV)

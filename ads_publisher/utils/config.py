"""
Run configuration for the ads publisher.

Collects the DigitalOcean Spaces credentials from the environment (or a
.env file) together with the command-line switches into a single
PublisherConfig that is passed explicitly to every stage.
"""

import os
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass

from dotenv import load_dotenv

REQUIRED_ENV_VARS = [
    "DO_SPACES_ACCESS_KEY",
    "DO_SPACES_SECRET_KEY",
    "DO_SPACES_BUCKET",
    "DO_SPACES_ENDPOINT",
    "DO_SPACES_REGION",
]


class MissingEnvironmentError(ValueError):
    """Raised when one or more required environment variables are unset."""

    def __init__(self, missing: List[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "Missing required environment variables: " + ", ".join(self.missing)
        )


@dataclass
class PublisherConfig:
    """Publisher run configuration."""

    # DigitalOcean Spaces
    access_key: str
    secret_key: str
    bucket: str
    endpoint: str
    region: str
    public_url: Optional[str] = None

    # Command-line switches
    config_dir: Path = Path(".")
    dry_run: bool = False
    force: bool = False

    # Ambient settings
    log_level: str = "INFO"
    metrics_file: Optional[str] = None

    @property
    def endpoint_url(self) -> str:
        """Endpoint URL for the S3 client; a bare host gets https://."""
        if self.endpoint.startswith(("http://", "https://")):
            return self.endpoint
        return f"https://{self.endpoint}"

    @property
    def public_base_url(self) -> str:
        """Base URL that published objects are reachable under."""
        if self.public_url:
            return self.public_url.rstrip("/")
        host = self.endpoint.split("://", 1)[-1].rstrip("/")
        return f"https://{self.bucket}.{host}"

    @property
    def manifest_path(self) -> Path:
        return Path(self.config_dir) / "config.json"

    @property
    def media_dir(self) -> Path:
        return Path(self.config_dir) / "media"

    @classmethod
    def from_env(
        cls,
        config_dir: str = ".",
        dry_run: bool = False,
        force: bool = False,
        verbose: bool = False,
    ) -> "PublisherConfig":
        """
        Load configuration from environment variables.

        Loads ``.env`` from the working directory plus ``.env.production`` or
        ``.env.development`` depending on APP_ENV, without overriding values
        already exported, then reads os.environ.

        Args:
            config_dir: Directory holding config.json and media/
            dry_run: Skip every write to remote storage
            force: Overwrite objects that already exist remotely
            verbose: Force DEBUG logging regardless of LOG_LEVEL

        Returns:
            PublisherConfig instance with loaded values

        Raises:
            MissingEnvironmentError: If required variables are missing; the
                exception lists every missing name, not just the first
        """
        load_env_files()

        missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
        if missing:
            raise MissingEnvironmentError(missing)

        return cls(
            access_key=os.environ["DO_SPACES_ACCESS_KEY"],
            secret_key=os.environ["DO_SPACES_SECRET_KEY"],
            bucket=os.environ["DO_SPACES_BUCKET"],
            endpoint=os.environ["DO_SPACES_ENDPOINT"],
            region=os.environ["DO_SPACES_REGION"],
            public_url=os.getenv("DO_SPACES_PUBLIC_URL") or None,
            config_dir=Path(config_dir),
            dry_run=dry_run,
            force=force,
            log_level="DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO"),
            metrics_file=os.getenv("ADS_METRICS_FILE") or None,
        )


def load_env_files(base_dir: Optional[Path] = None) -> List[Path]:
    """
    Load dotenv files that exist under ``base_dir`` (default: cwd).

    Returns:
        The files that were loaded, in load order
    """
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    app_env = os.getenv("APP_ENV", "development").lower()
    env_specific = ".env.production" if app_env == "production" else ".env.development"

    loaded = []
    for name in (env_specific, ".env"):
        env_path = base / name
        if env_path.is_file():
            load_dotenv(env_path, override=False)
            loaded.append(env_path)
    return loaded

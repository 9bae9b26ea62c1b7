"""
Ad manifest handling.

Loads and validates config.json, and bootstraps an example ads directory.
"""

from .validator import (
    MediaType,
    ManifestError,
    ManifestValidationError,
    REQUIRED_AD_FIELDS,
    collect_manifest_errors,
    load_manifest,
    validate_manifest,
)
from .example import create_example_config, example_manifest

__all__ = [
    "MediaType",
    "ManifestError",
    "ManifestValidationError",
    "REQUIRED_AD_FIELDS",
    "collect_manifest_errors",
    "load_manifest",
    "validate_manifest",
    "create_example_config",
    "example_manifest",
]

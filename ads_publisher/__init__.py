"""
Ads Publisher

Validates a local ad manifest (config.json) and its media directory, then
publishes both to a DigitalOcean Spaces bucket with public-read access,
rewriting local media references to their public URLs.

Subpackages:
- manifest: Manifest loading, validation and example bootstrap
- publisher: URL rewriting and the upload loop
- storage: Object storage interface, Spaces backend and in-memory fake
- utils: Logging, configuration and metrics
"""

__version__ = "0.1.0"

#!/usr/bin/env python3
"""
Upload custom ads to DigitalOcean Spaces.

Thin wrapper around ads_publisher.cli for running from a checkout without
installing the package.

Usage:
    python scripts/upload_ads.py --config-dir ./custom-ads
    python scripts/upload_ads.py --config-dir ./custom-ads --dry-run
    python scripts/upload_ads.py --config-dir ./custom-ads --force
"""

import sys
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from ads_publisher.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())

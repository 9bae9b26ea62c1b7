"""
Object storage backends.

- base: ObjectStorage interface (exists, put_object)
- spaces: DigitalOcean Spaces via boto3
- memory: In-memory fake that records calls
"""

from .base import ObjectStorage, StorageError
from .memory import InMemoryStorage, StoredObject
from .spaces import SpacesStorage

__all__ = [
    "ObjectStorage",
    "StorageError",
    "InMemoryStorage",
    "StoredObject",
    "SpacesStorage",
]

"""In-memory storage backend for tests and local experiments."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from ads_publisher.storage.base import ObjectStorage, StorageError


@dataclass
class StoredObject:
    body: bytes
    content_type: str
    public: bool


@dataclass
class InMemoryStorage(ObjectStorage):
    """
    Dict-backed ObjectStorage that records every call.

    Attributes:
        objects: Stored objects by key
        put_calls: Keys passed to put_object, in call order
        exists_calls: Keys passed to exists, in call order
        fail_keys: Keys whose put_object raises StorageError
    """

    objects: Dict[str, StoredObject] = field(default_factory=dict)
    put_calls: List[str] = field(default_factory=list)
    exists_calls: List[str] = field(default_factory=list)
    fail_keys: Set[str] = field(default_factory=set)

    def exists(self, key: str) -> bool:
        self.exists_calls.append(key)
        return key in self.objects

    def put_object(
        self,
        key: str,
        body: bytes,
        content_type: str,
        public: bool = True,
    ) -> None:
        self.put_calls.append(key)
        if key in self.fail_keys:
            raise StorageError(f"Simulated failure uploading {key}")
        self.objects[key] = StoredObject(body=bytes(body), content_type=content_type, public=public)

    def get(self, key: str) -> Optional[bytes]:
        stored = self.objects.get(key)
        return stored.body if stored is not None else None

    def describe(self) -> str:
        return "memory://"

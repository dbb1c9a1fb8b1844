"""Object storage access for staged release artifacts."""

from src.release.objectstore.client import (
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
    parse_object_url,
)

__all__ = [
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
    "parse_object_url",
]

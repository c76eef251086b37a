"""Infrastructure layer exports."""

from .local_store import InMemoryKeyValueStore, JsonFileStore, KeyValueStore
from .remote import HttpRemoteStore, InMemoryRemoteStore, RemoteStore, RemoteStoreError

__all__ = [
    "HttpRemoteStore",
    "InMemoryKeyValueStore",
    "InMemoryRemoteStore",
    "JsonFileStore",
    "KeyValueStore",
    "RemoteStore",
    "RemoteStoreError",
]

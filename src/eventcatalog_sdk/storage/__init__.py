from eventcatalog_sdk.storage.locator import DocumentLocator
from eventcatalog_sdk.storage.locking import DocumentLock
from eventcatalog_sdk.storage.resolver import VersionResolver
from eventcatalog_sdk.storage.store import ResourceStore

__all__ = [
    "DocumentLocator",
    "DocumentLock",
    "ResourceStore",
    "VersionResolver",
]

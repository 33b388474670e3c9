"""Record stores and the property repository."""

from estate360.db.repository import PropertyRepository
from estate360.db.sqlite_store import SqliteStore
from estate360.db.storage import JsonFileStore, PropertyStore

__all__ = ["JsonFileStore", "PropertyRepository", "PropertyStore", "SqliteStore"]

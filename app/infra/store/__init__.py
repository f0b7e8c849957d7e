from app.infra.store.base import ProgressStore
from app.infra.store.factory import create_store
from app.infra.store.memory import InMemoryStore
from app.infra.store.sql import SQLStore

__all__ = [
    "ProgressStore",
    "InMemoryStore",
    "SQLStore",
    "create_store",
]

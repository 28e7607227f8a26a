from showcase_node.store.interfaces import DataStore
from showcase_node.store.memory import InMemoryDataStore

__all__ = ["DataStore", "InMemoryDataStore"]

"""SQLite storage: schema, connections, and typed repositories."""

from microread.storage.database import get_connection, initialize_database, transaction
from microread.storage.repository import Repository

__all__ = ["Repository", "get_connection", "initialize_database", "transaction"]

"""Shared fixtures for the Microread test suite."""

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from microread.config import ChunkingConfig
from microread.ingestion.chunker import BookChunker
from microread.storage.database import get_connection, initialize_database
from microread.storage.repository import Repository


@pytest.fixture
def db(tmp_path: Path) -> Iterator[sqlite3.Connection]:
    db_path = tmp_path / "test.db"
    initialize_database(db_path)
    conn = get_connection(db_path)
    yield conn
    conn.close()


@pytest.fixture
def repo(db: sqlite3.Connection) -> Repository:
    return Repository(db)


@pytest.fixture
def chunker() -> BookChunker:
    return BookChunker(ChunkingConfig())

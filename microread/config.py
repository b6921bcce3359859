"""Configuration loader for the Microread application."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from microread.errors import InvalidChunkSizeError


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Microread"
    version: str = "1.0.0"
    log_level: str = "INFO"


class ChunkingConfig(BaseModel):
    """Chunk size policy and packing ratios."""

    default_chunk_size: int = 1000
    min_chunk_size: int = 300
    max_chunk_size: int = 3000
    max_ratio: float = 1.2  # flush before a paragraph pushes the buffer past this
    flush_ratio: float = 0.6  # flush at a chapter end once the buffer reaches this

    def validate_chunk_size(self, chunk_size: int) -> int:
        """Check a requested chunk size against the configured bounds.

        Args:
            chunk_size: Target words per chunk.

        Returns:
            The chunk size, unchanged.

        Raises:
            InvalidChunkSizeError: If the size is outside the bounds.
        """
        if not self.min_chunk_size <= chunk_size <= self.max_chunk_size:
            raise InvalidChunkSizeError(
                f"chunk size must be between {self.min_chunk_size} and "
                f"{self.max_chunk_size}, got {chunk_size}"
            )
        return chunk_size


class IntegrityConfig(BaseModel):
    """Thresholds for the chunk integrity analyzer."""

    lookahead: int = 25
    regime_window: int = 8
    regime_min_samples: int = 4
    regime_min_chunks: int = 12
    regime_ratio: float = 1.5


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    sqlite_path: str = "./data/microread.db"
    library_dir: str = "./data/books"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    integrity: IntegrityConfig = Field(default_factory=IntegrityConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    db_path = os.getenv("MICROREAD_DB_PATH")
    if db_path:
        config.storage.sqlite_path = db_path

    return config

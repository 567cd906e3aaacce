"""Build the configured document store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from skinscores.persistence.dynamodb_backend import DynamoDBDocumentStore
from skinscores.persistence.file_backend import FileDocumentStore
from skinscores.persistence.memory_backend import MemoryDocumentStore

if TYPE_CHECKING:
    from skinscores.core.config import PersistenceConfig
    from skinscores.persistence.protocols import IDocumentStore

log = logging.getLogger(__name__)


def create_document_store(config: PersistenceConfig) -> IDocumentStore:
    """Instantiate the backend named by ``config.backend``."""
    log.info("Using %s document store", config.backend)
    if config.backend == "memory":
        return MemoryDocumentStore()
    if config.backend == "file":
        return FileDocumentStore(base_path=config.store_path)
    if config.backend == "dynamodb":
        return DynamoDBDocumentStore(
            table_name=config.table_name,
            aws_region=config.aws_region,
        )
    raise ValueError(f"Unknown persistence backend: {config.backend!r}")

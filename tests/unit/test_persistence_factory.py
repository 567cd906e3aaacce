"""Tests for document store construction from configuration."""

from __future__ import annotations

from pathlib import Path

from skinscores.core.config import PersistenceConfig
from skinscores.persistence.factory import create_document_store
from skinscores.persistence.file_backend import FileDocumentStore
from skinscores.persistence.memory_backend import MemoryDocumentStore


class TestCreateDocumentStore:
    def test_memory_default(self) -> None:
        assert isinstance(create_document_store(PersistenceConfig()), MemoryDocumentStore)

    def test_file(self, tmp_path: Path) -> None:
        store = create_document_store(PersistenceConfig(backend="file", store_path=tmp_path / "docs"))
        assert isinstance(store, FileDocumentStore)
        assert (tmp_path / "docs").is_dir()

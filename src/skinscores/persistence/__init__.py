"""Pluggable document stores for templates, sessions, results and aggregates."""

from __future__ import annotations

from skinscores.persistence.dynamodb_backend import DynamoDBDocumentStore
from skinscores.persistence.factory import create_document_store
from skinscores.persistence.file_backend import FileDocumentStore
from skinscores.persistence.memory_backend import MemoryDocumentStore
from skinscores.persistence.protocols import IDocumentStore, ITransaction
from skinscores.persistence.query import Document, Filter

__all__ = [
    "Document",
    "DynamoDBDocumentStore",
    "FileDocumentStore",
    "Filter",
    "IDocumentStore",
    "ITransaction",
    "MemoryDocumentStore",
    "create_document_store",
]

"""Nested pydantic-settings configuration for the application.

Each group reads its own ``SKINSCORES_<GROUP>_*`` env vars, e.g.::

    export SKINSCORES_PERSISTENCE_BACKEND=dynamodb
    export SKINSCORES_PERSISTENCE_TABLE_NAME=skinscores-documents
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class PersistenceConfig(BaseSettings):
    """Document store configuration.

    Env vars use ``SKINSCORES_PERSISTENCE_`` prefix.
    """

    model_config = {"env_prefix": "SKINSCORES_PERSISTENCE_"}

    backend: Literal["memory", "file", "dynamodb"] = "memory"
    store_path: Path = Path("./data")
    table_name: str = "skinscores-documents"
    aws_region: str = "us-east-1"


class AuthConfig(BaseSettings):
    """Caller identification.

    With ``enabled`` set, a Bearer JWT is required. Otherwise the trusted
    ``X-User-Id`` / ``X-User-Role`` headers identify the caller (local
    development, or behind a gateway that injects them).

    Env vars use ``SKINSCORES_AUTH_`` prefix.
    """

    model_config = {"env_prefix": "SKINSCORES_AUTH_"}

    enabled: bool = False
    jwks_url: str = ""
    jwt_secret: str = ""
    issuer: str = ""
    audience: str = "skinscores"
    algorithm: str = "RS256"
    uid_claim: str = "sub"
    role_claim: str = "role"
    admin_role: str = "admin"
    user_header: str = "X-User-Id"
    role_header: str = "X-User-Role"


class ExportConfig(BaseSettings):
    """Batch export limits.

    Env vars use ``SKINSCORES_EXPORT_`` prefix.
    """

    model_config = {"env_prefix": "SKINSCORES_EXPORT_"}

    chunk_size: int = Field(default=10, ge=1, le=30)
    max_session_ids: int = Field(default=25, ge=1)


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Env vars use ``SKINSCORES_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "SKINSCORES_OBSERVABILITY_"}

    service_name: str = "skinscores"
    log_level: str = "INFO"


class APIConfig(BaseSettings):
    """HTTP server configuration.

    Env vars use ``SKINSCORES_API_`` prefix.
    """

    model_config = {"env_prefix": "SKINSCORES_API_"}

    title: str = "skinscores"
    description: str = "Clinical score calculation, session history and result export."
    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    api: APIConfig = Field(default_factory=APIConfig)

"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skinscores.core.config import AppSettings

log = logging.getLogger(__name__)

# Upper bound on values accepted by a single document store ``in`` query
_MAX_IN_QUERY_VALUES = 30


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig."""
    _check_persistence(settings)
    _check_auth(settings)
    _check_export(settings)


def _check_persistence(settings: AppSettings) -> None:
    """Reject an unnamed DynamoDB table; warn about file persistence in containers."""
    if settings.persistence.backend == "dynamodb" and not settings.persistence.table_name:
        raise ValueError(
            "SKINSCORES_PERSISTENCE_TABLE_NAME is required for the dynamodb backend."
        )

    is_container = bool(
        os.environ.get("ECS_CONTAINER_METADATA_URI")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
    )
    if is_container and settings.persistence.backend in ("file", "memory"):
        log.warning(
            "SKINSCORES_PERSISTENCE_BACKEND=%s in a container environment. "
            "Sessions and results will be lost on container restart. "
            "Consider setting SKINSCORES_PERSISTENCE_BACKEND=dynamodb.",
            settings.persistence.backend,
        )


def _check_auth(settings: AppSettings) -> None:
    """Require an identity claim name; warn when tokens cannot be verified locally."""
    if not settings.auth.enabled:
        log.warning(
            "SKINSCORES_AUTH_ENABLED=false: callers are identified by the %s header. "
            "Only run this way behind a gateway that sets it.",
            settings.auth.user_header,
        )
        return

    if not settings.auth.uid_claim:
        raise ValueError("SKINSCORES_AUTH_UID_CLAIM must name the token claim holding the user id.")

    if not settings.auth.jwks_url and not settings.auth.jwt_secret:
        log.warning(
            "Auth enabled without SKINSCORES_AUTH_JWKS_URL or SKINSCORES_AUTH_JWT_SECRET. "
            "Token signatures will not be verified."
        )


def _check_export(settings: AppSettings) -> None:
    """The chunk size must fit a single ``in`` query."""
    if settings.export.chunk_size > _MAX_IN_QUERY_VALUES:
        raise ValueError(
            f"SKINSCORES_EXPORT_CHUNK_SIZE={settings.export.chunk_size} exceeds "
            f"the {_MAX_IN_QUERY_VALUES}-value limit of an 'in' query."
        )

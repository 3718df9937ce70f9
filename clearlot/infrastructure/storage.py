"""Azure Blob Storage utilities for logos and archived invoices."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContainerClient, ContentSettings

from clearlot.config import get_settings

logger = logging.getLogger(__name__)


class StorageConfigurationError(RuntimeError):
    """Raised when blob storage is used without being configured."""


def is_storage_configured() -> bool:
    settings = get_settings()
    return bool(
        settings.azure_storage_connection_string and settings.azure_storage_container_name
    )


@lru_cache
def _get_blob_service_client() -> BlobServiceClient:
    settings = get_settings()
    if not settings.azure_storage_connection_string:
        msg = "Azure storage connection string is not configured"
        raise StorageConfigurationError(msg)
    return BlobServiceClient.from_connection_string(
        settings.azure_storage_connection_string
    )


@lru_cache
def _get_container_name() -> str:
    settings = get_settings()
    if not settings.azure_storage_container_name:
        msg = "Azure storage container name is not configured"
        raise StorageConfigurationError(msg)
    return settings.azure_storage_container_name


@lru_cache
def _get_container_client() -> ContainerClient:
    service_client = _get_blob_service_client()
    container_name = _get_container_name()
    try:
        service_client.create_container(container_name)
    except ResourceExistsError:
        pass
    return service_client.get_container_client(container_name)


def reset_storage_clients() -> None:
    """Forget cached clients so new settings are picked up."""

    _get_blob_service_client.cache_clear()
    _get_container_name.cache_clear()
    _get_container_client.cache_clear()


def upload_blob(
    blob_path: str,
    data: bytes,
    *,
    content_type: Optional[str] = None,
) -> str:
    """Upload ``data`` at ``blob_path`` and return the permanent blob URL."""

    container_client = _get_container_client()
    blob_client = container_client.get_blob_client(blob_path)
    content_settings = None
    if content_type is not None:
        content_settings = ContentSettings(content_type=content_type)
    blob_client.upload_blob(
        data,
        overwrite=True,
        content_settings=content_settings,
    )
    logger.info("Uploaded blob %s (%s bytes)", blob_path, len(data))
    return blob_client.url


__all__ = [
    "StorageConfigurationError",
    "is_storage_configured",
    "reset_storage_clients",
    "upload_blob",
]

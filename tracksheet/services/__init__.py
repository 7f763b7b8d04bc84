"""
External collaborators: object storage and metadata persistence.
"""
from .metadata import FileRecord, LocalMetadataStore, MetadataStore
from .storage import (
    HttpStorageClient,
    LocalStorageClient,
    StorageClient,
    fetch_url,
    make_storage_path,
)


def create_storage_client(config) -> StorageClient:
    """Remote storage if a URL is configured, otherwise the local data dir."""
    if config.uses_remote_storage:
        return HttpStorageClient(config.storage_url, config.storage_bucket,
                                 config.storage_key, timeout=config.request_timeout)
    return LocalStorageClient(config.resolved_data_dir() / "storage" / config.storage_bucket,
                              timeout=config.request_timeout)


def create_metadata_store(config) -> MetadataStore:
    return LocalMetadataStore(config.resolved_data_dir())


__all__ = [
    'StorageClient',
    'HttpStorageClient',
    'LocalStorageClient',
    'fetch_url',
    'make_storage_path',
    'MetadataStore',
    'LocalMetadataStore',
    'FileRecord',
    'create_storage_client',
    'create_metadata_store',
]

"""
Object storage for attachments and exported documents.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlparse
from urllib.request import url2pathname

import requests

from ..core.errors import SourceFetchError, StorageUploadError

logger = logging.getLogger(__name__)


def make_storage_path(owner_id: str, filename: str) -> str:
    """Unique object path for a new file: '<owner>/<uuid>-<filename>'."""
    safe_name = Path(filename).name or "file"
    return f"{owner_id}/{uuid.uuid4()}-{safe_name}"


def fetch_url(url: str, timeout: float = 30.0,
              session: Optional[requests.Session] = None) -> bytes:
    """
    Read the bytes behind an http(s) or file URL.

    Raises:
        SourceFetchError: On any network, HTTP or file system failure
    """
    parsed = urlparse(url)
    if parsed.scheme == "file":
        path = Path(url2pathname(parsed.path))
        try:
            return path.read_bytes()
        except OSError as e:
            raise SourceFetchError(url, str(e)) from e

    if parsed.scheme not in ("http", "https"):
        raise SourceFetchError(url, f"unsupported URL scheme {parsed.scheme!r}")

    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise SourceFetchError(url, str(e)) from e
    return response.content


class StorageClient(ABC):
    """
    The three storage operations the editor needs.

    Buckets are assumed to exist; this interface does not manage them.
    """

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Store bytes under a path.

        Returns:
            The storage path of the new object

        Raises:
            StorageUploadError: If the object could not be written
        """

    @abstractmethod
    def get_public_url(self, storage_path: str) -> str:
        pass

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """
        Raises:
            SourceFetchError: If the bytes could not be read
        """


class HttpStorageClient(StorageClient):
    """Supabase-style object storage over its REST API."""

    def __init__(self, base_url: str, bucket: str, api_key: str = "",
                 timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers.update({
                "Authorization": f"Bearer {api_key}",
                "apikey": api_key,
            })

    def _object_url(self, storage_path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(storage_path)}"

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        url = self._object_url(path)
        try:
            response = self.session.post(
                url,
                data=data,
                headers={"Content-Type": content_type, "x-upsert": "true"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StorageUploadError(f"Upload of {path} failed: {e}") from e

        logger.info("Uploaded %d bytes to %s/%s", len(data), self.bucket, path)
        return path

    def get_public_url(self, storage_path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(storage_path)}"

    def fetch(self, url: str) -> bytes:
        return fetch_url(url, timeout=self.timeout, session=self.session)


class LocalStorageClient(StorageClient):
    """Stores objects as files under a root directory."""

    def __init__(self, root: Path, timeout: float = 30.0):
        self.root = Path(root)
        self.timeout = timeout
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, storage_path: str) -> Path:
        target = (self.root / storage_path).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageUploadError(f"Storage path escapes the storage root: {storage_path}")
        return target

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageUploadError(f"Could not write {target}: {e}") from e

        logger.info("Stored %d bytes at %s", len(data), target)
        return path

    def get_public_url(self, storage_path: str) -> str:
        return (self.root / storage_path).resolve().as_uri()

    def fetch(self, url: str) -> bytes:
        return fetch_url(url, timeout=self.timeout)

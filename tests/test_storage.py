"""Tests for the storage clients."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from tracksheet.core.errors import SourceFetchError, StorageUploadError
from tracksheet.services import HttpStorageClient, LocalStorageClient, fetch_url, make_storage_path


def test_make_storage_path_is_unique_and_keeps_name():
    first = make_storage_path("alice", "hours.pdf")
    second = make_storage_path("alice", "hours.pdf")

    assert first != second
    assert first.startswith("alice/")
    assert first.endswith("-hours.pdf")


def test_make_storage_path_drops_directories():
    assert make_storage_path("bob", "../../etc/passwd").endswith("-passwd")


def test_local_upload_and_fetch_round_trip(tmp_path):
    client = LocalStorageClient(tmp_path / "bucket")

    path = client.upload("alice/1-my hours.pdf", b"%PDF-1.7", "application/pdf")
    url = client.get_public_url(path)

    assert path == "alice/1-my hours.pdf"
    assert url.startswith("file://")
    assert client.fetch(url) == b"%PDF-1.7"


def test_local_upload_cannot_escape_root(tmp_path):
    client = LocalStorageClient(tmp_path / "bucket")

    with pytest.raises(StorageUploadError):
        client.upload("../outside.pdf", b"x", "application/pdf")


def test_fetch_missing_file(tmp_path):
    with pytest.raises(SourceFetchError):
        fetch_url((tmp_path / "missing.pdf").as_uri())


def test_fetch_unsupported_scheme():
    with pytest.raises(SourceFetchError):
        fetch_url("ftp://example.com/a.pdf")


@patch("tracksheet.services.storage.requests.get")
def test_fetch_http(mock_get):
    response = MagicMock()
    response.content = b"%PDF"
    mock_get.return_value = response

    assert fetch_url("https://cdn.example.com/a.pdf", timeout=5) == b"%PDF"
    mock_get.assert_called_once_with("https://cdn.example.com/a.pdf", timeout=5)


@patch("tracksheet.services.storage.requests.get")
def test_fetch_http_error(mock_get):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
    mock_get.return_value = response

    with pytest.raises(SourceFetchError) as excinfo:
        fetch_url("https://cdn.example.com/a.pdf")

    assert "404" in str(excinfo.value)


@patch("tracksheet.services.storage.requests.get")
def test_fetch_network_error(mock_get):
    mock_get.side_effect = requests.exceptions.ConnectionError("connection refused")

    with pytest.raises(SourceFetchError):
        fetch_url("https://cdn.example.com/a.pdf")


def test_http_upload_posts_to_bucket():
    session = MagicMock()
    session.headers = {}
    client = HttpStorageClient("https://db.example.com/", "file-bank", api_key="secret",
                               timeout=10, session=session)

    path = client.upload("alice/1-hours.pdf", b"%PDF", "application/pdf")

    assert path == "alice/1-hours.pdf"
    session.post.assert_called_once_with(
        "https://db.example.com/storage/v1/object/file-bank/alice/1-hours.pdf",
        data=b"%PDF",
        headers={"Content-Type": "application/pdf", "x-upsert": "true"},
        timeout=10,
    )
    assert session.headers["Authorization"] == "Bearer secret"


def test_http_upload_failure():
    session = MagicMock()
    session.headers = {}
    session.post.side_effect = requests.exceptions.Timeout("timed out")
    client = HttpStorageClient("https://db.example.com", "file-bank", session=session)

    with pytest.raises(StorageUploadError):
        client.upload("alice/1-hours.pdf", b"%PDF", "application/pdf")


def test_http_public_url_quotes_path():
    client = HttpStorageClient("https://db.example.com", "file-bank", session=MagicMock())

    assert client.get_public_url("alice/1-my hours.pdf") == (
        "https://db.example.com/storage/v1/object/public/file-bank/alice/1-my%20hours.pdf"
    )

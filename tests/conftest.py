"""Shared fixtures: small PDFs built with PyMuPDF and in-memory collaborators."""

import fitz
import pytest

from tracksheet.core.errors import SourceFetchError, StorageUploadError


def make_pdf(pages=1, width=612, height=792, rotation=0) -> bytes:
    doc = fitz.open()
    for _ in range(pages):
        page = doc.new_page(width=width, height=height)
        if rotation:
            page.set_rotation(rotation)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def one_page_pdf():
    return make_pdf(pages=1)


@pytest.fixture
def two_page_pdf():
    return make_pdf(pages=2)


class MemoryStorage:
    """Storage client keeping objects in a dict."""

    def __init__(self, fail_uploads=False):
        self.objects = {}
        self.uploads = []
        self.fail_uploads = fail_uploads

    def upload(self, path, data, content_type):
        if self.fail_uploads:
            raise StorageUploadError("bucket unavailable")
        self.objects[path] = data
        self.uploads.append((path, content_type))
        return path

    def get_public_url(self, storage_path):
        return f"mem://{storage_path}"

    def fetch(self, url):
        path = url[len("mem://"):]
        if path not in self.objects:
            raise SourceFetchError(url, "no such object")
        return self.objects[path]


@pytest.fixture
def memory_storage():
    return MemoryStorage()

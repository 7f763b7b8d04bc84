"""
Persistence of templates and file-bank records.
"""
import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.errors import StorageUploadError, TemplateNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class FileRecord:
    """A file-bank entry describing one stored object."""
    id: str
    owner_id: str
    filename: str
    storage_path: str
    content_type: str
    size: int
    created_at: str


class MetadataStore(ABC):
    """Database collaborator: file records and template documents."""

    @abstractmethod
    def record_file(self, owner_id: str, filename: str, storage_path: str,
                    content_type: str, size: int) -> FileRecord:
        """
        Raises:
            StorageUploadError: If the record could not be written
        """

    @abstractmethod
    def list_files(self, owner_id: Optional[str] = None) -> List[FileRecord]:
        pass

    @abstractmethod
    def save_template(self, template_id: Optional[str], name: str,
                      template_data: Dict[str, Any], owner_id: str = "") -> str:
        """
        Insert (template_id is None) or update a template.

        Returns:
            The template's id
        """

    @abstractmethod
    def load_template(self, template_id: str) -> Dict[str, Any]:
        """
        Returns:
            Dict with 'id', 'name' and 'template_data'

        Raises:
            TemplateNotFoundError: If no template has this id
        """

    @abstractmethod
    def list_templates(self, owner_id: Optional[str] = None) -> List[Dict[str, Any]]:
        pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalMetadataStore(MetadataStore):
    """JSON documents under a data directory."""

    FILE_BANK = "file_bank.json"

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.templates_dir = self.base_dir / "templates"
        self.templates_dir.mkdir(parents=True, exist_ok=True)

    def _template_path(self, template_id: str) -> Path:
        return self.templates_dir / f"{Path(template_id).name}.json"

    def _write_json(self, path: Path, data: Any) -> None:
        # Write to a sibling temp file first so a failed write keeps the old copy
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def record_file(self, owner_id: str, filename: str, storage_path: str,
                    content_type: str, size: int) -> FileRecord:
        record = FileRecord(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            filename=filename,
            storage_path=storage_path,
            content_type=content_type,
            size=size,
            created_at=_now(),
        )
        path = self.base_dir / self.FILE_BANK
        try:
            records = self._read_json(path, [])
            records.append(asdict(record))
            self._write_json(path, records)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUploadError(f"Could not record file {filename}: {e}") from e

        logger.info("Recorded file %s (%d bytes) for %s", filename, size, owner_id)
        return record

    def list_files(self, owner_id: Optional[str] = None) -> List[FileRecord]:
        records = [FileRecord(**r) for r in self._read_json(self.base_dir / self.FILE_BANK, [])]
        if owner_id is not None:
            records = [r for r in records if r.owner_id == owner_id]
        return records

    def save_template(self, template_id: Optional[str], name: str,
                      template_data: Dict[str, Any], owner_id: str = "") -> str:
        if template_id is None:
            template_id = uuid.uuid4().hex
            created_at = _now()
        else:
            existing = self._read_json(self._template_path(template_id), None)
            if existing is None:
                raise TemplateNotFoundError(template_id)
            created_at = existing.get('created_at', _now())

        document = {
            'id': template_id,
            'name': name,
            'owner_id': owner_id,
            'template_data': template_data,
            'created_at': created_at,
            'updated_at': _now(),
        }
        self._write_json(self._template_path(template_id), document)
        logger.info("Saved template %s (%s)", template_id, name)
        return template_id

    def load_template(self, template_id: str) -> Dict[str, Any]:
        document = self._read_json(self._template_path(template_id), None)
        if document is None:
            raise TemplateNotFoundError(template_id)
        return document

    def list_templates(self, owner_id: Optional[str] = None) -> List[Dict[str, Any]]:
        documents = []
        for path in sorted(self.templates_dir.glob("*.json")):
            try:
                document = self._read_json(path, None)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable template file %s: %s", path, e)
                continue
            if owner_id is None or document.get('owner_id') == owner_id:
                documents.append(document)
        documents.sort(key=lambda d: d.get('updated_at', ''), reverse=True)
        return documents

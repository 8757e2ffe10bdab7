"""
Record store - the JSON-file "database" of finalized project submissions

The whole collection is loaded for every operation and written back
wholesale. Storage failures never raise: they are logged and reported as an
empty result or a failed StoreResult.
"""
import copy
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from transformers.utils import logging

from project_portal.models.project import ProjectRecord, utc_timestamp
from project_portal.utils.file_handler import FileHandler

logger = logging.get_logger(__name__)

SEARCH_SCOPES = ('projectName', 'memberName', 'usn', 'timestamp', 'all')


@dataclass
class StoreResult:
    """Outcome of a store write; truthy on success"""
    success: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls) -> 'StoreResult':
        return cls(True)

    @classmethod
    def failed(cls, error: str) -> 'StoreResult':
        return cls(False, error)


class StorageBackend:
    """Where the serialized collection lives"""

    def exists(self) -> bool:
        raise NotImplementedError

    def load(self) -> Any:
        """Return the decoded document; raise on missing or malformed data"""
        raise NotImplementedError

    def save(self, document: List[Dict[str, Any]]) -> None:
        """Replace the stored document wholesale; raise on failure"""
        raise NotImplementedError

    def backup(self) -> None:
        """Copy the current document aside; raise on failure"""
        raise NotImplementedError

    def prepare(self) -> None:
        """Make sure the backend can be written to"""

    def last_modified(self) -> Optional[datetime]:
        raise NotImplementedError


class JsonFileBackend(StorageBackend):
    """Collection stored as a single JSON array on disk with a backup copy"""

    def __init__(self, db_path: Path, backup_path: Optional[Path] = None):
        self.db_path = Path(db_path)
        self.backup_path = Path(backup_path) if backup_path else self.db_path.with_name(
            f'{self.db_path.stem}_backup{self.db_path.suffix}')
        self.file_handler = FileHandler()

    def exists(self) -> bool:
        return self.db_path.exists()

    def load(self) -> Any:
        return self.file_handler.read_json(self.db_path)

    def save(self, document: List[Dict[str, Any]]) -> None:
        self.file_handler.write_json_atomic(self.db_path, document)

    def backup(self) -> None:
        self.file_handler.copy_file(self.db_path, self.backup_path)

    def prepare(self) -> None:
        self.file_handler.ensure_directory(self.db_path.parent)

    def last_modified(self) -> Optional[datetime]:
        if not self.db_path.exists():
            return None
        return datetime.fromtimestamp(self.db_path.stat().st_mtime, tz=timezone.utc)


class InMemoryBackend(StorageBackend):
    """Collection kept as serialized JSON text in memory"""

    def __init__(self, document: Optional[List[Dict[str, Any]]] = None):
        self._data: Optional[str] = None
        self._backup: Optional[str] = None
        self._modified: Optional[datetime] = None
        if document is not None:
            self.save(document)

    def exists(self) -> bool:
        return self._data is not None

    def load(self) -> Any:
        if self._data is None:
            raise FileNotFoundError('in-memory store is empty')
        return json.loads(self._data)

    def save(self, document: List[Dict[str, Any]]) -> None:
        self._data = json.dumps(document, ensure_ascii=False)
        self._modified = datetime.now(timezone.utc)

    def backup(self) -> None:
        self._backup = self._data

    def load_backup(self) -> Any:
        return json.loads(self._backup) if self._backup is not None else None

    def last_modified(self) -> Optional[datetime]:
        return self._modified


class RecordStore:
    """Repository of ProjectRecord objects over a StorageBackend"""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def initialize(self) -> None:
        """
        Prepare the store for use

        Creates an empty collection when none exists and takes a backup of
        an existing one. A failed backup is only logged.
        """
        self.backend.prepare()

        if not self.backend.exists():
            self.backend.save([])
            logger.info("Project database initialized")
            return

        try:
            self.backend.backup()
        except Exception as e:
            logger.warning(f"Could not create database backup: {e}")

    def _load_documents(self) -> List[Dict[str, Any]]:
        try:
            if not self.backend.exists():
                return []
            data = self.backend.load()
        except Exception as e:
            logger.error(f"Error reading project database: {e}")
            return []

        if not isinstance(data, list):
            logger.error("Error reading project database: document is not a list")
            return []
        return [item for item in data if isinstance(item, dict)]

    def _save_documents(self, documents: List[Dict[str, Any]]) -> StoreResult:
        try:
            if self.backend.exists():
                self.backend.backup()
            self.backend.save(documents)
            return StoreResult.ok()
        except Exception as e:
            logger.error(f"Error writing project database: {e}")
            return StoreResult.failed(str(e))

    def read_all(self) -> List[ProjectRecord]:
        """
        Return every stored record

        Returns:
            List of ProjectRecord objects, empty if the store cannot be read
        """
        return [ProjectRecord.from_dict(doc) for doc in self._load_documents()]

    def write_all(self, records: Iterable[ProjectRecord]) -> StoreResult:
        """Replace the whole collection with records"""
        return self._save_documents([r.to_dict() for r in records])

    def create(self, record: ProjectRecord) -> StoreResult:
        """Append a finalized record"""
        documents = self._load_documents()
        documents.append(record.to_dict())
        return self._save_documents(documents)

    def get_by_id(self, record_id: str) -> Optional[ProjectRecord]:
        for doc in self._load_documents():
            if isinstance(doc.get('id'), str) and doc['id'] == record_id:
                return ProjectRecord.from_dict(doc)
        return None

    def update(self, record_id: str, fields: Dict[str, Any]) -> StoreResult:
        """
        Shallow-merge fields (camelCase keys) into the matching record

        Args:
            record_id: Record identifier
            fields: Top-level fields to overwrite

        Returns:
            Failed result if no record has record_id
        """
        documents = self._load_documents()
        for index, doc in enumerate(documents):
            if doc.get('id') == record_id:
                merged = dict(doc)
                merged.update(copy.deepcopy(fields))
                merged['id'] = record_id
                documents[index] = merged
                return self._save_documents(documents)
        return StoreResult.failed(f"Project not found: {record_id}")

    def delete(self, record_id: str) -> StoreResult:
        """Remove a record; deleting an unknown id still succeeds"""
        documents = self._load_documents()
        remaining = [doc for doc in documents if doc.get('id') != record_id]
        return self._save_documents(remaining)

    def search(self, query: Optional[str], scope: str = 'all') -> List[ProjectRecord]:
        """
        Case-insensitive substring search

        Args:
            query: Text to look for; empty returns every record
            scope: One of SEARCH_SCOPES, unknown values search everything

        Returns:
            Matching records in stored order
        """
        records = self.read_all()
        if not query:
            return records

        needle = query.lower()

        def contains(value: str) -> bool:
            return needle in (value or '').lower()

        def matches(record: ProjectRecord) -> bool:
            if scope == 'projectName':
                return contains(record.project_name)
            if scope == 'memberName':
                return any(contains(m.name) for m in record.team_members)
            if scope == 'usn':
                return any(contains(m.usn) for m in record.team_members)
            if scope == 'timestamp':
                return contains(record.timestamp)
            return (contains(record.project_name)
                    or any(contains(m.name) or contains(m.usn) for m in record.team_members)
                    or contains(record.timestamp))

        return [r for r in records if matches(r)]

    def stats(self) -> Dict[str, Any]:
        """Record count, total team members and last store modification"""
        records = self.read_all()
        try:
            modified = self.backend.last_modified()
        except Exception as e:
            logger.error(f"Error reading project database status: {e}")
            modified = None

        return {
            'totalProjects': len(records),
            'totalMembers': sum(r.member_count() for r in records),
            'lastUpdated': utc_timestamp(modified) if modified else None
        }

    def compact(self) -> StoreResult:
        """
        Drop duplicate ids and repair entries with missing fields

        The first occurrence of an id wins. Malformed members, file maps and
        ids are normalised the way read_all() reads them; unknown keys are
        kept. Running it twice has the same effect as running it once.
        """
        seen = set()
        cleaned = []
        for doc in self._load_documents():
            record = ProjectRecord.from_dict(doc)
            if record.id:
                if record.id in seen:
                    continue
                seen.add(record.id)
            else:
                record.id = str(uuid.uuid4())
            record.project_name = record.project_name or 'Unknown Project'
            record.timestamp = record.timestamp or utc_timestamp()
            cleaned.append(record.to_dict())
        return self._save_documents(cleaned)

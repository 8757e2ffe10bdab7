from __future__ import annotations

from pathlib import Path

import pytest

from project_portal.app import create_app
from project_portal.models.project import FileRef, ProjectRecord, TeamMember
from project_portal.services.record_store import InMemoryBackend, RecordStore


@pytest.fixture
def app(tmp_path: Path):
    """Flask app with its data, upload and save folders under tmp_path."""
    app = create_app(
        'testing',
        DATA_DIR=tmp_path / 'data',
        UPLOAD_FOLDER=tmp_path / 'uploads',
        DEFAULT_SAVE_PATH=tmp_path / 'default-save',
    )
    yield app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def store() -> RecordStore:
    store = RecordStore(InMemoryBackend())
    store.initialize()
    return store


def make_record(record_id: str = 'p-1', name: str = 'Portal', members=None,
                timestamp: str = '2025-03-01T10:15:30.123Z') -> ProjectRecord:
    members = members if members is not None else [TeamMember('Asha Rao', '1XX21CS001')]
    return ProjectRecord(
        id=record_id,
        project_name=name,
        timestamp=timestamp,
        team_members=list(members),
        folder_name=f'{name}_2025-03-01_10-15-30',
        project_path=f'/srv/submissions/{name}_2025-03-01_10-15-30',
        files={'readme': FileRef('ReadMe.txt', f'/srv/submissions/{name}/README/ReadMe.txt', 12)},
    )

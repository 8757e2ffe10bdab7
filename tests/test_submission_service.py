from __future__ import annotations

import json
from pathlib import Path

import pytest

from project_portal.models.project import TeamMember
from project_portal.services.errors import (
    MissingSubmissionFilesError, SubmissionError, SubmissionStateError,
)
from project_portal.services.record_store import InMemoryBackend, RecordStore
from project_portal.services.submission_service import (
    SubmissionService, SubmissionState, format_student_info,
)


@pytest.fixture
def service(store: RecordStore) -> SubmissionService:
    return SubmissionService(store)


def _temp_file(tmp_path: Path, name: str, content: bytes) -> Path:
    path = tmp_path / 'uploads' / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def _upload_all(service: SubmissionService, tmp_path: Path, project_path: Path) -> None:
    service.upload_readme(project_path, _temp_file(tmp_path, 'r', b'# Alpha\n'), 'README.md')
    service.upload_installation(project_path, _temp_file(tmp_path, 'i', b'pip install alpha\n'),
                                'install.txt')
    service.upload_source(project_path, _temp_file(tmp_path, 's', b'PK\x03\x04zipdata'), 'alpha.zip')


def test_full_submission_scenario(service: SubmissionService, store: RecordStore, tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path / 'submissions')
    _upload_all(service, tmp_path, info.project_path)

    record = service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], info.project_path, info.folder_name)

    stored = store.get_by_id(record.id)
    assert stored == record
    assert set(stored.files) == {'readme', 'installation', 'source', 'studentInfo'}
    assert stored.files['readme'].size == len(b'# Alpha\n')
    assert stored.files['installation'].name == 'installation.txt'
    assert stored.files['installation'].size == len(b'pip install alpha\n')
    assert stored.files['source'].size == len(b'PK\x03\x04zipdata')
    student_info = Path(stored.files['studentInfo'].path)
    assert stored.files['studentInfo'].size == student_info.stat().st_size
    assert stored.team_members == [TeamMember('A', '1')]
    assert stored.folder_name == info.folder_name
    assert stored.timestamp.endswith('Z')


def test_finalize_writes_student_info_and_snapshot(service: SubmissionService, tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path)
    _upload_all(service, tmp_path, info.project_path)
    members = [TeamMember('Asha', '1XX21CS001'), TeamMember('Ravi', '1XX21CS002')]

    record = service.finalize('Alpha', members, info.project_path, info.folder_name)

    text = (info.project_path / 'student-info.txt').read_text(encoding='utf-8')
    assert text == 'Student 1:\nName: Asha\nUSN: 1XX21CS001\n\nStudent 2:\nName: Ravi\nUSN: 1XX21CS002\n'
    snapshot = json.loads((info.project_path / 'project-info.json').read_text(encoding='utf-8'))
    assert snapshot == record.to_dict()


def test_finalize_without_source_is_rejected(service: SubmissionService, store: RecordStore,
                                             tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path)
    service.upload_readme(info.project_path, _temp_file(tmp_path, 'r', b'readme'))
    service.upload_installation(info.project_path, _temp_file(tmp_path, 'i', b'steps'), 'i.md')

    with pytest.raises(MissingSubmissionFilesError) as excinfo:
        service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], info.project_path, info.folder_name)

    assert excinfo.value.roles == ['source']
    assert store.read_all() == []
    assert not (info.project_path / 'project-info.json').exists()


def test_finalize_requires_team_members(service: SubmissionService, tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path)
    _upload_all(service, tmp_path, info.project_path)

    with pytest.raises(ValueError):
        service.finalize('Alpha', [], info.project_path, info.folder_name)
    with pytest.raises(ValueError):
        service.finalize('Alpha', [{'name': ' ', 'usn': '1'}], info.project_path, info.folder_name)


def test_finalize_twice_is_rejected(service: SubmissionService, store: RecordStore, tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path)
    _upload_all(service, tmp_path, info.project_path)
    service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], info.project_path, info.folder_name)

    with pytest.raises(SubmissionStateError):
        service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], info.project_path, info.folder_name)
    assert len(store.read_all()) == 1


def test_finalize_surfaces_store_failure(tmp_path: Path) -> None:
    class ReadOnlyBackend(InMemoryBackend):
        def save(self, document):
            if self._data is not None:
                raise PermissionError('read-only')
            super().save(document)

    store = RecordStore(ReadOnlyBackend())
    store.initialize()
    service = SubmissionService(store)
    info = service.begin('Alpha', tmp_path)
    _upload_all(service, tmp_path, info.project_path)

    with pytest.raises(SubmissionError):
        service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], info.project_path, info.folder_name)
    assert service.state(info.project_path) is SubmissionState.SOURCE_UPLOADED


def test_begin_rejects_empty_name(service: SubmissionService, tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        service.begin('   ', tmp_path)
    with pytest.raises(ValueError):
        service.begin('Alpha', '')
    with pytest.raises(ValueError):
        service.begin(123, tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_upload_requires_existing_submission_folder(service: SubmissionService, tmp_path: Path) -> None:
    with pytest.raises(SubmissionStateError):
        service.upload_readme(tmp_path / 'never-created', _temp_file(tmp_path, 'r', b'x'))


def test_state_follows_files_on_disk(service: SubmissionService, tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path)
    path = info.project_path
    assert service.state(path) is SubmissionState.CREATED

    service.upload_readme(path, _temp_file(tmp_path, 'r', b'x'))
    assert service.state(path) is SubmissionState.README_UPLOADED

    service.upload_installation(path, _temp_file(tmp_path, 'i', b'x'), 'install.sh')
    assert service.state(path) is SubmissionState.INSTALLATION_UPLOADED

    service.upload_source(path, _temp_file(tmp_path, 's', b'x'), 'code.zip')
    assert service.state(path) is SubmissionState.SOURCE_UPLOADED

    service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], path, info.folder_name)
    assert service.state(path) is SubmissionState.FINALIZED

    with pytest.raises(SubmissionStateError):
        service.upload_readme(path, _temp_file(tmp_path, 'r2', b'late'))


def test_delete_record_leaves_folder(service: SubmissionService, store: RecordStore, tmp_path: Path) -> None:
    info = service.begin('Alpha', tmp_path)
    _upload_all(service, tmp_path, info.project_path)
    record = service.finalize('Alpha', [{'name': 'A', 'usn': '1'}], info.project_path, info.folder_name)
    before = sorted(p.relative_to(info.project_path) for p in info.project_path.rglob('*'))

    assert store.delete(record.id)

    assert store.get_by_id(record.id) is None
    assert sorted(p.relative_to(info.project_path) for p in info.project_path.rglob('*')) == before


def test_format_student_info_single_member() -> None:
    assert format_student_info([TeamMember('A', '1')]) == 'Student 1:\nName: A\nUSN: 1\n'

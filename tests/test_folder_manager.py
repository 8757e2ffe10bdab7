from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from project_portal.services.errors import FolderCollisionError
from project_portal.services.folder_manager import FolderManager

NOW = datetime(2025, 3, 1, 10, 15, 30, 987000, tzinfo=timezone.utc)


def _temp_file(tmp_path: Path, name: str, content: bytes) -> Path:
    path = tmp_path / 'uploads' / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def test_derive_folder_name_format() -> None:
    assert FolderManager().derive_folder_name('Alpha', NOW) == 'Alpha_2025-03-01_10-15-30'


def test_derive_folder_name_is_deterministic_and_path_safe() -> None:
    manager = FolderManager()
    first = manager.derive_folder_name('Smart Attendance', NOW)
    second = manager.derive_folder_name('Smart Attendance', NOW)

    assert first == second
    stamp = first.rsplit('_', 2)[1:]
    assert ':' not in first
    assert all('.' not in part for part in stamp)


def test_derive_folder_name_uses_utc() -> None:
    ist = timezone(timedelta(hours=5, minutes=30))
    local = NOW.astimezone(ist)
    assert FolderManager().derive_folder_name('Alpha', local) == 'Alpha_2025-03-01_10-15-30'


def test_derive_folder_name_replaces_path_separators() -> None:
    name = FolderManager().derive_folder_name('../etc/passwd', NOW)
    assert '/' not in name
    assert name.endswith('_2025-03-01_10-15-30')


def test_create_structure_builds_layout(tmp_path: Path) -> None:
    base = tmp_path / 'not' / 'yet' / 'there'

    info = FolderManager().create_structure(base, 'Alpha', NOW)

    assert info.folder_name == 'Alpha_2025-03-01_10-15-30'
    assert info.project_path == base / info.folder_name
    for subfolder in ('README', 'INSTALLATION', 'SOURCE'):
        assert (info.project_path / subfolder).is_dir()


def test_create_structure_rejects_collision_by_default(tmp_path: Path) -> None:
    manager = FolderManager()
    manager.create_structure(tmp_path, 'Alpha', NOW)

    with pytest.raises(FolderCollisionError) as excinfo:
        manager.create_structure(tmp_path, 'Alpha', NOW)
    assert excinfo.value.folder_name == 'Alpha_2025-03-01_10-15-30'


def test_create_structure_suffix_policy(tmp_path: Path) -> None:
    manager = FolderManager('suffix')
    manager.create_structure(tmp_path, 'Alpha', NOW)

    second = manager.create_structure(tmp_path, 'Alpha', NOW)
    third = manager.create_structure(tmp_path, 'Alpha', NOW)

    assert second.folder_name == 'Alpha_2025-03-01_10-15-30-2'
    assert third.folder_name == 'Alpha_2025-03-01_10-15-30-3'
    assert (third.project_path / 'SOURCE').is_dir()


def test_create_structure_merge_policy_reuses_folder(tmp_path: Path) -> None:
    manager = FolderManager('merge')
    first = manager.create_structure(tmp_path, 'Alpha', NOW)
    (first.project_path / 'README' / 'ReadMe.txt').write_text('hello', encoding='utf-8')

    second = manager.create_structure(tmp_path, 'Alpha', NOW)

    assert second.project_path == first.project_path
    assert (second.project_path / 'README' / 'ReadMe.txt').exists()


def test_unknown_collision_policy_raises() -> None:
    with pytest.raises(ValueError):
        FolderManager('overwrite')


def test_create_structure_propagates_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / 'blocker'
    blocker.write_text('a file, not a directory', encoding='utf-8')

    with pytest.raises(OSError):
        FolderManager().create_structure(blocker / 'submissions', 'Alpha', NOW)


def test_place_file_uses_canonical_names(tmp_path: Path) -> None:
    manager = FolderManager()
    info = manager.create_structure(tmp_path / 'base', 'Alpha', NOW)

    readme = manager.place_file(_temp_file(tmp_path, 'r.tmp', b'readme'), info.project_path,
                                'readme', 'README.md')
    install = manager.place_file(_temp_file(tmp_path, 'i.tmp', b'steps'), info.project_path,
                                 'installation', 'setup-guide.pdf')
    source = manager.place_file(_temp_file(tmp_path, 's.tmp', b'PK'), info.project_path,
                                'source', 'code.zip')

    assert readme == info.project_path / 'README' / 'ReadMe.txt'
    assert install == info.project_path / 'INSTALLATION' / 'installation.pdf'
    assert source == info.project_path / 'SOURCE' / 'project.zip'
    assert readme.read_bytes() == b'readme'
    assert not (tmp_path / 'uploads' / 'r.tmp').exists()


def test_place_file_overwrites_existing(tmp_path: Path) -> None:
    manager = FolderManager()
    info = manager.create_structure(tmp_path / 'base', 'Alpha', NOW)
    manager.place_file(_temp_file(tmp_path, 'a.tmp', b'old'), info.project_path, 'readme')

    placed = manager.place_file(_temp_file(tmp_path, 'b.tmp', b'new'), info.project_path, 'readme')

    assert placed.read_bytes() == b'new'


def test_place_file_missing_temp_file_raises(tmp_path: Path) -> None:
    manager = FolderManager()
    info = manager.create_structure(tmp_path / 'base', 'Alpha', NOW)

    with pytest.raises(OSError):
        manager.place_file(tmp_path / 'gone.tmp', info.project_path, 'source')


def test_place_file_unknown_role_raises(tmp_path: Path) -> None:
    manager = FolderManager()
    info = manager.create_structure(tmp_path / 'base', 'Alpha', NOW)

    with pytest.raises(ValueError):
        manager.place_file(_temp_file(tmp_path, 'x.tmp', b'x'), info.project_path, 'slides')


def test_find_placed_file(tmp_path: Path) -> None:
    manager = FolderManager()
    info = manager.create_structure(tmp_path / 'base', 'Alpha', NOW)
    assert manager.find_placed_file(info.project_path, 'installation') is None

    manager.place_file(_temp_file(tmp_path, 'i.tmp', b'x'), info.project_path,
                       'installation', 'steps.tar.gz')

    found = manager.find_placed_file(info.project_path, 'installation')
    assert found.name == 'installation.gz'
    assert manager.is_submission_folder(info.project_path)
    assert not manager.is_submission_folder(tmp_path)

"""
Submission workflow - handles business logic for the multi-step project submission

The workflow holds no session state. Every step receives the submission
folder path from the client and works out progress from the files on disk:

    CREATED -> README_UPLOADED -> INSTALLATION_UPLOADED -> SOURCE_UPLOADED -> FINALIZED

An abandoned submission leaves its folder behind; nothing is rolled back.
"""
import uuid
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from transformers.utils import logging

from project_portal.models.project import (
    MANDATORY_ROLES, ROLE_INSTALLATION, ROLE_README, ROLE_SOURCE, ROLE_STUDENT_INFO,
    FileRef, ProjectRecord, TeamMember, utc_timestamp,
)
from project_portal.services.errors import (
    MissingSubmissionFilesError, SubmissionError, SubmissionStateError,
)
from project_portal.services.folder_manager import FolderInfo, FolderManager
from project_portal.services.record_store import RecordStore
from project_portal.utils.file_handler import FileHandler

logger = logging.get_logger(__name__)

STUDENT_INFO_FILE = 'student-info.txt'
PROJECT_INFO_FILE = 'project-info.json'


class SubmissionState(Enum):
    CREATED = 'created'
    README_UPLOADED = 'readme_uploaded'
    INSTALLATION_UPLOADED = 'installation_uploaded'
    SOURCE_UPLOADED = 'source_uploaded'
    FINALIZED = 'finalized'


def format_student_info(members: Iterable[TeamMember]) -> str:
    """Render the student-info.txt contents, one block per member"""
    return '\n'.join(
        f"Student {index}:\nName: {member.name}\nUSN: {member.usn}\n"
        for index, member in enumerate(members, start=1)
    )


class SubmissionService:
    """Coordinates folder creation, uploads and finalization of a submission"""

    def __init__(self, record_store: RecordStore, folder_manager: Optional[FolderManager] = None):
        """
        Initialize submission service

        Args:
            record_store: Store receiving finalized records
            folder_manager: Folder naming/placement helper
        """
        self.record_store = record_store
        self.folder_manager = folder_manager or FolderManager()
        self.file_handler = FileHandler()

    def begin(self, project_name: str, base_path: Union[str, Path]) -> FolderInfo:
        """
        Create the folder for a new submission

        Raises:
            ValueError: If project name or base path is empty
            FolderCollisionError: If the folder already exists and collisions are rejected
            OSError: If the directories cannot be created
        """
        if not isinstance(project_name, str) or not project_name.strip():
            raise ValueError("Project name must be non-empty text")
        if not base_path or not str(base_path).strip():
            raise ValueError("Save path cannot be empty")

        info = self.folder_manager.create_structure(Path(base_path), project_name.strip())
        logger.info(f"Created submission folder {info.project_path}")
        return info

    def state(self, project_path: Union[str, Path]) -> SubmissionState:
        """
        Work out how far a submission has progressed from the files on disk

        Raises:
            SubmissionStateError: If project_path is not a submission folder
        """
        project_path = Path(project_path)
        if not self.folder_manager.is_submission_folder(project_path):
            raise SubmissionStateError(f"Not a submission folder: {project_path}")

        if (project_path / PROJECT_INFO_FILE).is_file():
            return SubmissionState.FINALIZED

        placed = {role for role in MANDATORY_ROLES
                  if self.folder_manager.find_placed_file(project_path, role)}
        if placed >= {ROLE_README, ROLE_INSTALLATION, ROLE_SOURCE}:
            return SubmissionState.SOURCE_UPLOADED
        if placed >= {ROLE_README, ROLE_INSTALLATION}:
            return SubmissionState.INSTALLATION_UPLOADED
        if ROLE_README in placed:
            return SubmissionState.README_UPLOADED
        return SubmissionState.CREATED

    def _upload(self, role: str, project_path: Union[str, Path],
                temp_file_path: Union[str, Path], original_name: str) -> FileRef:
        if not project_path:
            raise ValueError("Project path is required")

        if self.state(project_path) is SubmissionState.FINALIZED:
            raise SubmissionStateError(f"Submission already finalized: {project_path}")

        placed = self.folder_manager.place_file(Path(temp_file_path), Path(project_path),
                                                role, original_name)
        logger.info(f"Stored {role} file at {placed}")
        return FileRef(name=placed.name, path=str(placed), size=placed.stat().st_size)

    def upload_readme(self, project_path, temp_file_path, original_name: str = '') -> FileRef:
        return self._upload(ROLE_README, project_path, temp_file_path, original_name)

    def upload_installation(self, project_path, temp_file_path, original_name: str = '') -> FileRef:
        return self._upload(ROLE_INSTALLATION, project_path, temp_file_path, original_name)

    def upload_source(self, project_path, temp_file_path, original_name: str = '') -> FileRef:
        return self._upload(ROLE_SOURCE, project_path, temp_file_path, original_name)

    @staticmethod
    def _coerce_members(team_members: Iterable[Union[TeamMember, Dict[str, Any]]]) -> List[TeamMember]:
        members = []
        for member in team_members or []:
            if isinstance(member, TeamMember):
                members.append(member)
            elif isinstance(member, dict):
                members.append(TeamMember.from_dict(member))
            else:
                raise ValueError("Team members must be objects with name and usn")
        return members

    def finalize(self, project_name: str, team_members: Iterable[Union[TeamMember, Dict[str, Any]]],
                 project_path: Union[str, Path], folder_name: Optional[str] = None) -> ProjectRecord:
        """
        Record a completed submission

        Writes student-info.txt and the project-info.json snapshot into the
        submission folder, then appends the record to the store.

        Args:
            project_name: Display name of the project
            team_members: Members as TeamMember objects or {name, usn} dicts
            project_path: Submission folder returned by begin()
            folder_name: Folder name returned by begin()

        Returns:
            The stored ProjectRecord

        Raises:
            ValueError: If name or team roster is invalid
            SubmissionStateError: If project_path is not an open submission folder
            MissingSubmissionFilesError: If a mandatory file was never uploaded
            SubmissionError: If the record could not be stored
            OSError: If the generated files cannot be written
        """
        if not isinstance(project_name, str) or not project_name.strip():
            raise ValueError("Project name must be non-empty text")

        members = self._coerce_members(team_members)
        if not members:
            raise ValueError("At least one team member is required")
        if any(not m.name.strip() for m in members):
            raise ValueError("Every team member needs a name")

        project_path = Path(project_path)
        if self.state(project_path) is SubmissionState.FINALIZED:
            raise SubmissionStateError(f"Submission already finalized: {project_path}")

        files: Dict[str, FileRef] = {}
        missing = []
        for role in MANDATORY_ROLES:
            placed = self.folder_manager.find_placed_file(project_path, role)
            if placed is None:
                missing.append(role)
                continue
            files[role] = FileRef(name=placed.name, path=str(placed), size=placed.stat().st_size)
        if missing:
            raise MissingSubmissionFilesError(missing)

        student_info_path = project_path / STUDENT_INFO_FILE
        size = self.file_handler.write_text(student_info_path, format_student_info(members))
        files[ROLE_STUDENT_INFO] = FileRef(name=STUDENT_INFO_FILE, path=str(student_info_path), size=size)

        record = ProjectRecord(
            id=str(uuid.uuid4()),
            project_name=project_name.strip(),
            timestamp=utc_timestamp(),
            team_members=members,
            folder_name=folder_name or project_path.name,
            project_path=str(project_path),
            files=files
        )

        snapshot_path = project_path / PROJECT_INFO_FILE
        self.file_handler.write_json(snapshot_path, record.to_dict())

        result = self.record_store.create(record)
        if not result:
            # keep the folder open so the client can complete it again
            snapshot_path.unlink()
            raise SubmissionError(f"Failed to save project record: {result.error}")

        logger.info(f"Finalized submission {record.id} ({record.project_name})")
        return record

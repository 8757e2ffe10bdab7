"""
Submission folder management - naming, layout and file placement
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple

from transformers.utils import logging

from project_portal.models.project import ROLE_INSTALLATION, ROLE_README, ROLE_SOURCE
from project_portal.services.errors import FolderCollisionError
from project_portal.utils.file_handler import FileHandler

logger = logging.get_logger(__name__)

COLLISION_REJECT = 'reject'
COLLISION_SUFFIX = 'suffix'
COLLISION_MERGE = 'merge'
COLLISION_POLICIES = (COLLISION_REJECT, COLLISION_SUFFIX, COLLISION_MERGE)

# role -> (subfolder, canonical file stem)
ROLE_LAYOUT: Dict[str, Tuple[str, str]] = {
    ROLE_README: ('README', 'ReadMe'),
    ROLE_INSTALLATION: ('INSTALLATION', 'installation'),
    ROLE_SOURCE: ('SOURCE', 'project'),
}


@dataclass
class FolderInfo:
    """Location of a freshly created submission folder"""
    project_path: Path
    folder_name: str

    def to_dict(self):
        return {'projectPath': str(self.project_path), 'folderName': self.folder_name}


class FolderManager:
    """Creates submission folders and moves uploaded files into them"""

    def __init__(self, collision_policy: str = COLLISION_REJECT):
        if collision_policy not in COLLISION_POLICIES:
            raise ValueError(f"Unknown folder collision policy: {collision_policy}")
        self.collision_policy = collision_policy
        self.file_handler = FileHandler()

    def derive_folder_name(self, project_name: str, now: datetime) -> str:
        """
        Build "<name>_<YYYY-MM-DD_HH-MM-SS>" from the UTC instant

        Args:
            project_name: Display name of the project
            now: Creation instant

        Returns:
            Folder name safe to use as a single path component
        """
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        stamp = now.strftime('%Y-%m-%d_%H-%M-%S')
        return f"{self.file_handler.sanitize_filename(project_name)}_{stamp}"

    def create_structure(self, base_path: Path, project_name: str,
                         now: Optional[datetime] = None) -> FolderInfo:
        """
        Create the submission folder with its README/INSTALLATION/SOURCE subfolders

        Args:
            base_path: Directory holding all submissions, created if missing
            project_name: Display name of the project
            now: Creation instant (defaults to the current time)

        Returns:
            FolderInfo for the new folder

        Raises:
            FolderCollisionError: If the folder exists and the policy is reject
            OSError: If the directories cannot be created
        """
        base_path = Path(base_path)
        folder_name = self.derive_folder_name(project_name, now or datetime.now(timezone.utc))
        project_path = base_path / folder_name

        if project_path.exists():
            if self.collision_policy == COLLISION_REJECT:
                raise FolderCollisionError(folder_name)
            if self.collision_policy == COLLISION_SUFFIX:
                counter = 2
                while (base_path / f"{folder_name}-{counter}").exists():
                    counter += 1
                folder_name = f"{folder_name}-{counter}"
                project_path = base_path / folder_name
            else:
                logger.warning(f"Reusing existing submission folder {project_path}")

        self.file_handler.ensure_directory(base_path)
        for subfolder, _ in ROLE_LAYOUT.values():
            self.file_handler.ensure_directory(project_path / subfolder)

        return FolderInfo(project_path=project_path, folder_name=folder_name)

    def canonical_name(self, role: str, desired_name: str = '') -> str:
        """File name a placed file receives for its role"""
        if role == ROLE_README:
            return 'ReadMe.txt'
        if role == ROLE_INSTALLATION:
            return f"installation{Path(desired_name or '').suffix}"
        if role == ROLE_SOURCE:
            return 'project.zip'
        raise ValueError(f"Unknown file role: {role}")

    def place_file(self, temp_file_path: Path, project_path: Path, role: str,
                   desired_name: str = '') -> Path:
        """
        Move an uploaded temp file into its role subfolder under a canonical name

        Any existing file at the destination is replaced.

        Raises:
            ValueError: If role is unknown
            OSError: If the move fails
        """
        file_name = self.canonical_name(role, desired_name)
        subfolder, _ = ROLE_LAYOUT[role]
        destination = Path(project_path) / subfolder / file_name
        return self.file_handler.move_file(Path(temp_file_path), destination)

    def find_placed_file(self, project_path: Path, role: str) -> Optional[Path]:
        """Locate the file already placed for role, if any"""
        if role not in ROLE_LAYOUT:
            raise ValueError(f"Unknown file role: {role}")
        subfolder, stem = ROLE_LAYOUT[role]
        directory = Path(project_path) / subfolder
        if not directory.is_dir():
            return None

        if role != ROLE_INSTALLATION:
            candidate = directory / self.canonical_name(role)
            return candidate if candidate.is_file() else None

        # installation keeps the uploaded extension
        matches = sorted(p for p in directory.iterdir()
                         if p.is_file() and (p.name == stem or p.name.startswith(f"{stem}.")))
        return matches[0] if matches else None

    def is_submission_folder(self, project_path: Path) -> bool:
        project_path = Path(project_path)
        return all((project_path / subfolder).is_dir() for subfolder, _ in ROLE_LAYOUT.values())

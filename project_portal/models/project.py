"""
Project submission data models and schemas
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# Logical roles a submission file can have
ROLE_README = 'readme'
ROLE_INSTALLATION = 'installation'
ROLE_SOURCE = 'source'
ROLE_STUDENT_INFO = 'studentInfo'

MANDATORY_ROLES = (ROLE_README, ROLE_INSTALLATION, ROLE_SOURCE)

RECORD_KEYS = ('id', 'projectName', 'timestamp', 'teamMembers', 'folderName', 'projectPath', 'files')


def _text(value: Any) -> str:
    """Stored scalar as a string; anything that is not text or a number becomes ''"""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ''


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-03-01T10:15:30.123Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass
class TeamMember:
    """A single student on the submitting team"""
    name: str
    usn: str  # University seat number

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'usn': self.usn}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamMember':
        return cls(
            name=_text(data.get('name')),
            usn=_text(data.get('usn'))
        )


@dataclass
class FileRef:
    """Reference to a file stored inside a submission folder"""
    name: str
    path: str
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'path': self.path, 'size': self.size}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileRef':
        try:
            size = int(data.get('size') or 0)
        except (TypeError, ValueError):
            size = 0
        return cls(
            name=_text(data.get('name')),
            path=_text(data.get('path')),
            size=size
        )


@dataclass
class ProjectRecord:
    """Metadata for one finalized project submission"""
    id: str
    project_name: str
    timestamp: str  # ISO format timestamp, assigned at finalization
    team_members: List[TeamMember] = field(default_factory=list)
    folder_name: str = ''
    project_path: str = ''
    files: Dict[str, FileRef] = field(default_factory=dict)
    # stored keys this model does not know about, written back unchanged
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to its JSON (camelCase) representation"""
        return {
            **copy.deepcopy(self.extra),
            'id': self.id,
            'projectName': self.project_name,
            'timestamp': self.timestamp,
            'teamMembers': [m.to_dict() for m in self.team_members],
            'folderName': self.folder_name,
            'projectPath': self.project_path,
            'files': {role: ref.to_dict() for role, ref in self.files.items()}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectRecord':
        """
        Create record from its JSON representation

        Missing or malformed fields become empty values; repairing them is
        the job of RecordStore.compact().
        """
        members = data.get('teamMembers')
        if not isinstance(members, list):
            members = []
        files = data.get('files')
        if not isinstance(files, dict):
            files = {}
        record_id = data.get('id')

        return cls(
            id=record_id if isinstance(record_id, str) else '',
            project_name=_text(data.get('projectName')),
            timestamp=_text(data.get('timestamp')),
            team_members=[TeamMember.from_dict(m) for m in members if isinstance(m, dict)],
            folder_name=_text(data.get('folderName')),
            project_path=_text(data.get('projectPath')),
            files={str(role): FileRef.from_dict(ref) for role, ref in files.items() if isinstance(ref, dict)},
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in RECORD_KEYS}
        )

    def member_count(self) -> int:
        return len(self.team_members)

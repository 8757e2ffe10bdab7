"""
Exceptions raised by the submission workflow
"""
from typing import Iterable


class SubmissionError(RuntimeError):
    """A submission step could not be completed"""


class SubmissionStateError(SubmissionError):
    """The target folder is not in a state that allows the requested step"""


class FolderCollisionError(SubmissionError):
    """A submission folder with the derived name already exists"""

    def __init__(self, folder_name: str):
        super().__init__(f"Submission folder already exists: {folder_name}")
        self.folder_name = folder_name


class MissingSubmissionFilesError(SubmissionError):
    """One or more mandatory files have not been placed yet"""

    def __init__(self, roles: Iterable[str]):
        self.roles = list(roles)
        super().__init__(f"Missing required files: {', '.join(self.roles)}")

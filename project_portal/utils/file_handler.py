"""
File and directory handling utilities
"""
import io
import json
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Any


class FileHandler:
    """Utility class for file and directory operations"""

    @staticmethod
    def ensure_directory(path: Path) -> None:
        """
        Ensure directory exists, create if not

        Args:
            path: Directory path
        """
        Path(path).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def read_json(file_path: Path) -> Any:
        """
        Read JSON file

        Args:
            file_path: Path to JSON file

        Returns:
            Decoded JSON document

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If JSON is invalid
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)

    @staticmethod
    def write_json(file_path: Path, data: Any, indent: int = 2) -> None:
        """
        Write data to JSON file

        Args:
            file_path: Path to JSON file
            data: Data to write
            indent: JSON indentation (default: 2)
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)

    @staticmethod
    def write_json_atomic(file_path: Path, data: Any, indent: int = 2) -> None:
        """
        Atomically write data to JSON file using temp file + rename

        If the write fails, the original file remains intact.

        Args:
            file_path: Path to JSON file
            data: Data to write
            indent: JSON indentation (default: 2)
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        temp_fd, temp_path = tempfile.mkstemp(
            dir=file_path.parent,
            prefix=f'.{file_path.name}.',
            suffix='.tmp'
        )

        try:
            with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=indent, ensure_ascii=False)

            os.replace(temp_path, file_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    @staticmethod
    def write_text(file_path: Path, content: str) -> int:
        """
        Write a UTF-8 text file, creating parent directories

        Returns:
            Number of bytes written
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode('utf-8')
        file_path.write_bytes(data)
        return len(data)

    @staticmethod
    def copy_file(source: Path, destination: Path) -> None:
        """Copy a file, creating the destination directory if needed"""
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    @staticmethod
    def move_file(source: Path, destination: Path) -> Path:
        """
        Move a file, replacing anything already at the destination

        Args:
            source: File to move
            destination: Target file path

        Returns:
            Destination path

        Raises:
            FileNotFoundError: If source doesn't exist
        """
        if not Path(source).is_file():
            raise FileNotFoundError(f"No such file: {source}")

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        if destination.exists():
            destination.unlink()
        shutil.move(str(source), str(destination))
        return destination

    @staticmethod
    def zip_directory(path: Path, root_name: str) -> io.BytesIO:
        """
        Archive a directory into an in-memory zip file

        Args:
            path: Directory to archive
            root_name: Name of the top-level folder inside the archive

        Returns:
            Buffer positioned at the start of the archive
        """
        path = Path(path)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
            for file_path in sorted(path.rglob('*')):
                if file_path.is_file():
                    arcname = Path(root_name) / file_path.relative_to(path)
                    archive.write(file_path, arcname.as_posix())
        buffer.seek(0)
        return buffer

    @staticmethod
    def sanitize_filename(filename: str) -> str:
        """
        Sanitize filename by removing/replacing invalid characters

        Args:
            filename: Original filename

        Returns:
            Sanitized filename
        """
        invalid_chars = '<>:"/\\|?*'
        for char in invalid_chars:
            filename = filename.replace(char, '_')

        # Remove leading/trailing spaces and dots
        filename = filename.strip('. ')

        if not filename:
            filename = 'untitled'

        return filename

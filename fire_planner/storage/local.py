"""
Local filesystem storage service implementation.

Files live under a base directory. Metadata for ``<key>`` is kept in a JSON
sidecar named ``<key>.meta``.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import (
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageService,
)

METADATA_SUFFIX = ".meta"


class LocalStorageService(StorageService):
    """Stores planner documents in a local directory."""

    def __init__(self, base_path: str = "storage", create_dirs: bool = True):
        """
        Initialize the local storage service.

        Args:
            base_path: Base directory for storing files
            create_dirs: Whether to create directories if they don't exist
        """
        self.base_path = Path(base_path)
        self.create_dirs = create_dirs

        if self.create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_file_path(self, file_path: str) -> Path:
        """Map a storage key onto a path inside the base directory.

        Raises:
            StorageError: If the key is empty or escapes the base directory
        """
        parts = [
            part
            for part in file_path.replace("\\", "/").split("/")
            if part and part != "."
        ]
        if not parts:
            raise StorageError("Storage key must not be empty")
        if ".." in parts:
            raise StorageError(f"Storage key must not traverse directories: {file_path}")
        return self.base_path.joinpath(*parts)

    def _get_metadata_path(self, file_path: str) -> Path:
        local_path = self._get_file_path(file_path)
        return local_path.with_name(local_path.name + METADATA_SUFFIX)

    def store_file(
        self, file_path: str, content: bytes, metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        local_path = self._get_file_path(file_path)
        try:
            if self.create_dirs:
                local_path.parent.mkdir(parents=True, exist_ok=True)
            local_path.write_bytes(content)

            if metadata is not None:
                record = {
                    "stored_at": datetime.now(timezone.utc).isoformat(),
                    "size": len(content),
                    "content_type": metadata.get("content_type", "application/json"),
                    **metadata,
                }
                self._get_metadata_path(file_path).write_text(json.dumps(record, indent=2))

            return file_path

        except PermissionError as e:
            raise StoragePermissionError(
                f"Permission denied storing file {file_path}: {e}"
            )
        except OSError as e:
            raise StorageError(f"Failed to store file {file_path}: {e}")

    def retrieve_file(self, file_path: str) -> bytes:
        local_path = self._get_file_path(file_path)
        if not local_path.is_file():
            raise StorageNotFoundError(f"File not found: {file_path}")
        try:
            return local_path.read_bytes()
        except PermissionError as e:
            raise StoragePermissionError(
                f"Permission denied retrieving file {file_path}: {e}"
            )
        except OSError as e:
            raise StorageError(f"Failed to retrieve file {file_path}: {e}")

    def delete_file(self, file_path: str) -> bool:
        local_path = self._get_file_path(file_path)
        metadata_path = self._get_metadata_path(file_path)
        try:
            metadata_path.unlink(missing_ok=True)
            if not local_path.exists():
                return False
            local_path.unlink()
            return True
        except PermissionError as e:
            raise StoragePermissionError(
                f"Permission denied deleting file {file_path}: {e}"
            )
        except OSError as e:
            raise StorageError(f"Failed to delete file {file_path}: {e}")

    def file_exists(self, file_path: str) -> bool:
        return self._get_file_path(file_path).is_file()

    def get_file_metadata(self, file_path: str) -> Dict[str, Any]:
        local_path = self._get_file_path(file_path)
        if not local_path.is_file():
            raise StorageNotFoundError(f"File not found: {file_path}")

        stat = local_path.stat()
        metadata: Dict[str, Any] = {
            "size": stat.st_size,
            "modified_at": datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
            "content_type": "application/octet-stream",
        }

        metadata_path = self._get_metadata_path(file_path)
        if metadata_path.exists():
            try:
                metadata.update(json.loads(metadata_path.read_text()))
            except (json.JSONDecodeError, OSError) as e:
                raise StorageError(f"Corrupt metadata for {file_path}: {e}")

        return metadata

    def list_files(self, prefix: str = "") -> List[str]:
        root = self._get_file_path(prefix) if prefix else self.base_path
        if not root.exists():
            return []

        try:
            keys = []
            for directory, _, filenames in os.walk(root):
                for filename in filenames:
                    if filename.endswith(METADATA_SUFFIX):
                        continue
                    relative = (Path(directory) / filename).relative_to(self.base_path)
                    keys.append(relative.as_posix())
            return sorted(keys)
        except OSError as e:
            raise StorageError(f"Failed to list files with prefix {prefix}: {e}")

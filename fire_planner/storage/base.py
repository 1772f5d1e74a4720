"""
Base storage service interface and exceptions.

Every backend stores opaque byte blobs under slash-separated keys, with an
optional JSON metadata record per key.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StorageError(Exception):
    """Base exception for storage-related errors."""


class StorageNotFoundError(StorageError):
    """Raised when a requested file is not found in storage."""


class StoragePermissionError(StorageError):
    """Raised when there are permission issues with storage operations."""


class StorageService(ABC):
    """Contract shared by all storage backends."""

    @abstractmethod
    def store_file(
        self, file_path: str, content: bytes, metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Store ``content`` under ``file_path``, replacing any existing file.

        Returns:
            str: The key the file was stored under

        Raises:
            StorageError: If the file cannot be stored
        """

    @abstractmethod
    def retrieve_file(self, file_path: str) -> bytes:
        """
        Raises:
            StorageNotFoundError: If the file is not found
        """

    @abstractmethod
    def delete_file(self, file_path: str) -> bool:
        """Delete a file and its metadata; False if it did not exist."""

    @abstractmethod
    def file_exists(self, file_path: str) -> bool:
        pass

    @abstractmethod
    def get_file_metadata(self, file_path: str) -> Dict[str, Any]:
        """
        Size, timestamps and any metadata stored with the file.

        Raises:
            StorageNotFoundError: If the file is not found
        """

    @abstractmethod
    def list_files(self, prefix: str = "") -> List[str]:
        """Sorted keys under ``prefix``, excluding metadata records."""

"""
Storage for saved scenarios and custom assumption bundles.

A StorageService backend holds the raw documents; ScenarioStore maps planner
models onto it.
"""

from .base import (
    StorageError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageService,
)
from .factory import create_storage_service
from .local import LocalStorageService
from .scenario_store import ScenarioRecord, ScenarioStore, ScenarioSummary

__all__ = [
    "StorageService",
    "StorageError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "LocalStorageService",
    "ScenarioStore",
    "ScenarioRecord",
    "ScenarioSummary",
    "create_storage_service",
]

"""
Scenario store that persists full copies of planning requests.

Each saved scenario is a complete RunRequest snapshot, so re-running it never
depends on anything outside the stored document. Custom assumption bundles are
stored the same way. Both are keyed by opaque ids.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from fire_planner.models.assumptions import Assumptions
from fire_planner.models.request import RunRequest

from .base import StorageError, StorageNotFoundError, StorageService

SCENARIO_PREFIX = "scenarios"
ASSUMPTIONS_PREFIX = "assumptions"


class ScenarioRecord(BaseModel):
    """A named snapshot of a planning request."""

    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    request: RunRequest


class ScenarioSummary(BaseModel):
    id: str
    name: str
    created_at: datetime
    household_type: str = Field(..., description="single or couple")


class ScenarioStore:
    """Saves and loads scenarios and custom assumptions through a StorageService."""

    def __init__(self, storage: StorageService):
        self.storage = storage

    def save_scenario(
        self, name: str, request: RunRequest, description: Optional[str] = None
    ) -> ScenarioRecord:
        """
        Store a full copy of ``request`` under a new id.

        Args:
            name: Human-readable name for the scenario
            request: The planning request to snapshot
            description: Optional description

        Returns:
            ScenarioRecord: The stored record including its generated id
        """
        record = ScenarioRecord(
            id=uuid.uuid4().hex,
            name=name,
            description=description,
            created_at=datetime.now(timezone.utc),
            request=request,
        )
        self.storage.store_file(
            self._scenario_key(record.id),
            record.model_dump_json().encode("utf-8"),
            metadata={"content_type": "application/json", "name": name},
        )
        return record

    def get_scenario(self, scenario_id: str) -> ScenarioRecord:
        """
        Raises:
            StorageNotFoundError: If no scenario has this id
            StorageError: If the stored document is not a valid scenario
        """
        content = self.storage.retrieve_file(self._scenario_key(scenario_id))
        try:
            return ScenarioRecord.model_validate_json(content)
        except ValidationError as e:
            raise StorageError(f"Stored scenario {scenario_id} is invalid: {e}")

    def list_scenarios(self) -> List[ScenarioSummary]:
        """Summaries of every stored scenario, newest first."""
        summaries = []
        for key in self.storage.list_files(SCENARIO_PREFIX):
            record = self.get_scenario(_id_from_key(key))
            summaries.append(
                ScenarioSummary(
                    id=record.id,
                    name=record.name,
                    created_at=record.created_at,
                    household_type=record.request.household.structure,
                )
            )
        return sorted(summaries, key=lambda s: s.created_at, reverse=True)

    def delete_scenario(self, scenario_id: str) -> bool:
        return self.storage.delete_file(self._scenario_key(scenario_id))

    def save_assumptions(self, assumptions: Assumptions) -> str:
        """Store a custom assumptions bundle and return its storage id."""
        assumptions_id = uuid.uuid4().hex
        self.storage.store_file(
            self._assumptions_key(assumptions_id),
            assumptions.model_dump_json().encode("utf-8"),
            metadata={"content_type": "application/json", "assumptions_id": assumptions.id},
        )
        return assumptions_id

    def get_assumptions(self, assumptions_id: str) -> Optional[Assumptions]:
        """Custom assumptions by storage id, or None when absent."""
        try:
            content = self.storage.retrieve_file(self._assumptions_key(assumptions_id))
        except StorageNotFoundError:
            return None
        try:
            return Assumptions.model_validate_json(content)
        except ValidationError as e:
            raise StorageError(f"Stored assumptions {assumptions_id} are invalid: {e}")

    @staticmethod
    def _scenario_key(scenario_id: str) -> str:
        _check_id(scenario_id)
        return f"{SCENARIO_PREFIX}/{scenario_id}.json"

    @staticmethod
    def _assumptions_key(assumptions_id: str) -> str:
        _check_id(assumptions_id)
        return f"{ASSUMPTIONS_PREFIX}/{assumptions_id}.json"


def _check_id(document_id: str) -> None:
    if not document_id or not document_id.isalnum():
        raise StorageNotFoundError(f"Invalid document id: {document_id!r}")


def _id_from_key(key: str) -> str:
    return key.rsplit("/", 1)[-1].removesuffix(".json")

"""
Base record store shared by the local and remote persistence variants
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime

from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.models import GraveRecord


SnapshotCallback = Callable[[list[GraveRecord]], None]


def utc_timestamp() -> str:
    """ISO-8601 creation timestamp"""
    return datetime.now(UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class RecordStore(ABC):
    """
    Durable holder of the burial record list

    Implementations own id and created_at: both are assigned by create() and
    never changed by update().
    """

    def __init__(self):
        self.logger = get_project_logger(self.__class__.__name__)
        self._subscribers: list[SnapshotCallback] = []

    @abstractmethod
    def list(self) -> list[GraveRecord]:
        """Current snapshot, in the store's own order"""

    @abstractmethod
    def create(self, fields: dict) -> GraveRecord:
        """Store a new record, assigning id and created_at"""

    @abstractmethod
    def update(self, record_id: str, fields: dict) -> GraveRecord:
        """Replace every editable field of an existing record"""

    def get(self, record_id: str) -> GraveRecord | None:
        for record in self.list():
            if record.id == record_id:
                return record
        return None

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Register for snapshot changes; returns a function that unsubscribes"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, snapshot: list[GraveRecord]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(list(snapshot))
            except Exception as e:
                self.logger.error(f"Snapshot subscriber failed: {e}", exc_info=True)

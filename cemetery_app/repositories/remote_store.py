"""
Record store backed by a database document collection with a push subscription
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError

from cemetery_app.database import db
from cemetery_app.database.models import GraveDocument
from cemetery_app.repositories.base_store import RecordStore
from cemetery_app.services.exceptions import NotFoundError, handle_service_exceptions
from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.models import GraveRecord, fields_to_document


logger = get_project_logger(__name__)

DocumentsCallback = Callable[[list[dict]], None]


class DocumentCollection(ABC):
    """A collection of JSON documents ordered by creation time, newest first"""

    @abstractmethod
    def subscribe(self, callback: DocumentsCallback) -> Callable[[], None]:
        """Deliver the full collection now and after every change"""

    @abstractmethod
    def refresh(self) -> bool:
        """Deliver a new snapshot if the collection changed since the last one"""

    @abstractmethod
    def add_document(self, data: dict) -> str:
        """Insert a document, returning its id"""

    @abstractmethod
    def update_document(self, document_id: str, data: dict) -> None:
        """Overwrite the given keys of an existing document"""


class SqlDocumentCollection(DocumentCollection):
    """
    Document collection stored in the grave_documents table

    Writes made through this collection publish immediately. Writes made by
    anyone else (another worker, the CLI, a second collection) are picked up
    by refresh(), which compares a change marker of the table (row count and
    latest created_at/updated_at) with the one seen at the last publish.
    """

    def __init__(self, db_session=None):
        self._db_session = db_session
        self._subscribers: list[DocumentsCallback] = []
        self._version = None

    @property
    def db_session(self):
        return self._db_session or db.session

    def _query_version(self) -> tuple:
        return tuple(self.db_session.execute(
            db.select(
                db.func.count(GraveDocument.id),
                db.func.max(GraveDocument.created_at),
                db.func.max(GraveDocument.updated_at),
            )
        ).one())

    def _query_snapshot(self) -> list[dict]:
        documents = self.db_session.execute(
            db.select(GraveDocument)
            .order_by(GraveDocument.created_at.desc())
            .execution_options(populate_existing=True)
        ).scalars().all()
        return [document.to_record_dict() for document in documents]

    def _publish(self) -> None:
        # Marker first: a write landing in between shows up on the next refresh
        self._version = self._query_version()
        if not self._subscribers:
            return
        snapshot = self._query_snapshot()
        for callback in list(self._subscribers):
            callback(snapshot)

    def _commit(self, operation_name: str) -> None:
        try:
            self.db_session.commit()
        except SQLAlchemyError as e:
            self.db_session.rollback()
            logger.error(f"Database error in {operation_name}: {e}")
            raise

    def subscribe(self, callback: DocumentsCallback) -> Callable[[], None]:
        self._version = self._query_version()
        self._subscribers.append(callback)
        callback(self._query_snapshot())

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def refresh(self) -> bool:
        if not self._subscribers:
            return False
        if self._query_version() == self._version:
            return False
        logger.info("grave_documents changed outside this collection, publishing a new snapshot")
        self._publish()
        return True

    def add_document(self, data: dict) -> str:
        document = GraveDocument(data=dict(data))
        self.db_session.add(document)
        self._commit("add_document")
        logger.info(f"Added document {document.id}")
        self._publish()
        return str(document.id)

    def update_document(self, document_id: str, data: dict) -> None:
        try:
            document = self.db_session.get(GraveDocument, uuid.UUID(str(document_id)))
        except ValueError:
            document = None
        if document is None:
            raise NotFoundError(f"Grave record {document_id} not found")
        # Reassign so SQLAlchemy sees the JSON column change
        document.data = {**(document.data or {}), **data}
        self._commit("update_document")
        logger.info(f"Updated document {document_id}")
        self._publish()


class RemoteRecordStore(RecordStore):
    """
    Record store fed by a live collection subscription

    list() returns the last snapshot the collection pushed, after asking the
    collection to push again if the table changed. Writes go straight to the
    collection and the snapshot only changes when the subscription delivers
    the result.
    """

    def __init__(self, collection: DocumentCollection):
        super().__init__()
        self.collection = collection
        self._snapshot: list[GraveRecord] = []
        self._subscribed = False

    def _ensure_subscribed(self) -> None:
        if not self._subscribed:
            self.collection.subscribe(self._on_snapshot)
            self._subscribed = True

    def _on_snapshot(self, documents: list[dict]) -> None:
        self._snapshot = [GraveRecord.from_dict(document) for document in documents]
        self.logger.debug(f"Snapshot refreshed with {len(self._snapshot)} records")
        self._notify(self._snapshot)

    @handle_service_exceptions(logger)
    def list(self) -> list[GraveRecord]:
        if self._subscribed:
            self.collection.refresh()
        else:
            self._ensure_subscribed()
        return list(self._snapshot)

    @handle_service_exceptions(logger)
    def create(self, fields: dict) -> GraveRecord:
        self._ensure_subscribed()
        document_id = self.collection.add_document(fields_to_document(fields))
        record = self.get(document_id)
        if record is None:
            raise NotFoundError(f"Created record {document_id} missing from snapshot")
        return record

    @handle_service_exceptions(logger)
    def update(self, record_id: str, fields: dict) -> GraveRecord:
        self._ensure_subscribed()
        self.collection.update_document(record_id, fields_to_document(fields))
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(f"Grave record {record_id} not found")
        return record

"""
SQLAlchemy models backing the remote document collection
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy.dialects.postgresql import UUID as POSTGRESQL_UUID
from sqlalchemy.types import CHAR, TypeDecorator

from . import db


class UUID(TypeDecorator):
    """Platform-independent UUID type.

    Uses PostgreSQL's UUID type when available, otherwise uses CHAR(36)
    to store the UUID string.
    """
    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(POSTGRESQL_UUID())
        else:
            return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid.UUID):
            return uuid.UUID(str(value))
        return value


class GraveDocument(db.Model):
    """One burial record stored as a schemaless JSON document"""
    __tablename__ = 'grave_documents'

    id = db.Column(UUID(), primary_key=True, default=uuid.uuid4)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(UTC))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    __table_args__ = (
        db.Index('idx_grave_documents_created_at', 'created_at'),
    )

    def to_record_dict(self) -> dict:
        """Document data with the store-owned id and createdAt filled in"""
        data = dict(self.data or {})
        data['id'] = str(self.id)
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        data['createdAt'] = created_at.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
        return data

    def __repr__(self):
        return f'<GraveDocument {self.id}>'

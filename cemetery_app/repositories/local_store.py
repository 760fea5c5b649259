"""
Record store backed by a JSON key-value file on local disk
"""

from __future__ import annotations

import json
import os
import random
import string
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path

from cemetery_app.repositories.base_store import RecordStore, utc_timestamp
from cemetery_app.services.exceptions import NotFoundError
from cemetery_app.shared.models import EDITABLE_FIELDS, Gender, GraveRecord


DEFAULT_STORAGE_KEY = 'grave_records'

ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_record_id(length: int = 9) -> str:
    """Short random base36 identifier"""
    return ''.join(random.choices(ID_ALPHABET, k=length))


def seed_records() -> list[GraveRecord]:
    """Sample records used when storage is empty"""
    created_at = utc_timestamp()
    return [
        GraveRecord(
            id='1',
            deceased_full_name='Eleanor Vance',
            parent_names='Samuel and Martha Vance',
            husband_name='Robert Vance',
            relative_contact='+92 300 1234567',
            date_of_birth='1945-05-12',
            date_of_death='2023-11-04',
            age_at_death=78,
            gender=Gender.FEMALE,
            grave_number='101',
            notes='A well-known teacher of the area and a devoted woman.',
            created_at=created_at,
        ),
        GraveRecord(
            id='2',
            deceased_full_name='Arthur Penhaligon',
            parent_names='Edward Penhaligon',
            relative_contact='+92 300 7654321',
            date_of_birth='1960-01-22',
            date_of_death='2024-02-15',
            age_at_death=64,
            gender=Gender.MALE,
            grave_number='102',
            notes='A sincere community worker.',
            created_at=created_at,
        ),
    ]


class KeyValueStorage(ABC):
    """Durable string storage addressed by key"""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Stored text, or None when the key is absent"""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value"""


class JsonFileStorage(KeyValueStorage):
    """Key-value storage kept as one JSON object in a file"""

    def __init__(self, path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, encoding='utf-8') as f:
            return json.load(f)

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a sibling temp file and swap it in so a crash leaves the old file intact
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class LocalRecordStore(RecordStore):
    """
    Synchronous record store over key-value storage

    The whole record list lives under a single key as a JSON array. It is
    read once when the store is built and rewritten in full after every
    create or update. New records are prepended.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY):
        super().__init__()
        self.storage = storage
        self.key = key
        self._lock = threading.Lock()
        self._records = self._load()

    def _load(self) -> list[GraveRecord]:
        saved = self.storage.get(self.key)
        if saved is None:
            self.logger.info(f"No stored records under '{self.key}', starting from seed data")
            return seed_records()
        # Malformed stored data is not recoverable here and propagates
        return [GraveRecord.from_dict(item) for item in json.loads(saved)]

    def _persist(self) -> None:
        payload = json.dumps([record.to_dict() for record in self._records], ensure_ascii=False)
        self.storage.set(self.key, payload)
        self.logger.debug(f"Persisted {len(self._records)} records under '{self.key}'")

    def list(self) -> list[GraveRecord]:
        return list(self._records)

    def create(self, fields: dict) -> GraveRecord:
        values = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
        record = GraveRecord(id=generate_record_id(), created_at=utc_timestamp(), **values)
        with self._lock:
            self._records = [record] + self._records
            self._persist()
            snapshot = list(self._records)
        self.logger.info(f"Created record {record.id} for grave {record.grave_number}")
        self._notify(snapshot)
        return record

    def update(self, record_id: str, fields: dict) -> GraveRecord:
        values = {name: fields[name] for name in EDITABLE_FIELDS if name in fields}
        with self._lock:
            for index, existing in enumerate(self._records):
                if existing.id == record_id:
                    updated = replace(existing, **values)
                    records = list(self._records)
                    records[index] = updated
                    self._records = records
                    break
            else:
                raise NotFoundError(f"Grave record {record_id} not found")
            self._persist()
            snapshot = list(self._records)
        self.logger.info(f"Updated record {record_id}")
        self._notify(snapshot)
        return updated

"""
Repository layer: the record store variants and their composition
"""

from flask import current_app

from .base_store import RecordStore
from .local_store import JsonFileStorage, KeyValueStorage, LocalRecordStore
from .remote_store import DocumentCollection, RemoteRecordStore, SqlDocumentCollection


STORE_EXTENSION_KEY = 'record_store'


def create_record_store(app) -> RecordStore:
    """Build the store variant named by RECORD_STORE"""
    variant = app.config.get('RECORD_STORE', 'local')
    if variant == 'local':
        storage = JsonFileStorage(app.config['RECORDS_FILE'])
        return LocalRecordStore(storage, app.config.get('RECORDS_STORAGE_KEY', 'grave_records'))
    if variant == 'remote':
        return RemoteRecordStore(SqlDocumentCollection())
    raise RuntimeError(f"Unknown RECORD_STORE '{variant}', expected 'local' or 'remote'")


def init_app(app) -> RecordStore:
    """Attach the configured store to the app"""
    store = create_record_store(app)
    app.extensions[STORE_EXTENSION_KEY] = store
    return store


def get_record_store() -> RecordStore:
    """Store of the current Flask app"""
    return current_app.extensions[STORE_EXTENSION_KEY]


__all__ = [
    'RecordStore',
    'KeyValueStorage',
    'JsonFileStorage',
    'LocalRecordStore',
    'DocumentCollection',
    'SqlDocumentCollection',
    'RemoteRecordStore',
    'create_record_store',
    'get_record_store',
    'init_app',
]

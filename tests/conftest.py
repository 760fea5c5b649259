"""
Pytest configuration and fixtures for the cemetery records project
"""

import json
from unittest.mock import Mock

import pytest

from cemetery_app import create_app, repositories
from cemetery_app.database import db as _db
from cemetery_app.shared.models import Gender, GraveRecord


class BaseTestConfig:
    """Test configuration: local JSON store in a temp file, in-memory SQLite"""
    def __init__(self, records_file, record_store='local'):
        self.secret_key = 'test-secret-key'

        self.record_store = record_store
        self.records_file = str(records_file)

        self.sqlalchemy_database_uri = 'sqlite://'
        self.sqlalchemy_track_modifications = False

        # Ollama configuration
        self.ollama_host = 'localhost'
        self.ollama_port = 11434
        self.ollama_model = 'test-model'
        self.ollama_vision_model = 'test-vision-model'
        self.ollama_api_key = None

    @property
    def ollama_base_url(self):
        return f"http://{self.ollama_host}:{self.ollama_port}"


@pytest.fixture
def make_record():
    """Factory for GraveRecord instances with sensible defaults"""
    counter = {'value': 0}

    def _make_record(**overrides):
        counter['value'] += 1
        values = {
            'id': f"rec{counter['value']}",
            'deceased_full_name': f"Person {counter['value']}",
            'date_of_death': '2020-06-01',
            'grave_number': str(100 + counter['value']),
            'created_at': '2024-01-01T00:00:00.000Z',
            'date_of_birth': '1950-01-01',
            'age_at_death': 70,
            'gender': Gender.MALE,
        }
        values.update(overrides)
        return GraveRecord(**values)

    return _make_record


@pytest.fixture
def records_file(tmp_path):
    """Path of the JSON storage file used by the local store"""
    return tmp_path / 'grave_records.json'


@pytest.fixture
def write_records(records_file):
    """Write records to the local storage file before the app is built"""
    def _write(records, key='grave_records'):
        payload = json.dumps([record.to_dict() for record in records])
        records_file.write_text(json.dumps({key: payload}), encoding='utf-8')
    return _write


@pytest.fixture
def app(records_file):
    """Flask app using the local record store"""
    app = create_app(BaseTestConfig(records_file))
    app.config['TESTING'] = True
    return app


@pytest.fixture
def use_records(app, write_records):
    """Replace the app's stored records and rebuild its local store"""
    def _use(records):
        write_records(records)
        return repositories.init_app(app)
    return _use


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def remote_app(records_file):
    """Flask app using the database-backed record store"""
    app = create_app(BaseTestConfig(records_file, record_store='remote'))
    app.config['TESTING'] = True
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture
def remote_client(remote_app):
    return remote_app.test_client()


@pytest.fixture
def mock_ai_service():
    """AIService stand-in with canned answers"""
    service = Mock()
    service.analyze_records.return_value = "Lifespans have grown steadily."
    service.suggest_notes.return_value = "Rest in peace."
    service.extract_from_image.return_value = None
    return service

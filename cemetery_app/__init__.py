"""
Cemetery Records - Flask application for burial record keeping
"""

import os
from pathlib import Path

from flask import Flask


PROJECT_ROOT = Path(__file__).parent.parent

STORE_VARIANTS = ('local', 'remote')


class Config:
    """Configuration class for Flask app with required environment variables"""

    def __init__(self):
        # Flask configuration
        self.secret_key = self._require_env('SECRET_KEY')

        # Record store selection
        self.record_store = os.environ.get('RECORD_STORE', 'local')
        if self.record_store not in STORE_VARIANTS:
            raise RuntimeError(f"RECORD_STORE must be one of {', '.join(STORE_VARIANTS)}, got {self.record_store!r}")
        self.records_file = os.environ.get('RECORDS_FILE', str(PROJECT_ROOT / 'instance' / 'grave_records.json'))

        # Database configuration (remote variant)
        if self.record_store == 'remote':
            self.sqlalchemy_database_uri = self._require_env('DATABASE_URL')
        else:
            self.sqlalchemy_database_uri = os.environ.get(
                'DATABASE_URL', f"sqlite:///{PROJECT_ROOT / 'instance' / 'cemetery.db'}")
        self.sqlalchemy_track_modifications = False

        # Ollama configuration
        self.ollama_host = self._require_env('OLLAMA_HOST')
        self.ollama_port = int(self._require_env('OLLAMA_PORT'))
        self.ollama_model = self._require_env('OLLAMA_MODEL')
        self.ollama_vision_model = os.environ.get('OLLAMA_VISION_MODEL') or self.ollama_model
        self.ollama_api_key = os.environ.get('OLLAMA_API_KEY')

    def _require_env(self, var_name: str) -> str:
        """Require environment variable or raise error"""
        value = os.environ.get(var_name)
        if not value:
            raise RuntimeError(f"Required environment variable {var_name} is not set")
        return value

    @property
    def ollama_base_url(self) -> str:
        """Construct full Ollama URL"""
        return f"http://{self.ollama_host}:{self.ollama_port}"


def create_app(config=None):
    """Application factory"""
    from cemetery_app import repositories
    from cemetery_app.blueprints.analysis import analysis
    from cemetery_app.blueprints.api import api
    from cemetery_app.blueprints.main import main
    from cemetery_app.blueprints.records import records
    from cemetery_app.commands import register_commands
    from cemetery_app.database import init_app as init_database
    from cemetery_app.error_handlers import register_error_handlers
    from cemetery_app.shared import navigation

    app = Flask(__name__)

    if config is None:
        config = Config()

    app.config['SECRET_KEY'] = config.secret_key
    app.config['RECORD_STORE'] = config.record_store
    app.config['RECORDS_FILE'] = config.records_file
    app.config['SQLALCHEMY_DATABASE_URI'] = config.sqlalchemy_database_uri
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = config.sqlalchemy_track_modifications
    app.config['OLLAMA_BASE_URL'] = config.ollama_base_url
    app.config['OLLAMA_HOST'] = config.ollama_host
    app.config['OLLAMA_PORT'] = config.ollama_port
    app.config['OLLAMA_MODEL'] = config.ollama_model
    app.config['OLLAMA_VISION_MODEL'] = getattr(config, 'ollama_vision_model', None) or config.ollama_model
    app.config['OLLAMA_API_KEY'] = getattr(config, 'ollama_api_key', None)

    app.register_blueprint(main)
    app.register_blueprint(records)
    app.register_blueprint(analysis)
    app.register_blueprint(api)

    init_database(app)
    repositories.init_app(app)
    navigation.init_app(app)

    register_error_handlers(app)
    register_commands(app)

    return app

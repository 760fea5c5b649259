"""
Flask CLI commands for cemetery records
"""

import click

from cemetery_app.database import init_db
from cemetery_app.repositories import get_record_store
from cemetery_app.shared.grave_calculations import next_grave_number


def register_commands(app):
    """Register all CLI commands with the Flask app"""

    @app.cli.command('init-db')
    def init_db_command():
        """Create the database tables used by the remote record store."""
        init_db()
        click.echo("Database tables created")

    @app.cli.command('next-grave-number')
    def next_grave_number_command():
        """Print the grave number the form would suggest next."""
        records = get_record_store().list()
        click.echo(f"{len(records)} records, next grave number: {next_grave_number(records)}")

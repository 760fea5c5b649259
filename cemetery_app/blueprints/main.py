"""
Main blueprint: the dashboard summary
"""

from flask import Blueprint, render_template

from cemetery_app.repositories import get_record_store
from cemetery_app.services.summary_service import summarize
from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.navigation import ActiveView


logger = get_project_logger(__name__)

main = Blueprint('main', __name__)


@main.route('/')
def index():
    """Dashboard with record counts and recent activity"""
    records = get_record_store().list()
    summary = summarize(records)
    return render_template('dashboard.html', summary=summary, active_view=ActiveView.DASHBOARD)

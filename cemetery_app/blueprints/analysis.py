"""
Analysis blueprint: AI-written trend summary of all records
"""

from flask import Blueprint, flash, redirect, render_template, url_for

from cemetery_app.blueprints.blueprint_utils import handle_blueprint_errors
from cemetery_app.repositories import get_record_store
from cemetery_app.services.ai_service import AIService
from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.navigation import ActiveView


logger = get_project_logger(__name__)

analysis = Blueprint('analysis', __name__, url_prefix='/analysis')


@analysis.route('/')
def index():
    """Analysis panel; the run button is disabled without records"""
    record_count = len(get_record_store().list())
    return render_template('analysis.html', record_count=record_count, analysis=None,
                           active_view=ActiveView.ANALYSIS)


@analysis.route('/run', methods=['POST'])
@handle_blueprint_errors('analysis.index')
def run():
    """Send the records to the model and show its answer as-is"""
    records = get_record_store().list()
    if not records:
        flash('There are no records to analyze yet', 'error')
        return redirect(url_for('analysis.index'))

    logger.info(f"Running trend analysis over {len(records)} records")
    result = AIService().analyze_records(records)
    return render_template('analysis.html', record_count=len(records), analysis=result,
                           active_view=ActiveView.ANALYSIS)

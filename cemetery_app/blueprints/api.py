"""
Read-only JSON API over the record store
"""

from flask import Blueprint, request

from cemetery_app.repositories import get_record_store
from cemetery_app.services.record_search import filter_records
from cemetery_app.services.summary_service import summarize
from cemetery_app.shared.api_response_formatter import APIResponseFormatter
from cemetery_app.shared.grave_calculations import next_grave_number
from cemetery_app.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


@api.route('/records')
def list_records():
    """Records, optionally filtered with ?q="""
    filtered = filter_records(get_record_store().list(), request.args.get('q', ''))
    return APIResponseFormatter.success({'records': [r.to_dict() for r in filtered], 'count': len(filtered)})


@api.route('/records/<record_id>')
def get_record(record_id):
    record = get_record_store().get(record_id)
    if record is None:
        return APIResponseFormatter.error('Record not found', status_code=404)
    return APIResponseFormatter.success({'record': record.to_dict()})


@api.route('/summary')
def summary():
    return APIResponseFormatter.success(summarize(get_record_store().list()).to_dict())


@api.route('/next-grave-number')
def suggested_grave_number():
    return APIResponseFormatter.success({'graveNumber': next_grave_number(get_record_store().list())})

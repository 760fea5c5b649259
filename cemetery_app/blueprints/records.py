"""
Records blueprint: searchable card/table listing and the create/edit form
"""

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for

from cemetery_app.blueprints.blueprint_utils import flash_service_error
from cemetery_app.repositories import get_record_store
from cemetery_app.services.ai_service import AIService
from cemetery_app.services.exceptions import ServiceError
from cemetery_app.services.grave_form import GraveForm
from cemetery_app.services.record_search import filter_records, normalize_view_mode
from cemetery_app.shared.grave_calculations import next_grave_number
from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.models import Gender
from cemetery_app.shared.navigation import ActiveView


logger = get_project_logger(__name__)

records = Blueprint('records', __name__, url_prefix='/records')

FORM_ACTIONS = ('save', 'scan', 'suggest_notes', 'remove_image', 'recalculate')


@records.route('/')
def index():
    """List records filtered by name or grave number"""
    search_term = request.args.get('q', '')
    view_mode = normalize_view_mode(request.args.get('view', 'card'))
    filtered = filter_records(get_record_store().list(), search_term)
    return render_template(
        'records/index.html',
        records=filtered,
        search_term=search_term,
        view_mode=view_mode,
        active_view=ActiveView.RECORDS,
    )


def render_form(form: GraveForm):
    return render_template(
        'records/form.html',
        form=form,
        genders=list(Gender),
        active_view=ActiveView.ADD,
    )


def process_form_post(record_id: str = None):
    """Apply one posted form action to the working copy"""
    store = get_record_store()
    form = GraveForm.from_submission(request.form, record_id)

    upload = request.files.get('image_file')
    if upload and upload.filename:
        form.attach_image(upload.read(), upload.mimetype)

    action = request.form.get('action', 'save')
    if action not in FORM_ACTIONS:
        logger.warning(f"Unknown form action {action!r}, re-rendering form")
        action = 'recalculate'

    try:
        if action == 'save':
            record = form.submit(store)
            flash(f'Record for {record.deceased_full_name} saved', 'success')
            return redirect(url_for(ActiveView.RECORDS.endpoint))
        if action == 'scan':
            form.scan_image(AIService())
            flash('Details were read from the photo - please check them before saving', 'success')
        elif action == 'suggest_notes':
            form.suggest_notes(AIService())
        elif action == 'remove_image':
            form.clear_image()
    except ServiceError as e:
        flash_service_error(e)

    return render_form(form)


@records.route('/new', methods=['GET', 'POST'])
def new_record():
    """Form for a new record, seeded with the suggested grave number"""
    if request.method == 'POST':
        return process_form_post()

    suggested = next_grave_number(get_record_store().list())
    return render_form(GraveForm.for_new(suggested))


@records.route('/<record_id>/edit', methods=['GET', 'POST'])
def edit_record(record_id):
    """Form preloaded with an existing record"""
    record = get_record_store().get(record_id)
    if record is None:
        abort(404)

    if request.method == 'POST':
        return process_form_post(record.id)

    return render_form(GraveForm.for_record(record))

"""
CertifyGRC - ISO/IEC 27001 Gap Assessment Dashboard
Flask Application
"""

import io

from flask import (
    Flask, flash, get_flashed_messages, has_request_context, jsonify, request, send_file,
)
from werkzeug.utils import secure_filename

from certify_grc.config import config
from certify_grc.logger import get_logger
from certify_grc.models import (
    AnswerField, EvidenceFile, MissingFieldError, PersistenceWriteFailure, UnknownDomainError,
    UnknownRegisterError, ValidationError,
)
from certify_grc.navigation import View
from certify_grc.reports import export_register_workbook, export_workbook
from certify_grc.storage import build_storage
from certify_grc.views import entry_for_display, submission_for_display
from certify_grc.workspace import Workspace

logger = get_logger(__name__)

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
app.config['MAX_CONTENT_LENGTH'] = config.MAX_EVIDENCE_MB * 1024 * 1024
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'


def notify_user(title, message, category='info'):
    """Queue a toast for the current response (fire-and-forget)."""
    if has_request_context():
        flash(f"{title}: {message}", category)
    else:
        logger.info("[%s] %s: %s", category, title, message)


# One dashboard session per process
workspace = Workspace(build_storage(config), notify=notify_user)


def respond(payload=None, status=200):
    """JSON envelope with the queued notifications."""
    body = {'success': status < 400}
    body.update(payload or {})
    body['notifications'] = [
        {'category': category, 'message': message}
        for category, message in get_flashed_messages(with_categories=True)
    ]
    return jsonify(body), status


def json_body():
    """The request's JSON object, or {} for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def uploaded_files():
    return [
        EvidenceFile(name=secure_filename(f.filename or 'evidence'),
                     data=f.read(), content_type=f.mimetype)
        for f in request.files.getlist('files')
    ]


def page_payload():
    return {
        'view': workspace.active_view.value,
        'location': workspace.location.current_location(),
        'page': workspace.render(),
    }


@app.after_request
def add_security_headers(response):
    """Add security headers to all responses."""
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    return response


@app.errorhandler(UnknownDomainError)
def handle_unknown_domain(e):
    return respond({'error': str(e)}, 404)


@app.errorhandler(UnknownRegisterError)
def handle_unknown_register(e):
    return respond({'error': str(e)}, 404)


@app.errorhandler(413)
def handle_too_large(e):
    return respond({'error': f'Upload exceeds {config.MAX_EVIDENCE_MB} MB'}, 413)


# ============================================================================
# ROUTES - PAGES
# ============================================================================

@app.route('/')
@app.route('/<path:location>')
def page(location=''):
    """Every navigable location renders the view it maps to."""
    workspace.location.visit(request.path)
    return respond(page_payload())


@app.route('/api/navigate', methods=['POST'])
def api_navigate():
    """Switch to a view from an in-app action."""
    data = json_body()
    try:
        workspace.navigation.request_view(data.get('view'))
    except ValueError:
        return respond({'error': f"Unknown view: {data.get('view')}"}, 400)
    return respond(page_payload())


@app.route('/api/history/<direction>', methods=['POST'])
def api_history(direction):
    """Browser-style back/forward."""
    if direction == 'back':
        moved = workspace.location.back()
    elif direction == 'forward':
        moved = workspace.location.forward()
    else:
        return respond({'error': f'Unknown direction: {direction}'}, 400)
    payload = page_payload()
    payload['moved'] = moved
    return respond(payload)


# ============================================================================
# ROUTES - ASSESSMENTS
# ============================================================================

@app.route('/api/assessments/<slug>/open', methods=['POST'])
def api_open_form(slug):
    """Open a domain's form with a blank record."""
    workspace.open_form(slug)
    return respond(page_payload())


@app.route('/api/assessments/<slug>/answers', methods=['POST'])
def api_update_answer(slug):
    """Update one field of one section of the in-progress record."""
    manager = workspace.manager(slug)
    data = json_body()
    try:
        field = AnswerField.parse(data.get('field'))
        if field is AnswerField.EVIDENCE_FILES:
            return respond({'error': 'Evidence files are uploaded through the evidence endpoint'}, 400)
        updated = manager.update_field(data.get('section'), field, data.get('value'))
    except ValueError as e:
        return respond({'error': str(e)}, 400)
    if not updated:
        return respond({'error': f"Unknown section: {data.get('section')}"}, 400)
    return respond({'current': manager.current.to_dict()})


@app.route('/api/assessments/<slug>/evidence/<section>', methods=['POST'])
def api_upload_evidence(slug, section):
    """Replace a section's evidence files with the uploaded ones."""
    manager = workspace.manager(slug)
    if manager.domain.section(section) is None:
        return respond({'error': f'Unknown section: {section}'}, 400)
    accepted = manager.set_evidence_files(section, uploaded_files())
    return respond({'files': [f.name for f in accepted]})


@app.route('/api/assessments/<slug>/submit', methods=['POST'])
def api_submit(slug):
    """Validate and save the in-progress record."""
    data = json_body()
    view_reports = bool(data.get('view_reports'))
    try:
        record = workspace.submit(slug, view_reports=view_reports)
    except ValidationError as e:
        return respond({'error': str(e), 'section': e.section.key}, 400)
    except PersistenceWriteFailure as e:
        return respond({'error': str(e)}, 500)

    payload = {'record': submission_for_display(record)}
    if view_reports:
        payload['redirect'] = workspace.location.current_location()
    return respond(payload)


@app.route('/api/assessments/<slug>/records', methods=['GET'])
def api_records(slug):
    """Submission history, optionally searched and filtered."""
    reports = workspace.reports(slug)
    try:
        page_data = reports.render(workspace.navigation.request_view,
                                   search=request.args.get('search'),
                                   requirements_met=request.args.get('filter'))
    except ValueError as e:
        return respond({'error': str(e)}, 400)
    return respond(page_data)


@app.route('/api/assessments/<slug>/export', methods=['GET'])
def api_export(slug):
    """Download the submission history as an Excel workbook."""
    manager = workspace.manager(slug)
    data = export_workbook(manager.domain, manager.list_submissions())
    return send_file(
        io.BytesIO(data),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f'{manager.domain.slug}-assessments.xlsx',
    )


# ============================================================================
# ROUTES - REGISTERS (risk, treatment, organizations)
# ============================================================================

@app.route('/api/registers/<slug>/fields', methods=['POST'])
def api_update_register(slug):
    """Update draft fields: {field, value} or {values: {...}}."""
    manager = workspace.register(slug)
    data = json_body()
    try:
        if 'values' in data:
            if not isinstance(data['values'], dict):
                return respond({'error': 'values must be an object'}, 400)
            manager.update(data['values'])
        else:
            manager.update_field(data.get('field'), data.get('value'))
    except ValueError as e:
        return respond({'error': str(e)}, 400)
    return respond({'draft': manager.draft})


@app.route('/api/registers/<slug>/evidence', methods=['POST'])
def api_register_evidence(slug):
    """Replace the draft's evidence files with the uploaded ones."""
    manager = workspace.register(slug)
    try:
        accepted = manager.set_evidence_files(uploaded_files())
    except ValueError as e:
        return respond({'error': str(e)}, 400)
    return respond({'files': [f.name for f in accepted]})


@app.route('/api/registers/<slug>/submit', methods=['POST'])
def api_register_submit(slug):
    """Validate and save the draft entry."""
    manager = workspace.register(slug)
    try:
        entry = manager.submit()
    except MissingFieldError as e:
        return respond({'error': str(e), 'field': e.field.name}, 400)
    except PersistenceWriteFailure as e:
        return respond({'error': str(e)}, 500)
    return respond({'entry': entry_for_display(entry)})


@app.route('/api/registers/<slug>/records', methods=['GET'])
def api_register_records(slug):
    """Saved entries, optionally searched and filtered on one field."""
    manager = workspace.register(slug)
    try:
        entries = manager.search(request.args.get('search'),
                                 request.args.get('field'), request.args.get('value'))
    except ValueError as e:
        return respond({'error': str(e)}, 400)
    return respond({
        'register': manager.register.slug,
        'total': len(manager.list_entries()),
        'records': [entry_for_display(e) for e in entries],
    })


@app.route('/api/registers/<slug>/records/<entry_id>', methods=['DELETE'])
def api_register_delete(slug, entry_id):
    """Delete a saved entry."""
    manager = workspace.register(slug)
    try:
        deleted = manager.delete_entry(entry_id)
    except PersistenceWriteFailure as e:
        return respond({'error': str(e)}, 500)
    if not deleted:
        return respond({'error': f'No entry {entry_id}'}, 404)
    return respond({'deleted': entry_id})


@app.route('/api/registers/<slug>/export', methods=['GET'])
def api_register_export(slug):
    """Download a register as an Excel workbook."""
    manager = workspace.register(slug)
    data = export_register_workbook(manager.register, manager.list_entries())
    return send_file(
        io.BytesIO(data),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f'{manager.register.slug}.xlsx',
    )


@app.route('/api/views', methods=['GET'])
def api_views():
    """Navigable views and their locations."""
    return respond({
        'views': [
            {'view': view.value, 'location': workspace.navigation.location_for(view)}
            for view in View
        ]
    })


if __name__ == '__main__':
    app.run(debug=config.DEBUG, host=config.HOST, port=config.PORT)

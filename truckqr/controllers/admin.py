from flask import Blueprint, render_template, request, redirect, url_for, flash, jsonify, current_app
from flask_login import login_required
from truckqr.services.alerts import AlertService
from truckqr.services.compliance import ComplianceService
from truckqr.services.fleet import FleetService
from truckqr.services.reports import ReportService
from truckqr.utils.error_handler import handle_admin_errors, ValidationError
from truckqr.utils.helpers import normalize_plate
from truckqr.utils.logging_config import get_logger

admin_bp = Blueprint('admin', __name__)
api_bp = Blueprint('api', __name__)

logger = get_logger(__name__)


def _form_plate():
    plate = normalize_plate(request.form.get('plate'))
    if not plate:
        raise ValidationError('Plate is required')
    return plate


def _back_to(plate):
    return redirect(url_for('admin.edit', plate=plate))


@admin_bp.route('/edit', methods=['GET'])
@login_required
def edit():
    plate = normalize_plate(request.args.get('plate'))
    view = FleetService.admin_view(plate)
    return render_template('admin/edit.html', **view)


@admin_bp.route('/edit', methods=['POST'])
@login_required
@handle_admin_errors
def save_truck():
    plate = _form_plate()
    FleetService.upsert_truck(plate, request.form)
    flash('Saved', 'success')
    return _back_to(plate)


@admin_bp.route('/truck/delete', methods=['POST'])
@login_required
@handle_admin_errors
def delete_truck():
    plate = _form_plate()
    FleetService.delete_truck(plate)
    flash(f'Truck {plate} deleted', 'success')
    return redirect(url_for('admin.edit'))


# Gallery

@admin_bp.route('/upload', methods=['POST'])
@login_required
@handle_admin_errors
def upload_photos():
    plate = _form_plate()
    files = [f for f in request.files.getlist('files') if f and f.filename]
    if not files:
        raise ValidationError('No images selected')
    limit = current_app.config['MAX_UPLOAD_FILES']
    if len(files) > limit:
        raise ValidationError(f'At most {limit} images per upload')

    saved, failed = FleetService.save_photos(plate, files)
    message = f'{saved} uploaded' + (f', {failed} failed' if failed else '')
    flash(message, 'success' if saved else 'error')
    return _back_to(plate)


@admin_bp.route('/photo/delete', methods=['POST'])
@login_required
@handle_admin_errors
def delete_photo():
    plate = _form_plate()
    FleetService.delete_photo(plate, request.form.get('name'))
    flash('Image deleted', 'success')
    return _back_to(plate)


@admin_bp.route('/photo/replace', methods=['POST'])
@login_required
@handle_admin_errors
def replace_photo():
    plate = _form_plate()
    new_file = request.files.get('new_file')
    if not new_file or not new_file.filename:
        raise ValidationError('No image attached')
    FleetService.replace_photo(plate, request.form.get('name'), new_file)
    flash('Image replaced', 'success')
    return _back_to(plate)


@admin_bp.route('/photo/cover', methods=['POST'])
@login_required
@handle_admin_errors
def set_cover():
    plate = _form_plate()
    FleetService.set_cover(plate, request.form.get('name'))
    flash('Set as cover', 'success')
    return _back_to(plate)


@admin_bp.route('/cover/upload', methods=['POST'])
@login_required
@handle_admin_errors
def upload_cover():
    plate = _form_plate()
    cover = request.files.get('cover')
    if not cover or not cover.filename:
        raise ValidationError('Attach an image')
    FleetService.upload_cover(plate, cover)
    flash('Cover updated', 'success')
    return _back_to(plate)


# Documents

@admin_bp.route('/doc/add', methods=['POST'])
@login_required
@handle_admin_errors
def add_document():
    plate = _form_plate()
    FleetService.add_document(
        plate,
        request.form.get('category'),
        request.form.get('title'),
        request.form.get('expiration_date', ''),
        request.form.get('url'),
    )
    flash('Document added', 'success')
    return _back_to(plate)


@admin_bp.route('/doc/upload', methods=['POST'])
@login_required
@handle_admin_errors
def upload_document():
    plate = _form_plate()
    upload = request.files.get('file')
    if not upload or not upload.filename:
        raise ValidationError('Upload an image')
    FleetService.upload_document(
        plate,
        upload,
        request.form.get('category'),
        request.form.get('title'),
        request.form.get('expiration_date', ''),
    )
    flash('Document created with image', 'success')
    return _back_to(plate)


@admin_bp.route('/doc/update', methods=['POST'])
@login_required
@handle_admin_errors
def update_document():
    plate = _form_plate()
    FleetService.update_document(
        plate,
        (request.form.get('id') or '').strip(),
        request.form.get('category'),
        request.form.get('title'),
        request.form.get('expiration_date', ''),
        request.form.get('url'),
    )
    flash('Document updated', 'success')
    return _back_to(plate)


@admin_bp.route('/doc/delete', methods=['POST'])
@login_required
@handle_admin_errors
def delete_document():
    plate = _form_plate()
    document_id = (request.form.get('id') or '').strip()
    if not document_id:
        raise ValidationError('Document id is required')
    FleetService.delete_document(plate, document_id)
    flash('Document deleted', 'success')
    return _back_to(plate)


# Reports and alerts

@admin_bp.route('/reports')
@login_required
def reports():
    plate = normalize_plate(request.args.get('plate'))
    return render_template('admin/reports.html', plate=plate,
                           reports=ReportService.list_reports(plate))


@admin_bp.route('/alerts/run', methods=['POST'])
@login_required
def run_alert_sweep():
    logger.info("Manual expiration sweep requested")
    result = AlertService.run_sweep()
    if result.notified:
        flash(f'Expiration warning sent for {len(result.documents)} document(s)', 'success')
    elif result.skipped_reason == 'nothing-due':
        flash('No documents reach the warning threshold today', 'info')
    else:
        flash(f'Warning not sent ({result.skipped_reason})', 'error')
    return redirect(url_for('admin.edit', plate=normalize_plate(request.form.get('plate')) or None))


@api_bp.route('/alerts')
@login_required
def alerts_feed():
    return jsonify(ComplianceService.list_alerts())


@api_bp.route('/reports')
@login_required
def reports_feed():
    reports = ReportService.list_reports(request.args.get('plate'))
    return jsonify([report.to_dict() for report in reports])

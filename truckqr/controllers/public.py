from flask import Blueprint, render_template, request, redirect, url_for, abort, current_app, make_response
from truckqr import limiter
from truckqr.services.fleet import FleetService
from truckqr.services.reports import ReportService, ReportOutcome
from truckqr.utils.helpers import normalize_plate
from truckqr.utils.qr_generator import QRGenerator


public_bp = Blueprint('public', __name__)


@public_bp.route('/')
def index():
    plate = normalize_plate(request.args.get('plate'))
    if plate:
        return redirect(url_for('public.profile', plate=plate))
    return render_template('public/index.html')


@public_bp.route('/c/<plate>')
def profile(plate):
    view = FleetService.truck_view(plate)
    status = 200 if view['truck'] is not None else 404
    return render_template('public/profile.html',
                           sent=request.args.get('sent') == '1',
                           error=request.args.get('error') == '1',
                           **view), status


@public_bp.route('/c/<plate>/report', methods=['POST'])
@limiter.limit("10 per minute")
def submit_report(plate):
    plate = normalize_plate(plate)
    outcome, _ = ReportService.submit(plate, request.form)

    if outcome is ReportOutcome.REJECTED:
        return redirect(url_for('public.profile', plate=plate, error=1))
    if outcome is ReportOutcome.IGNORED:
        return redirect(url_for('public.profile', plate=plate))
    return redirect(url_for('public.profile', plate=plate, sent=1))


@public_bp.route('/file/<photo_id>')
def photo_file(photo_id):
    """Serve a stored photo or document image."""
    photo = FleetService.get_photo(photo_id)
    if photo is None:
        abort(404)

    response = make_response(photo.data)
    response.headers['Content-Type'] = photo.mime_type or 'application/octet-stream'
    response.headers['Cache-Control'] = f"public, max-age={current_app.config['PHOTO_CACHE_SECONDS']}"
    return response


@public_bp.route('/qrimg/<plate>.png')
def qr_image(plate):
    png = QRGenerator().generate_png(normalize_plate(plate))
    response = make_response(png)
    response.headers['Content-Type'] = 'image/png'
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
    return response


@public_bp.route('/qr/<plate>.png')
def qr_legacy(plate):
    return redirect(url_for('public.qr_image', plate=plate), code=302)


@public_bp.route('/healthz')
def healthz():
    return 'OK', 200, {'Content-Type': 'text/plain'}

import os
import re
from datetime import datetime
from flask import current_app
from werkzeug.utils import secure_filename
from truckqr.utils.error_handler import ValidationError

PHOTO_URL_PREFIX = '/file/'
_PHOTO_ID_RE = re.compile(r'/file/([A-Za-z0-9]+)')


def normalize_plate(plate):
    """Canonical plate form: trimmed and uppercase."""
    return str(plate or '').strip().upper()


def split_notes(notes):
    """Split a semicolon-delimited notes string into trimmed, non-empty items."""
    if not notes:
        return []
    if isinstance(notes, (list, tuple)):
        items = notes
    else:
        items = str(notes).split(';')
    return [item.strip() for item in items if item and item.strip()]


def join_notes(notes):
    return ';'.join(split_notes(notes))


def parse_date(value):
    """Parse an HTML date input (YYYY-MM-DD). Empty input gives None."""
    value = (value or '').strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'Invalid date: {value}')


def sanitize_filename(name):
    """Filesystem-safe filename keeping the lowercased extension."""
    base, ext = os.path.splitext(name or '')
    base = secure_filename(base) or 'img'
    return base + ext.lower()


def is_allowed_image(filename):
    ext = os.path.splitext(filename or '')[1].lower().lstrip('.')
    return ext in current_app.config['ALLOWED_IMAGE_EXTENSIONS']


def photo_url(photo_id):
    return f'{PHOTO_URL_PREFIX}{photo_id}'


def extract_photo_id(reference):
    """Photo id from a ``/file/<id>`` reference, or a bare id. None if neither."""
    reference = str(reference or '').strip()
    if not reference:
        return None
    match = _PHOTO_ID_RE.search(reference)
    if match:
        return match.group(1)
    if reference.isalnum():
        return reference
    return None

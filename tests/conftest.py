"""
Global test fixtures for pytest.

Provides:
- A TestingConfig application with an in-memory SQLite store
- Anonymous and logged-in admin clients
- Factories for trucks, documents and photos
"""
import io
from datetime import date, timedelta

import pytest

from truckqr import create_app, db
from truckqr.models import Truck, Document, Photo


TEST_TODAY = date(2026, 3, 1)
ADMIN_PASSWORD = 'test-admin-pass'


# ============================================================================
# Application and clients
# ============================================================================

@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Anonymous visitor."""
    return app.test_client()


@pytest.fixture
def admin_client(app):
    """Client logged in through the admin login form."""
    client = app.test_client()
    response = client.post('/admin/login', data={'password': ADMIN_PASSWORD})
    assert response.status_code == 302
    return client


@pytest.fixture
def today():
    return TEST_TODAY


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_truck(app):
    def _make(plate='ABC123', **fields):
        truck = Truck(plate=plate, **fields)
        db.session.add(truck)
        db.session.commit()
        return truck
    return _make


@pytest.fixture
def make_document(app):
    """Document expiring ``days`` days after ``base`` (None for no date)."""
    def _make(plate='ABC123', days=None, base=TEST_TODAY, category='PERMIT', title='Permit', alert_sent=False):
        document = Document(
            plate=plate,
            category=category,
            title=title,
            expiration_date=None if days is None else base + timedelta(days=days),
            alert_sent=alert_sent,
        )
        db.session.add(document)
        db.session.commit()
        return document
    return _make


@pytest.fixture
def make_photo(app):
    def _make(plate='ABC123', filename='truck.jpg', data=b'\xff\xd8fake-jpeg', kind=Photo.KIND_GALLERY):
        photo = Photo(plate=plate, filename=filename, mime_type='image/jpeg', data=data, kind=kind)
        db.session.add(photo)
        db.session.commit()
        return photo
    return _make


@pytest.fixture
def image_upload():
    """Builds (stream, filename) pairs for multipart test posts."""
    def _upload(filename='photo.jpg', data=b'\xff\xd8fake-jpeg'):
        return (io.BytesIO(data), filename)
    return _upload

"""Fleet service: trucks, their photo gallery and their documents."""

import posixpath
from truckqr import db
from truckqr.models import Truck, Document, Photo
from truckqr.services.compliance import ComplianceService, local_today
from truckqr.utils.error_handler import ValidationError, NotFoundError
from truckqr.utils.helpers import (
    normalize_plate, parse_date, sanitize_filename, is_allowed_image,
    photo_url, extract_photo_id, PHOTO_URL_PREFIX,
)
from truckqr.utils.database import commit_changes
from truckqr.utils.logging_config import get_logger

logger = get_logger(__name__)

TRUCK_FIELDS = ('unit_code', 'depot', 'make', 'model', 'year', 'vin', 'complaint_phone')


def _ref_filename(reference):
    return posixpath.basename(str(reference or '').rstrip('/'))


def gallery_without_cover(refs, cover_ref):
    """Photo references for the gallery, with the cover photo left out.

    A reference is the cover when it equals ``cover_ref`` exactly, or when
    both point at the same filename (the last path segment), since the same
    photo can be exposed under different path prefixes.
    """
    if not cover_ref:
        return list(refs)
    cover_name = _ref_filename(cover_ref)
    return [ref for ref in refs
            if ref != cover_ref and not (cover_name and _ref_filename(ref) == cover_name)]


class FleetService:

    # Trucks

    @staticmethod
    def get_truck(plate):
        plate = normalize_plate(plate)
        if not plate:
            return None
        return db.session.get(Truck, plate)

    @staticmethod
    def require_truck(plate):
        truck = FleetService.get_truck(plate)
        if truck is None:
            raise NotFoundError(f'Plate {normalize_plate(plate)} not found')
        return truck

    @staticmethod
    def upsert_truck(plate, data):
        """Create or update a truck from the admin form. The cover is left alone."""
        plate = normalize_plate(plate)
        if not plate:
            raise ValidationError('Plate is required')

        truck = db.session.get(Truck, plate)
        if truck is None:
            truck = Truck(plate=plate)
            db.session.add(truck)
            logger.info(f"Creating truck {plate}")

        for field in TRUCK_FIELDS:
            truck_value = (data.get(field) or '').strip()
            setattr(truck, field, truck_value)
        truck.notes = data.get('notes') or ''
        commit_changes(f"save truck {plate}")
        return truck

    @staticmethod
    def delete_truck(plate):
        """Delete a truck together with all of its documents and photos."""
        truck = FleetService.require_truck(plate)
        db.session.delete(truck)
        commit_changes(f"delete truck {truck.plate}")
        logger.info(f"Deleted truck {truck.plate}")

    # Photos

    @staticmethod
    def list_photo_refs(plate, kind=Photo.KIND_GALLERY):
        """Photo references for a plate, newest first."""
        rows = db.session.query(Photo.id).filter(
            Photo.plate == normalize_plate(plate),
            Photo.kind == kind
        ).order_by(Photo.created_at.desc()).all()
        return [photo_url(row.id) for row in rows]

    @staticmethod
    def get_photo(photo_id):
        return db.session.get(Photo, photo_id)

    @staticmethod
    def save_photo(plate, file_storage, kind=Photo.KIND_GALLERY):
        """Store an uploaded image for an existing truck."""
        truck = FleetService.require_truck(plate)
        if not is_allowed_image(file_storage.filename):
            raise ValidationError(f'File type not allowed: {file_storage.filename}')

        photo = Photo(
            plate=truck.plate,
            filename=sanitize_filename(file_storage.filename),
            mime_type=file_storage.mimetype or 'application/octet-stream',
            data=file_storage.read(),
            kind=kind,
        )
        db.session.add(photo)
        commit_changes("store photo")
        return photo

    @staticmethod
    def save_photos(plate, files):
        """Store several uploads. Returns (saved, failed) counts."""
        FleetService.require_truck(plate)
        saved = failed = 0
        for file_storage in files:
            if not file_storage or not file_storage.filename:
                continue
            try:
                FleetService.save_photo(plate, file_storage)
                saved += 1
            except ValidationError as e:
                logger.info(f"Rejected upload for {plate}: {e}")
                failed += 1
        return saved, failed

    @staticmethod
    def _find_photo(plate, reference):
        photo_id = extract_photo_id(reference)
        if not photo_id:
            raise ValidationError('Photo reference is required')
        photo = Photo.query.filter_by(id=photo_id, plate=normalize_plate(plate)).first()
        if photo is None:
            raise NotFoundError('Photo not found')
        return photo

    @staticmethod
    def replace_photo(plate, reference, file_storage):
        """Swap the image bytes behind an existing photo id."""
        photo = FleetService._find_photo(plate, reference)
        if not is_allowed_image(file_storage.filename):
            raise ValidationError(f'File type not allowed: {file_storage.filename}')
        photo.filename = sanitize_filename(file_storage.filename)
        photo.mime_type = file_storage.mimetype or 'application/octet-stream'
        photo.data = file_storage.read()
        commit_changes("replace photo")
        return photo

    @staticmethod
    def delete_photo(plate, reference):
        """Delete a photo. A cover pointing at it is left dangling on purpose."""
        photo = FleetService._find_photo(plate, reference)
        db.session.delete(photo)
        commit_changes("delete photo")

    @staticmethod
    def set_cover(plate, reference):
        truck = FleetService.require_truck(plate)
        photo = FleetService._find_photo(truck.plate, reference)
        truck.cover_ref = photo.url
        commit_changes("set cover")
        return truck

    @staticmethod
    def upload_cover(plate, file_storage):
        photo = FleetService.save_photo(plate, file_storage)
        return FleetService.set_cover(plate, photo.url)

    @staticmethod
    def resolve_cover(truck):
        """The truck's cover reference, or None when it points at a removed photo."""
        if truck is None or not truck.cover_ref:
            return None
        if not truck.cover_ref.startswith(PHOTO_URL_PREFIX):
            return truck.cover_ref
        photo_id = extract_photo_id(truck.cover_ref)
        exists = db.session.query(Photo.id).filter_by(id=photo_id, plate=truck.plate).first()
        return truck.cover_ref if exists else None

    @staticmethod
    def gallery(truck):
        if truck is None:
            return []
        return gallery_without_cover(FleetService.list_photo_refs(truck.plate), truck.cover_ref)

    # Documents

    @staticmethod
    def list_documents(plate):
        """Documents for a plate, soonest expiration first and undated last."""
        return Document.query.filter_by(plate=normalize_plate(plate)).order_by(
            Document.expiration_date.is_(None), Document.expiration_date, Document.created_at
        ).all()

    @staticmethod
    def add_document(plate, category, title, expiration_date, file_ref=None):
        truck = FleetService.require_truck(plate)
        category = (category or '').strip()
        title = (title or '').strip()
        if not category or not title:
            raise ValidationError('Category and title are required')

        document = Document(
            plate=truck.plate,
            category=category,
            title=title,
            expiration_date=parse_date(expiration_date) if isinstance(expiration_date, str) else expiration_date,
            file_ref=(file_ref or '').strip() or None,
            alert_sent=False,
        )
        db.session.add(document)
        commit_changes("add document")
        return document

    @staticmethod
    def upload_document(plate, file_storage, category, title, expiration_date):
        """Store the document image, then create the document pointing at it."""
        expiration = parse_date(expiration_date)
        if expiration is None:
            raise ValidationError('Expiration date is required')
        photo = FleetService.save_photo(plate, file_storage, kind=Photo.KIND_DOCUMENT)
        return FleetService.add_document(plate, (category or '').strip() or 'DOC',
                                         (title or '').strip() or 'Document', expiration, photo.url)

    @staticmethod
    def update_document(plate, document_id, category, title, expiration_date, file_ref=None):
        """Edit a document in place. The alert flag is never touched here."""
        document = Document.query.filter_by(id=document_id, plate=normalize_plate(plate)).first()
        if document is None:
            raise NotFoundError('Document not found')
        category = (category or '').strip()
        title = (title or '').strip()
        if not category or not title:
            raise ValidationError('Category and title are required')

        document.category = category
        document.title = title
        document.expiration_date = parse_date(expiration_date)
        if file_ref is not None:
            document.file_ref = file_ref.strip() or None
        commit_changes("update document")
        return document

    @staticmethod
    def delete_document(plate, document_id):
        """Delete a document and the uploaded image that only it refers to."""
        document = Document.query.filter_by(id=document_id, plate=normalize_plate(plate)).first()
        if document is None:
            raise NotFoundError('Document not found')

        if document.file_ref and document.file_ref.startswith(PHOTO_URL_PREFIX):
            Photo.query.filter_by(
                id=extract_photo_id(document.file_ref),
                plate=document.plate,
                kind=Photo.KIND_DOCUMENT
            ).delete(synchronize_session=False)
        db.session.delete(document)
        commit_changes("delete document")

    # View models

    @staticmethod
    def truck_view(plate, today=None):
        """Everything the public profile shows for one plate."""
        if today is None:
            today = local_today()
        truck = FleetService.get_truck(plate)
        documents = []
        if truck is not None:
            documents = ComplianceService.annotate_documents(FleetService.list_documents(truck.plate), today)
        return {
            'plate': normalize_plate(plate),
            'truck': truck,
            'documents': documents,
            'warnings': ComplianceService.warnings(documents),
            'gallery': FleetService.gallery(truck),
            'cover': FleetService.resolve_cover(truck),
        }

    @staticmethod
    def admin_view(plate, today=None):
        """Editor data: the public view plus raw documents and the fleet alerts."""
        if today is None:
            today = local_today()
        view = FleetService.truck_view(plate, today) if plate else {
            'plate': '', 'truck': None, 'documents': [], 'warnings': [], 'gallery': [], 'cover': None,
        }
        view['raw_documents'] = FleetService.list_documents(plate) if view['truck'] is not None else []
        view['alerts'] = ComplianceService.list_alerts(today)
        return view

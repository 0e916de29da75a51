import uuid
from datetime import datetime
from truckqr import db
from truckqr.utils.helpers import photo_url


class Photo(db.Model):
    __tablename__ = 'photos'

    KIND_GALLERY = 'gallery'
    KIND_DOCUMENT = 'document'

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    plate = db.Column(db.String(32), db.ForeignKey('trucks.plate', ondelete='CASCADE', onupdate='CASCADE'),
                      nullable=False, index=True)
    filename = db.Column(db.String(255), nullable=False)
    mime_type = db.Column(db.String(100), nullable=False, default='application/octet-stream')
    data = db.Column(db.LargeBinary, nullable=False)
    kind = db.Column(db.String(16), nullable=False, default=KIND_GALLERY)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @property
    def url(self):
        return photo_url(self.id)

    def __repr__(self):
        return f'<Photo {self.filename} for {self.plate}>'

import uuid
from datetime import datetime
from truckqr import db


class Document(db.Model):
    __tablename__ = 'documents'

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    plate = db.Column(db.String(32), db.ForeignKey('trucks.plate', ondelete='CASCADE', onupdate='CASCADE'),
                      nullable=False, index=True)
    category = db.Column(db.String(64), nullable=False)
    title = db.Column(db.String(128), nullable=False)
    expiration_date = db.Column(db.Date, nullable=True)
    file_ref = db.Column(db.String(512), nullable=True)
    # Set once by the alert sweep, never by admin edits
    alert_sent = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'plate': self.plate,
            'category': self.category,
            'title': self.title,
            'expiration_date': self.expiration_date.isoformat() if self.expiration_date else None,
            'file_ref': self.file_ref,
            'alert_sent': self.alert_sent,
        }

    def __repr__(self):
        return f'<Document {self.category} {self.title} for {self.plate}>'

from truckqr import db
from truckqr.utils.helpers import split_notes, join_notes


class Truck(db.Model):
    __tablename__ = 'trucks'

    plate = db.Column(db.String(32), primary_key=True)
    unit_code = db.Column(db.String(64), nullable=True)
    depot = db.Column(db.String(64), nullable=True)
    make = db.Column(db.String(64), nullable=True)
    model = db.Column(db.String(64), nullable=True)
    year = db.Column(db.String(16), nullable=True)
    vin = db.Column(db.String(64), nullable=True)
    complaint_phone = db.Column(db.String(64), nullable=True)
    cover_ref = db.Column(db.String(512), nullable=True)  # /file/<photo id>; may dangle
    notes_text = db.Column('notes', db.Text, nullable=True)

    # Relationships
    documents = db.relationship('Document', backref='truck', lazy=True,
                                cascade='all, delete-orphan')
    photos = db.relationship('Photo', backref='truck', lazy=True,
                             cascade='all, delete-orphan')

    @property
    def notes(self):
        return split_notes(self.notes_text)

    @notes.setter
    def notes(self, value):
        self.notes_text = join_notes(value)

    def to_dict(self):
        return {
            'plate': self.plate,
            'unit_code': self.unit_code,
            'depot': self.depot,
            'make': self.make,
            'model': self.model,
            'year': self.year,
            'vin': self.vin,
            'complaint_phone': self.complaint_phone,
            'cover_ref': self.cover_ref,
            'notes': self.notes,
        }

    def __repr__(self):
        return f'<Truck {self.plate}>'

import uuid
from datetime import datetime
from truckqr import db


class Report(db.Model):
    __tablename__ = 'reports'

    TYPES = ('complaint', 'recommendation', 'other')

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    plate = db.Column(db.String(32), nullable=False)
    report_type = db.Column(db.String(32), nullable=False, default='other')
    name = db.Column(db.String(128), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(128), nullable=True)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_reports_plate_created', 'plate', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'plate': self.plate,
            'type': self.report_type,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'message': self.message,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Report {self.report_type} for {self.plate}>'

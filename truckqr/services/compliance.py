"""Compliance service for TruckQR application.

Document lifecycle: every status shown to a viewer, listed on the admin
dashboard or checked by the alert sweep comes from
:func:`calculate_document_status`, evaluated against :func:`local_today`.
"""

from collections import namedtuple
from datetime import datetime
from zoneinfo import ZoneInfo
from flask import current_app
from truckqr.models import Document, Truck

STATUS_NO_DATE = 'no-date'
STATUS_EXPIRED = 'expired'
STATUS_EXPIRING_SOON = 'expiring-soon'
STATUS_CURRENT = 'current'

EXPIRING_SOON_DAYS = 30

DocumentStatus = namedtuple('DocumentStatus', ['state', 'days'])


def calculate_document_status(expiration_date, today, soon_days=EXPIRING_SOON_DAYS):
    """Lifecycle state of a document expiring on ``expiration_date``.

    ``days`` is the signed number of whole days from ``today`` to the
    expiration date (negative once expired, None without a date).
    """
    if expiration_date is None:
        return DocumentStatus(STATUS_NO_DATE, None)

    days = (expiration_date - today).days
    if days < 0:
        return DocumentStatus(STATUS_EXPIRED, days)
    if days <= soon_days:
        return DocumentStatus(STATUS_EXPIRING_SOON, days)
    return DocumentStatus(STATUS_CURRENT, days)


def local_today(tz_name=None):
    """Today's calendar date in the configured alert timezone."""
    if tz_name is None:
        tz_name = current_app.config['ALERT_TIMEZONE']
    return datetime.now(ZoneInfo(tz_name)).date()


class ComplianceService:
    """Read-only projections of document status."""

    @staticmethod
    def document_view(document, today):
        status = calculate_document_status(document.expiration_date, today,
                                           current_app.config['EXPIRING_SOON_DAYS'])
        return {
            'id': document.id,
            'plate': document.plate,
            'category': document.category,
            'title': document.title,
            'expiration_date': document.expiration_date.isoformat() if document.expiration_date else None,
            'url': document.file_ref,
            'alert_sent': document.alert_sent,
            'state': status.state,
            'days': status.days,
        }

    @staticmethod
    def annotate_documents(documents, today=None):
        """Documents with their computed state and day count, in input order."""
        if today is None:
            today = local_today()
        return [ComplianceService.document_view(doc, today) for doc in documents]

    @staticmethod
    def warnings(document_views):
        """Subset that needs attention: expired or expiring soon."""
        return [d for d in document_views if d['state'] in (STATUS_EXPIRED, STATUS_EXPIRING_SOON)]

    @staticmethod
    def sort_alerts(document_views):
        """Expired first, then expiring soon; most urgent first inside each group."""
        return sorted(
            ComplianceService.warnings(document_views),
            key=lambda d: (0 if d['state'] == STATUS_EXPIRED else 1, d['days'])
        )

    @staticmethod
    def list_alerts(today=None):
        """Every expired or expiring-soon document across the fleet."""
        documents = Document.query.join(Truck).filter(
            Document.expiration_date.isnot(None)
        ).order_by(Document.plate, Document.created_at).all()
        return ComplianceService.sort_alerts(ComplianceService.annotate_documents(documents, today))

"""Public report intake for TruckQR application."""

import enum
from flask import current_app
from truckqr import db
from truckqr.models import Report
from truckqr.services.notifications import NotificationService
from truckqr.utils.helpers import normalize_plate
from truckqr.utils.database import commit_changes
from truckqr.utils.logging_config import get_logger

logger = get_logger(__name__)

HONEYPOT_FIELD = 'company'


class ReportOutcome(enum.Enum):
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    IGNORED = 'ignored'


def normalize_report_type(value):
    value = (value or '').strip().lower()
    return value if value in Report.TYPES else 'other'


class ReportService:

    @staticmethod
    def submit(plate, form):
        """Validate and store a public report, then notify the operator.

        Bot submissions (honeypot filled) are dropped but look like success to
        the caller. Email failures never fail the submission.
        """
        plate = normalize_plate(plate)
        if (form.get(HONEYPOT_FIELD) or '').strip():
            logger.info(f"Honeypot triggered on report for {plate}")
            return ReportOutcome.IGNORED, None

        message = (form.get('message') or '').strip()
        if len(message) < current_app.config['REPORT_MIN_LENGTH']:
            return ReportOutcome.REJECTED, None

        report = Report(
            plate=plate,
            report_type=normalize_report_type(form.get('type')),
            name=(form.get('name') or '').strip() or None,
            phone=(form.get('phone') or '').strip() or None,
            email=(form.get('email') or '').strip() or None,
            message=message,
        )
        db.session.add(report)
        commit_changes("store report")
        logger.info(f"Stored {report.report_type} report for {plate}")

        NotificationService.send_report_notification(report)
        return ReportOutcome.ACCEPTED, report

    @staticmethod
    def list_reports(plate=None, limit=None):
        """Most recent reports first, optionally for one plate."""
        if limit is None:
            limit = current_app.config['REPORTS_LIMIT']
        query = Report.query
        plate = normalize_plate(plate)
        if plate:
            query = query.filter_by(plate=plate)
        return query.order_by(Report.created_at.desc()).limit(limit).all()

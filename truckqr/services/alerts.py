"""Daily expiration sweep for TruckQR application."""

import threading
from collections import namedtuple
from datetime import timedelta
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from truckqr import db
from truckqr.models import Document, Truck
from truckqr.services.compliance import calculate_document_status, local_today
from truckqr.services.notifications import NotificationService
from truckqr.utils.logging_config import get_logger, log_sweep_result

logger = get_logger(__name__)

SweepResult = namedtuple('SweepResult', ['documents', 'notified', 'skipped_reason'])

# One sweep at a time per process; a manual run waits for the timer's run to finish
_sweep_lock = threading.Lock()


class AlertService:
    """Finds documents reaching the warning threshold and notifies once per document."""

    @staticmethod
    def due_documents(today, days_before):
        """Unflagged documents whose expiration is exactly ``days_before`` days away."""
        target = today + timedelta(days=days_before)
        candidates = Document.query.join(Truck).filter(
            Document.expiration_date == target,
            Document.alert_sent.is_(False)
        ).order_by(Document.plate, Document.created_at).all()
        return [doc for doc in candidates
                if calculate_document_status(doc.expiration_date, today).days == days_before]

    @staticmethod
    def mark_alerted(document_ids):
        Document.query.filter(Document.id.in_(document_ids)).update(
            {Document.alert_sent: True}, synchronize_session=False
        )
        db.session.commit()

    @staticmethod
    def run_sweep(today=None):
        """Run one sweep. Never raises; problems are logged and reported in the result."""
        with _sweep_lock:
            if today is None:
                today = local_today()
            days_before = current_app.config['ALERT_DAYS_BEFORE']
            result = AlertService._sweep(today, days_before)
            log_sweep_result(today, days_before, result)
            return result

    @staticmethod
    def _sweep(today, days_before):
        try:
            documents = AlertService.due_documents(today, days_before)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Sweep could not read documents: {e}", exc_info=True)
            return SweepResult([], False, 'storage-error')

        logger.info(f"Sweep for {today.isoformat()}: {len(documents)} document(s) due")
        if not documents:
            return SweepResult([], False, 'nothing-due')

        if not NotificationService.is_configured():
            logger.warning("Sweep found due documents but email is not configured")
            return SweepResult(documents, False, 'not-configured')

        if not NotificationService.send_expiry_alert(documents, today, days_before):
            return SweepResult(documents, False, 'send-failed')

        try:
            AlertService.mark_alerted([doc.id for doc in documents])
        except SQLAlchemyError as e:
            # The email went out; the next sweep today may repeat it
            db.session.rollback()
            logger.error(f"Sweep sent alerts but could not flag documents: {e}", exc_info=True)
            return SweepResult(documents, True, 'flag-failed')

        return SweepResult(documents, True, None)

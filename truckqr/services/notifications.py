"""Notifications service for TruckQR application."""

import smtplib
from datetime import datetime
from flask import current_app, render_template
from flask_mail import Message, BadHeaderError
from truckqr import mail
from truckqr.utils.error_handler import NotificationError
from truckqr.utils.logging_config import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Operator email notifications. Delivery is always best effort."""

    @staticmethod
    def is_configured():
        """True when both an SMTP server and an operator address are set."""
        config = current_app.config
        return bool(config.get('MAIL_SERVER') and config.get('ALERT_EMAIL_TO'))

    @staticmethod
    def deliver(subject, html, body, recipients):
        """Send one message. Raises NotificationError on any transport failure."""
        msg = Message(subject, recipients=recipients)
        msg.body = body
        msg.html = html
        try:
            mail.send(msg)
        except (smtplib.SMTPException, OSError, BadHeaderError) as e:
            raise NotificationError(str(e)) from e

    @staticmethod
    def send_email(subject, html, body, recipients=None):
        """Send an email to the operator. Returns False instead of raising."""
        if not NotificationService.is_configured():
            logger.warning(f"Email not configured, skipping: {subject}")
            return False

        if recipients is None:
            recipients = [current_app.config['ALERT_EMAIL_TO']]
        try:
            NotificationService.deliver(subject, html, body, recipients)
        except NotificationError as e:
            logger.error(f"Error sending email '{subject}': {e}", exc_info=True)
            return False

        logger.info(f"Email sent: {subject}")
        return True

    @staticmethod
    def send_expiry_alert(documents, today, days_before):
        """Consolidated expiry warning, grouped by plate in input order."""
        groups = {}
        for doc in documents:
            groups.setdefault(doc.plate, []).append(doc)

        subject = f"Expiration warnings ({days_before} days) - {today.isoformat()}"
        context = {'groups': groups, 'today': today, 'days_before': days_before}
        return NotificationService.send_email(
            subject,
            render_template('email/expiry_alert.html', **context),
            render_template('email/expiry_alert.txt', **context),
        )

    @staticmethod
    def send_report_notification(report):
        subject = f"New report ({report.report_type}) - {report.plate}"
        context = {'report': report, 'sent_at': datetime.utcnow()}
        return NotificationService.send_email(
            subject,
            render_template('email/new_report.html', **context),
            render_template('email/new_report.txt', **context),
        )

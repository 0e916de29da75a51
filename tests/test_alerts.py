"""
22-day expiration sweep.

Test coverage:
1. Only unflagged documents exactly 22 days out are included
2. One consolidated email; documents flagged only after it is sent
3. Second run on the same day sends nothing
4. Nothing due: no email, no state change
5. Mail not configured or failing: sweep completes, flags untouched
6. Database failures: reported in the result, a failed flag means a resend
7. Overlapping sweeps send once
8. Scheduler wiring and the manual trigger
"""
import smtplib
import threading
import time

from sqlalchemy.exc import OperationalError

from truckqr import db, mail
from truckqr.models import Document
from truckqr.services.alerts import AlertService
from truckqr.services.compliance import local_today
from truckqr.utils.reminder_scheduler import ReminderScheduler


def _flags():
    return {doc.title: doc.alert_sent for doc in Document.query.all()}


class TestRunSweep:

    def test_sends_one_email_for_documents_22_days_out(self, make_truck, make_document, today):
        make_truck('ABC123')
        make_truck('XYZ789')
        make_document('ABC123', days=22, category='INSURANCE', title='Policy 1')
        make_document('XYZ789', days=22, category='PERMIT', title='Road permit')
        make_document('ABC123', days=21, title='Too soon')
        make_document('ABC123', days=23, title='Too late')
        make_document('ABC123', days=22, title='Already warned', alert_sent=True)

        with mail.record_messages() as outbox:
            result = AlertService.run_sweep(today)

        assert result.notified is True
        assert result.skipped_reason is None
        assert sorted(doc.title for doc in result.documents) == ['Policy 1', 'Road permit']
        assert len(outbox) == 1
        message = outbox[0]
        assert message.recipients == ['fleet-ops@truckqr.test']
        assert '22 days' in message.subject
        assert 'ABC123' in message.body and 'XYZ789' in message.body
        assert 'INSURANCE: Policy 1' in message.body
        assert '2026-03-23' in message.html

        assert _flags() == {
            'Policy 1': True,
            'Road permit': True,
            'Too soon': False,
            'Too late': False,
            'Already warned': True,
        }

    def test_second_run_same_day_sends_nothing(self, make_truck, make_document, today):
        make_truck()
        make_document(days=22)

        with mail.record_messages() as outbox:
            first = AlertService.run_sweep(today)
            second = AlertService.run_sweep(today)

        assert first.notified is True
        assert second.notified is False
        assert second.skipped_reason == 'nothing-due'
        assert len(outbox) == 1

    def test_nothing_due(self, make_truck, make_document, today):
        make_truck()
        make_document(days=5)
        make_document(days=None)

        with mail.record_messages() as outbox:
            result = AlertService.run_sweep(today)

        assert result == ([], False, 'nothing-due')
        assert outbox == []
        assert not any(_flags().values())

    def test_unconfigured_mail_skips_without_flagging(self, app, make_truck, make_document, today):
        app.config['ALERT_EMAIL_TO'] = None
        make_truck()
        make_document(days=22)

        with mail.record_messages() as outbox:
            result = AlertService.run_sweep(today)

        assert result.notified is False
        assert result.skipped_reason == 'not-configured'
        assert len(result.documents) == 1
        assert outbox == []
        assert not any(_flags().values())

    def test_send_failure_keeps_documents_eligible(self, make_truck, make_document, today, monkeypatch):
        make_truck()
        make_document(days=22)

        def broken_send(message):
            raise smtplib.SMTPServerDisconnected('connection lost')

        monkeypatch.setattr(mail, 'send', broken_send)
        result = AlertService.run_sweep(today)

        assert result.notified is False
        assert result.skipped_reason == 'send-failed'
        assert not any(_flags().values())

        monkeypatch.undo()
        with mail.record_messages() as outbox:
            retry = AlertService.run_sweep(today)
        assert retry.notified is True
        assert len(outbox) == 1

    def test_every_sweep_is_audited(self, make_truck, make_document, today, monkeypatch):
        audited = []
        monkeypatch.setattr('truckqr.services.alerts.log_sweep_result',
                            lambda day, days_before, result: audited.append((day, days_before, result)))
        make_truck()
        make_document(days=22)

        AlertService.run_sweep(today)
        AlertService.run_sweep(today)

        assert [(day, days) for day, days, _ in audited] == [(today, 22), (today, 22)]
        assert audited[0][2].notified is True
        assert audited[1][2].skipped_reason == 'nothing-due'

    def test_documents_of_deleted_truck_are_gone(self, make_truck, make_document, today):
        truck = make_truck()
        make_document(days=22)
        db.session.delete(truck)
        db.session.commit()

        assert AlertService.run_sweep(today).skipped_reason == 'nothing-due'

    def test_unreadable_store_is_reported(self, make_truck, make_document, today, monkeypatch):
        make_truck()
        make_document(days=22)

        def broken_query(today, days_before):
            raise OperationalError('SELECT', {}, Exception('database is locked'))

        monkeypatch.setattr(AlertService, 'due_documents', staticmethod(broken_query))
        with mail.record_messages() as outbox:
            result = AlertService.run_sweep(today)

        assert result == ([], False, 'storage-error')
        assert outbox == []

    def test_failed_flag_is_resent_on_next_sweep(self, make_truck, make_document, today, monkeypatch):
        make_truck()
        make_document(days=22)

        def broken_flag(document_ids):
            raise OperationalError('UPDATE', {}, Exception('disk I/O error'))

        with mail.record_messages() as outbox:
            monkeypatch.setattr(AlertService, 'mark_alerted', staticmethod(broken_flag))
            first = AlertService.run_sweep(today)
            monkeypatch.undo()
            second = AlertService.run_sweep(today)
            third = AlertService.run_sweep(today)

        assert (first.notified, first.skipped_reason) == (True, 'flag-failed')
        assert (second.notified, second.skipped_reason) == (True, None)
        assert third.skipped_reason == 'nothing-due'
        assert len(outbox) == 2
        assert all(_flags().values())


class TestOverlappingSweeps:

    def test_concurrent_sweeps_send_a_single_email(self, app, make_truck, make_document, today, monkeypatch):
        make_truck()
        make_document(days=22)
        sent = []

        def slow_send(message):
            time.sleep(0.2)
            sent.append(message)

        monkeypatch.setattr(mail, 'send', slow_send)
        reasons = []

        def sweep():
            with app.app_context():
                reasons.append(AlertService.run_sweep(today).skipped_reason)

        threads = [threading.Thread(target=sweep) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(sent) == 1
        assert reasons.count(None) == 1
        assert reasons.count('nothing-due') == 2


class TestReminderScheduler:

    def test_disabled_by_configuration(self, app):
        scheduler = ReminderScheduler(app)
        assert scheduler.start() is False
        assert scheduler.scheduler.get_jobs() == []

    def test_registers_single_daily_job(self, app):
        app.config['SCHEDULER_ENABLED'] = True
        scheduler = ReminderScheduler(app)
        try:
            assert scheduler.start() is True
            jobs = scheduler.scheduler.get_jobs()
            assert [job.id for job in jobs] == ['daily_expiration_sweep']
            assert jobs[0].max_instances == 1
            assert jobs[0].coalesce is True
        finally:
            scheduler.stop()

    def test_daily_job_runs_sweep_for_local_today(self, app, make_truck, make_document):
        make_truck()
        make_document(days=22, base=local_today())

        with mail.record_messages() as outbox:
            result = ReminderScheduler(app).daily_expiration_sweep()

        assert result.notified is True
        assert len(outbox) == 1


class TestManualTrigger:

    def test_admin_can_run_sweep(self, admin_client, make_truck, make_document):
        make_truck()
        document = make_document(days=22, base=local_today())

        with mail.record_messages() as outbox:
            response = admin_client.post('/admin/alerts/run', data={'plate': 'ABC123'})

        assert response.status_code == 302
        assert '/admin/edit?plate=ABC123' in response.headers['Location']
        assert len(outbox) == 1
        assert db.session.get(Document, document.id).alert_sent is True

    def test_requires_login(self, client):
        response = client.post('/admin/alerts/run')
        assert response.status_code == 302
        assert '/admin/login' in response.headers['Location']

"""
Document status and fleet alert listing.

Test coverage:
1. Expired, expiring-soon, current and no-date boundaries
2. Day counts are the exact signed difference
3. Alert listing: expired group first, ascending by days, undated and far-off excluded
4. "Today" follows the configured timezone
"""
from datetime import date, timedelta

import pytest

from truckqr.services.compliance import (
    calculate_document_status,
    local_today,
    ComplianceService,
    STATUS_NO_DATE,
    STATUS_EXPIRED,
    STATUS_EXPIRING_SOON,
    STATUS_CURRENT,
)

TODAY = date(2026, 3, 1)


class TestCalculateDocumentStatus:

    @pytest.mark.parametrize('days', [-1, -2, -30, -365])
    def test_past_dates_are_expired_with_exact_negative_days(self, days):
        status = calculate_document_status(TODAY + timedelta(days=days), TODAY)
        assert status.state == STATUS_EXPIRED
        assert status.days == days

    @pytest.mark.parametrize('days', [0, 1, 22, 29, 30])
    def test_today_through_thirty_days_is_expiring_soon(self, days):
        status = calculate_document_status(TODAY + timedelta(days=days), TODAY)
        assert status.state == STATUS_EXPIRING_SOON
        assert status.days == days

    @pytest.mark.parametrize('days', [31, 90, 1000])
    def test_beyond_thirty_days_is_current(self, days):
        status = calculate_document_status(TODAY + timedelta(days=days), TODAY)
        assert status.state == STATUS_CURRENT
        assert status.days == days

    def test_missing_date(self):
        assert calculate_document_status(None, TODAY) == (STATUS_NO_DATE, None)

    def test_counts_across_month_and_year_boundaries(self):
        status = calculate_document_status(date(2027, 1, 1), date(2026, 12, 31))
        assert status == (STATUS_EXPIRING_SOON, 1)
        status = calculate_document_status(date(2024, 2, 28), date(2024, 3, 1))
        assert status == (STATUS_EXPIRED, -2)


class TestLocalToday:

    def test_uses_the_given_timezone(self, app):
        ahead = local_today('Pacific/Kiritimati')  # UTC+14
        behind = local_today('Etc/GMT+12')  # UTC-12
        assert (ahead - behind).days in (1, 2)

    def test_defaults_to_configured_timezone(self, app):
        app.config['ALERT_TIMEZONE'] = 'Pacific/Kiritimati'
        assert local_today() == local_today('Pacific/Kiritimati')


class TestListAlerts:

    def test_orders_expired_first_then_soonest(self, make_truck, make_document):
        make_truck('ABC123')
        make_truck('XYZ789')
        make_document('ABC123', days=-5, title='five days late')
        make_document('XYZ789', days=10, title='ten days left')
        make_document('ABC123', days=-1, title='one day late')
        make_document('XYZ789', days=40, title='far away')
        make_document('ABC123', days=None, title='no date')

        alerts = ComplianceService.list_alerts(TODAY)

        assert [a['days'] for a in alerts] == [-5, -1, 10]
        assert [a['state'] for a in alerts] == [STATUS_EXPIRED, STATUS_EXPIRED, STATUS_EXPIRING_SOON]
        assert alerts[0]['plate'] == 'ABC123'
        assert alerts[2]['title'] == 'ten days left'

    def test_empty_fleet(self, app):
        assert ComplianceService.list_alerts(TODAY) == []

    def test_annotated_documents_keep_input_order(self, make_truck, make_document):
        make_truck()
        docs = [make_document(days=40), make_document(days=-3), make_document(days=None)]

        views = ComplianceService.annotate_documents(docs, TODAY)

        assert [v['state'] for v in views] == [STATUS_CURRENT, STATUS_EXPIRED, STATUS_NO_DATE]
        assert views[2]['expiration_date'] is None
        assert ComplianceService.warnings(views) == [views[1]]

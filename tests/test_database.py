"""
Database helpers.

Test coverage:
1. Startup ping gives up after the configured number of attempts
2. Failed commits roll back and surface as StorageError
"""
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from truckqr import db
from truckqr.models import Truck
from truckqr.utils import database
from truckqr.utils.database import wait_for_database, commit_changes
from truckqr.utils.error_handler import StorageError


def _unavailable(*args, **kwargs):
    raise OperationalError('SELECT 1', {}, Exception('connection refused'))


class TestWaitForDatabase:

    def test_answers_on_first_attempt(self, app):
        assert wait_for_database(max_retries=3, delay=0) is True

    def test_gives_up_after_bounded_retries(self, app, monkeypatch):
        pauses = []
        monkeypatch.setattr(Session, 'execute', _unavailable)
        monkeypatch.setattr(database.time, 'sleep', pauses.append)

        assert wait_for_database(max_retries=3, delay=1.5) is False
        assert pauses == [1.5, 1.5]


class TestCommitChanges:

    def test_failed_commit_rolls_back(self, app, monkeypatch):
        db.session.add(Truck(plate='ABC123'))
        monkeypatch.setattr(Session, 'commit', _unavailable)

        with pytest.raises(StorageError, match='save truck ABC123'):
            commit_changes('save truck ABC123')

        monkeypatch.undo()
        assert db.session.get(Truck, 'ABC123') is None

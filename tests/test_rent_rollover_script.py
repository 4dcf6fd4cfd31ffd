"""
The daily rollover entry point run by cron.
"""
from contextlib import contextmanager
from datetime import date

import pytest

from models import RentPaymentStatus
from scripts import rent_rollover
from services.rent_ledger_service import RentLedgerService


@pytest.fixture
def script_db(db, monkeypatch):
    @contextmanager
    def session_context():
        yield db
        db.flush()

    monkeypatch.setattr(rent_rollover, "get_session_context", session_context)
    return db


class TestRentRolloverScript:
    def test_parses_arguments(self):
        args = rent_rollover.parse_args(["--as-of", "2025-03-01", "--landlord-id", "7"])
        assert args.as_of == date(2025, 3, 1)
        assert args.landlord_id == 7

    def test_defaults(self):
        args = rent_rollover.parse_args([])
        assert args.as_of is None
        assert args.landlord_id is None

    def test_runs_rollover(self, script_db, tenant):
        result = rent_rollover.main(["--as-of", "2025-04-10"])
        assert result["obligations_created"] == 2
        payments = RentLedgerService.list_payments(script_db, tenant.id)
        assert [p.payment_month.month for p in payments] == [2, 3, 4]
        assert {p.status for p in payments} == {RentPaymentStatus.LATE}
        assert tenant.is_late_on_rent is True

    def test_second_run_does_nothing(self, script_db, tenant):
        rent_rollover.main(["--as-of", "2025-04-10"])
        result = rent_rollover.main(["--as-of", "2025-04-10"])
        assert result == {"as_of": date(2025, 4, 10), "obligations_created": 0, "statuses_updated": 0}

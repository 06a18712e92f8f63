"""Balance calculator tests — used/remaining days, year clamping, policy states."""

from __future__ import annotations

import uuid
from datetime import date
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from timeoff_ledger.balances.service import (
    BalanceService,
    build_snapshot,
    compute_used_days,
    remaining_days,
)
from timeoff_ledger.common.constants import (
    BalanceState,
    PolicyKind,
    TimeOffStatus,
    TimeOffType,
)
from timeoff_ledger.common.exceptions import DirectoryLookupError, NotFoundException
from timeoff_ledger.directory.models import Employee
from timeoff_ledger.ledger.service import TimeOffLedgerService
from timeoff_ledger.policies.service import PolicyCatalogService
from tests.conftest import _file_request, _seed_employee, _seed_policy


def _row(start: date, end: date, *, status=TimeOffStatus.APPROVED, type=TimeOffType.PTO):
    return SimpleNamespace(start_date=start, end_date=end, status=status, type=type)


# ═════════════════════════════════════════════════════════════════════
# Pure math
# ═════════════════════════════════════════════════════════════════════


class TestComputeUsedDays:

    def test_only_approved_pto_counts(self):
        rows = [
            _row(date(2025, 3, 3), date(2025, 3, 7)),
            _row(date(2025, 4, 1), date(2025, 4, 2), status=TimeOffStatus.REQUESTED),
            _row(date(2025, 5, 1), date(2025, 5, 2), status=TimeOffStatus.DENIED),
            _row(date(2025, 6, 1), date(2025, 6, 2), status=TimeOffStatus.CANCELLED),
            _row(date(2025, 7, 1), date(2025, 7, 3), type=TimeOffType.SICK),
        ]
        assert compute_used_days(rows, 2025) == 5

    def test_new_year_request_counts_in_each_year(self):
        rows = [_row(date(2025, 12, 28), date(2026, 1, 3))]
        assert compute_used_days(rows, 2025) == 4
        assert compute_used_days(rows, 2026) == 3
        assert compute_used_days(rows, 2027) == 0

    def test_remaining_never_negative(self):
        assert remaining_days(15, 5) == 10
        assert remaining_days(15, 15) == 0
        assert remaining_days(15, 20) == 0

    def test_snapshot_without_policy_is_not_configured(self):
        snap = build_snapshot(uuid.uuid4(), 2025, None, [])
        assert snap.state == BalanceState.not_configured
        assert snap.allowance is None
        assert snap.remaining_days is None


# ═════════════════════════════════════════════════════════════════════
# BalanceService
# ═════════════════════════════════════════════════════════════════════


class TestComputeBalance:

    async def test_fifteen_day_policy_with_five_approved(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(
            db, employee.id, date(2025, 3, 10), date(2025, 3, 14),
            status=TimeOffStatus.APPROVED, actor_id=manager.id,
        )

        snap = await BalanceService.compute_balance(db, employee.id, 2025)

        assert snap.state == BalanceState.tracked
        assert snap.allowance == 15
        assert snap.used_days == 5
        assert snap.remaining_days == 10
        assert snap.pending_days == 0

    async def test_pending_and_denied_do_not_consume(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(db, employee.id, date(2025, 3, 10), date(2025, 3, 11))
        await _file_request(
            db, employee.id, date(2025, 4, 10), date(2025, 4, 14),
            status=TimeOffStatus.DENIED, actor_id=manager.id,
        )

        snap = await BalanceService.compute_balance(db, employee.id, 2025)
        assert snap.used_days == 0
        assert snap.remaining_days == 15
        assert snap.pending_days == 2

    async def test_approval_moves_days_from_pending_to_used(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        req = await _file_request(db, employee.id, date(2025, 3, 10), date(2025, 3, 12))
        await _file_request(
            db, employee.id, date(2025, 5, 5), date(2025, 5, 6),
            status=TimeOffStatus.CANCELLED,
        )
        before = await BalanceService.compute_balance(db, employee.id, 2025)
        assert (before.used_days, before.pending_days) == (0, 3)

        await TimeOffLedgerService.approve(db, req.id, manager.id)

        after = await BalanceService.compute_balance(db, employee.id, 2025)
        assert (after.used_days, after.pending_days) == (3, 0)
        assert after.remaining_days == 12

    async def test_year_boundary_split(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _file_request(
            db, employee.id, date(2025, 12, 28), date(2026, 1, 3),
            status=TimeOffStatus.APPROVED, actor_id=manager.id,
        )

        assert (await BalanceService.compute_balance(db, employee.id, 2025)).used_days == 4
        assert (await BalanceService.compute_balance(db, employee.id, 2026)).used_days == 3

    async def test_over_approval_clamps_to_zero(
        self, db: AsyncSession, manager: Employee,
    ):
        small = await _seed_policy(db, name="Small", annual_allowance_days=3)
        emp = await _seed_employee(db, policy_id=small.id)
        await _file_request(
            db, emp.id, date(2025, 8, 4), date(2025, 8, 8),
            status=TimeOffStatus.APPROVED, actor_id=manager.id,
        )

        snap = await BalanceService.compute_balance(db, emp.id, 2025)
        assert snap.used_days == 5
        assert snap.remaining_days == 0

    async def test_unlimited_policy_reports_no_numbers(
        self, db: AsyncSession, manager: Employee,
    ):
        unlimited = await _seed_policy(db, name="Open", kind=PolicyKind.UNLIMITED)
        emp = await _seed_employee(db, policy_id=unlimited.id)
        await _file_request(
            db, emp.id, date(2025, 8, 4), date(2025, 8, 8),
            status=TimeOffStatus.APPROVED, actor_id=manager.id,
        )

        snap = await BalanceService.compute_balance(db, emp.id, 2025)
        assert snap.state == BalanceState.unlimited
        assert snap.policy.kind == PolicyKind.UNLIMITED
        assert snap.allowance is None
        assert snap.used_days is None
        assert snap.remaining_days is None

    async def test_no_policy_is_not_configured_rather_than_zero(self, db: AsyncSession):
        await _seed_policy(db, name="Exists but unassigned")
        emp = await _seed_employee(db)

        snap = await BalanceService.compute_balance(db, emp.id, 2025)
        assert snap.state == BalanceState.not_configured
        assert snap.remaining_days is None

    async def test_unknown_employee(self, db: AsyncSession):
        with pytest.raises(NotFoundException):
            await BalanceService.compute_balance(db, uuid.uuid4(), 2025)

    async def test_directory_failure_is_wrapped(
        self, db: AsyncSession, employee: Employee, monkeypatch,
    ):
        async def _broken(session, employee_id):
            raise OperationalError("SELECT", {}, Exception("directory down"))

        monkeypatch.setattr(
            PolicyCatalogService, "get_policy_for_employee", staticmethod(_broken),
        )

        with pytest.raises(DirectoryLookupError) as exc_info:
            await BalanceService.compute_balance(db, employee.id, 2025)
        assert exc_info.value.status_code == 502
        assert isinstance(exc_info.value.cause, OperationalError)


class TestTeamBalances:

    async def test_one_snapshot_per_active_employee(
        self, db: AsyncSession, employee: Employee, manager: Employee,
    ):
        await _seed_employee(db, first_name="Zed", department="Sales")
        await _seed_employee(db, first_name="Gone", is_active=False)
        await _file_request(
            db, employee.id, date(2025, 2, 3), date(2025, 2, 4),
            status=TimeOffStatus.APPROVED, actor_id=manager.id,
        )

        snaps = await BalanceService.compute_team_balances(
            db, 2025, department="Engineering",
        )
        by_id = {s.employee_id: s for s in snaps}

        assert set(by_id) == {employee.id, manager.id}
        assert by_id[employee.id].used_days == 2
        assert by_id[manager.id].used_days == 0
        assert by_id[manager.id].remaining_days == 15

import threading
from datetime import date

import pytest

from hrms.core.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    OverlappingLeaveError,
    ValidationError,
)
from hrms.models.leave import AdminLeaveApplyRequest, LeaveAction, LeaveStatus, LeaveUpdateRequest
from hrms.repositories.employee_repository import EmployeeRepository
from hrms.repositories.leave_repository import LeaveApplicationRepository
from hrms.repositories.tables import LeaveApplication
from hrms.services.container import build_container
from hrms.services.workflow_service import TRANSITIONS

from conftest import ANNUAL, leave_request


def insert_leave(container, leave_id: int, status: LeaveStatus) -> None:
    with container.store.transaction() as session:
        session.add(
            LeaveApplication(
                id=leave_id,
                employee_uid="EMP-0003",
                leave_type_id=ANNUAL,
                from_date=date(2025, 9, 1),
                to_date=date(2025, 9, 5),
                number_of_days=5,
                status=status,
                active=True,
            )
        )


@pytest.mark.parametrize("status", list(LeaveStatus))
@pytest.mark.parametrize("action", list(LeaveAction))
def test_only_listed_transitions_are_allowed(container, hr, status, action):
    insert_leave(container, 7, status)

    if (status, action) in TRANSITIONS:
        record = container.workflow_service.transition(7, action, hr, reason="plans changed")
        assert record.status is TRANSITIONS[(status, action)]
    else:
        with pytest.raises(InvalidTransitionError):
            container.workflow_service.transition(7, action, hr, reason="plans changed")


def test_cancellation_round_trip_ends_in_terminal_state(container, employee, hr):
    insert_leave(container, 42, LeaveStatus.APPROVED)
    workflow = container.workflow_service

    requested = workflow.transition(42, LeaveAction.REQUEST_CANCELLATION, employee, reason="trip cancelled")
    assert requested.status is LeaveStatus.REQUEST_CANCELLATION
    assert requested.reason_of_cancellation == "trip cancelled"

    cancelled = workflow.transition(42, LeaveAction.APPROVE_CANCELLATION, hr)
    assert cancelled.status is LeaveStatus.CANCELLED
    assert cancelled.active is False

    for action in (LeaveAction.APPROVE, LeaveAction.REJECT):
        with pytest.raises(InvalidTransitionError) as exc_info:
            workflow.transition(42, action, hr)
        assert exc_info.value.current_state == "CANCELLED"


def test_rejected_leave_stays_rejected(container, employee, hr):
    leave = container.workflow_service.apply_leave(employee, leave_request(date(2025, 2, 10), date(2025, 2, 11)))
    container.workflow_service.transition(leave.id, LeaveAction.REJECT, hr)

    with pytest.raises(InvalidTransitionError):
        container.workflow_service.transition(leave.id, LeaveAction.APPROVE, hr)


def test_cancellation_needs_reason_and_owner(container, employee, hr):
    insert_leave(container, 8, LeaveStatus.APPROVED)
    stranger = employee.model_copy(update={"employee_uid": "EMP-0009"})

    with pytest.raises(ValidationError):
        container.workflow_service.transition(8, LeaveAction.REQUEST_CANCELLATION, employee, reason=None)
    with pytest.raises(ForbiddenError):
        container.workflow_service.transition(8, LeaveAction.REQUEST_CANCELLATION, stranger, reason="x")
    assert container.leave_service.get_leave(8, hr).status is LeaveStatus.APPROVED


def test_employee_cannot_approve(container, employee):
    leave = container.workflow_service.apply_leave(employee, leave_request(date(2025, 2, 10), date(2025, 2, 10)))
    with pytest.raises(ForbiddenError):
        container.workflow_service.transition(leave.id, LeaveAction.APPROVE, employee)


def test_missing_leave(container, hr):
    with pytest.raises(NotFoundError):
        container.workflow_service.transition(404, LeaveAction.APPROVE, hr)


@pytest.mark.parametrize(
    "from_date, to_date",
    [
        (date(2025, 3, 12), date(2025, 3, 12)),
        (date(2025, 3, 8), date(2025, 3, 10)),
        (date(2025, 3, 1), date(2025, 3, 31)),
    ],
)
def test_overlapping_range_is_rejected(container, employee, from_date, to_date):
    container.workflow_service.apply_leave(employee, leave_request(date(2025, 3, 10), date(2025, 3, 14)))
    with pytest.raises(OverlappingLeaveError):
        container.workflow_service.apply_leave(employee, leave_request(from_date, to_date))


def test_adjacent_ranges_are_accepted(container, employee):
    workflow = container.workflow_service
    workflow.apply_leave(employee, leave_request(date(2025, 3, 10), date(2025, 3, 14)))

    workflow.apply_leave(employee, leave_request(date(2025, 3, 7), date(2025, 3, 9)))
    workflow.apply_leave(employee, leave_request(date(2025, 3, 15), date(2025, 3, 15)))


def test_rejected_leave_frees_its_dates(container, employee, hr):
    workflow = container.workflow_service
    leave = workflow.apply_leave(employee, leave_request(date(2025, 3, 10), date(2025, 3, 14)))
    workflow.transition(leave.id, LeaveAction.REJECT, hr)

    again = workflow.apply_leave(employee, leave_request(date(2025, 3, 10), date(2025, 3, 14)))
    assert again.status is LeaveStatus.PENDING


def test_admin_apply_is_approved_immediately(container, hr, employee):
    payload = AdminLeaveApplyRequest(
        employee_uid="EMP-0003",
        leave_type_id=ANNUAL,
        from_date=date(2025, 10, 6),
        to_date=date(2025, 10, 8),
        reason="Recorded by HR",
    )
    record = container.workflow_service.admin_apply_leave(hr, payload)

    assert record.status is LeaveStatus.APPROVED
    assert record.employee_name == "Jordan Patel"
    with pytest.raises(ForbiddenError):
        container.workflow_service.admin_apply_leave(employee, payload)
    with pytest.raises(NotFoundError):
        container.workflow_service.admin_apply_leave(hr, payload.model_copy(update={"employee_uid": "EMP-9999"}))


def test_stale_status_write_is_refused(container):
    insert_leave(container, 9, LeaveStatus.APPROVED)

    with container.store.transaction() as session:
        changed = LeaveApplicationRepository(session).transition_status(9, LeaveStatus.PENDING, LeaveStatus.REJECTED)

    assert changed is False


def test_concurrent_approvals_have_one_winner(tmp_path, employee, hr):
    container = build_container(
        database_url=f"sqlite:///{tmp_path / 'race.db'}",
        audit_log_path=tmp_path / "audit.jsonl",
    )
    try:
        leave = container.workflow_service.apply_leave(employee, leave_request(date(2025, 11, 3), date(2025, 11, 4)))
        barrier = threading.Barrier(2)
        outcomes: list[object] = []
        lock = threading.Lock()

        def approve():
            barrier.wait()
            try:
                result: object = container.workflow_service.transition(leave.id, LeaveAction.APPROVE, hr)
            except InvalidTransitionError as exc:
                result = exc
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=approve) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert len(outcomes) == 2
        assert sum(isinstance(o, InvalidTransitionError) for o in outcomes) == 1
        assert container.leave_service.get_leave(leave.id, hr).status is LeaveStatus.APPROVED
    finally:
        container.close()


def test_employee_row_is_locked_before_the_overlap_check(container, employee, monkeypatch):
    calls: list[str] = []
    lock_active = EmployeeRepository.lock_active
    find_overlapping = LeaveApplicationRepository.find_overlapping

    def record_lock(self, uid):
        calls.append(f"lock:{uid}")
        return lock_active(self, uid)

    def record_overlap(self, *args, **kwargs):
        calls.append("overlap")
        return find_overlapping(self, *args, **kwargs)

    monkeypatch.setattr(EmployeeRepository, "lock_active", record_lock)
    monkeypatch.setattr(LeaveApplicationRepository, "find_overlapping", record_overlap)

    leave = container.workflow_service.apply_leave(employee, leave_request(date(2025, 12, 1), date(2025, 12, 2)))
    container.leave_service.update_leave(leave.id, LeaveUpdateRequest(to_date=date(2025, 12, 3)), employee)

    assert calls == ["lock:EMP-0003", "overlap", "lock:EMP-0003", "overlap"]


def test_unknown_employee_cannot_apply(container, employee):
    ghost = employee.model_copy(update={"employee_uid": "EMP-9999"})
    with pytest.raises(NotFoundError):
        container.workflow_service.apply_leave(ghost, leave_request(date(2025, 12, 1), date(2025, 12, 1)))

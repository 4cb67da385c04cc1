from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from hrms.core.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    OverlappingLeaveError,
    ValidationError,
)
from hrms.core.rbac import Operation, required_permission
from hrms.models.auth import Identity
from hrms.models.leave import (
    AdminLeaveApplyRequest,
    LeaveAction,
    LeaveApplicationRecord,
    LeaveApplyRequest,
    LeaveStatus,
)
from hrms.repositories.data_store import DataStore
from hrms.repositories.employee_repository import EmployeeRepository
from hrms.repositories.leave_repository import LeaveApplicationRepository, LeaveTypeRepository
from hrms.repositories.tables import Employee, LeaveApplication
from hrms.services.audit_service import AuditLogger
from hrms.services.auth_service import AuthService
from hrms.services.leave_service import to_leave_record

logger = logging.getLogger(__name__)

# (current status, action) -> new status; anything absent is an invalid transition.
TRANSITIONS: dict[tuple[LeaveStatus, LeaveAction], LeaveStatus] = {
    (LeaveStatus.PENDING, LeaveAction.APPROVE): LeaveStatus.APPROVED,
    (LeaveStatus.PENDING, LeaveAction.REJECT): LeaveStatus.REJECTED,
    (LeaveStatus.APPROVED, LeaveAction.REQUEST_CANCELLATION): LeaveStatus.REQUEST_CANCELLATION,
    (LeaveStatus.REQUEST_CANCELLATION, LeaveAction.APPROVE_CANCELLATION): LeaveStatus.CANCELLED,
}

APPROVER_ACTIONS = frozenset(
    {LeaveAction.APPROVE, LeaveAction.REJECT, LeaveAction.APPROVE_CANCELLATION}
)

TRANSITION_MESSAGES: dict[LeaveAction, str] = {
    LeaveAction.APPROVE: "Leave approved successfully",
    LeaveAction.REJECT: "Leave rejected",
    LeaveAction.REQUEST_CANCELLATION: "Cancellation request submitted",
    LeaveAction.APPROVE_CANCELLATION: "Leave cancelled successfully",
}


class WorkflowService:
    def __init__(
        self,
        store: DataStore,
        audit_logger: AuditLogger,
        auth_service: AuthService,
    ) -> None:
        self.store = store
        self.audit_logger = audit_logger
        self.auth_service = auth_service

    def apply_leave(self, identity: Identity, payload: LeaveApplyRequest) -> LeaveApplicationRecord:
        self.auth_service.authorize_operation(identity, Operation.LEAVE_APPLY)

        with self.store.transaction() as session:
            employee = self._lock_employee(session, identity.employee_uid)
            row = self._create_application(
                session,
                employee_uid=employee.uid,
                payload=payload,
                status=LeaveStatus.PENDING,
            )
            record = to_leave_record(row, employee.full_name, row.leave_type.name)

        self._audit(identity, "leave_applied", {"leave_id": record.id, "days": record.number_of_days})
        return record

    def admin_apply_leave(self, identity: Identity, payload: AdminLeaveApplyRequest) -> LeaveApplicationRecord:
        """HR-entered leave goes straight to Approved."""
        self.auth_service.authorize_operation(identity, Operation.LEAVE_ADMIN_APPLY)

        with self.store.transaction() as session:
            employee = self._lock_employee(session, payload.employee_uid)
            row = self._create_application(
                session,
                employee_uid=employee.uid,
                payload=payload,
                status=LeaveStatus.APPROVED,
            )
            record = to_leave_record(row, employee.full_name, row.leave_type.name)

        self._audit(
            identity,
            "leave_admin_applied",
            {"leave_id": record.id, "employee_uid": payload.employee_uid, "days": record.number_of_days},
        )
        logger.info("Leave %s recorded as approved for %s by %s", record.id, payload.employee_uid, identity.employee_uid)
        return record

    def transition(
        self,
        leave_id: int,
        action: LeaveAction,
        actor: Identity,
        reason: Optional[str] = None,
    ) -> LeaveApplicationRecord:
        action = LeaveAction(action)
        may_decide = self.auth_service.can(actor, required_permission(Operation.LEAVE_DECIDE))
        if action in APPROVER_ACTIONS and not may_decide:
            raise ForbiddenError(detail="You do not have permission to process leave applications")

        with self.store.transaction() as session:
            repo = LeaveApplicationRepository(session)
            row = repo.get_for_update(leave_id)
            if row is None:
                raise NotFoundError("Leave not found")

            current = LeaveStatus(row.status)
            new_status = TRANSITIONS.get((current, action))
            if new_status is None:
                raise InvalidTransitionError(current.value, action.name)

            values: dict[str, Any] = {}
            if action is LeaveAction.REQUEST_CANCELLATION:
                if row.employee_uid != actor.employee_uid and not may_decide:
                    raise ForbiddenError(detail="Only the applicant or an approver can request cancellation")
                if not reason:
                    raise ValidationError("Cancellation reason is required")
                values["reason_of_cancellation"] = reason
            elif action is LeaveAction.APPROVE_CANCELLATION:
                values["active"] = False

            if not repo.transition_status(leave_id, current, new_status, **values):
                # another request moved the row after it was read
                session.refresh(row)
                raise InvalidTransitionError(LeaveStatus(row.status).value, action.name)

            session.refresh(row)
            names = EmployeeRepository(session).names_for({row.employee_uid})
            record = to_leave_record(row, names.get(row.employee_uid, "-"), row.leave_type.name)

        self._audit(
            actor,
            "leave_transition",
            {"leave_id": leave_id, "action": action.name, "from": current.value, "to": new_status.value},
        )
        return record

    @staticmethod
    def message_for(action: LeaveAction) -> str:
        return TRANSITION_MESSAGES[LeaveAction(action)]

    @staticmethod
    def _lock_employee(session: Session, employee_uid: str) -> Employee:
        # held until commit so overlap check and insert cannot interleave
        employee = EmployeeRepository(session).lock_active(employee_uid)
        if employee is None:
            raise NotFoundError("Employee not found")
        return employee

    def _create_application(
        self,
        session: Session,
        *,
        employee_uid: str,
        payload: LeaveApplyRequest,
        status: LeaveStatus,
    ) -> LeaveApplication:
        leave_type = LeaveTypeRepository(session).get(payload.leave_type_id)
        if leave_type is None or not leave_type.active:
            raise NotFoundError("Leave type not found")

        repo = LeaveApplicationRepository(session)
        clash = repo.find_overlapping(employee_uid, payload.from_date, payload.to_date)
        if clash is not None:
            raise OverlappingLeaveError(
                f"Leave dates overlap with leave #{clash.id} "
                f"({clash.from_date.isoformat()} to {clash.to_date.isoformat()})"
            )

        return repo.add(
            LeaveApplication(
                employee_uid=employee_uid,
                leave_type=leave_type,
                from_date=payload.from_date,
                to_date=payload.to_date,
                number_of_days=payload.number_of_days,
                description=payload.reason,
                file_upload=payload.file_upload,
                status=status,
                active=True,
            )
        )

    def _audit(self, actor: Identity, event_type: str, details: dict[str, Any]) -> None:
        self.audit_logger.log_event(
            event_type=event_type,
            actor_id=actor.employee_uid,
            actor_role=actor.role_id,
            details=details,
        )

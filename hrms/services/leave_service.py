from __future__ import annotations

import math
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from hrms.core.exceptions import ForbiddenError, NotFoundError, OverlappingLeaveError, ValidationError
from hrms.core.rbac import Operation, required_permission
from hrms.models.auth import Identity
from hrms.models.common import Pagination
from hrms.models.leave import (
    LeaveApplicationRecord,
    LeaveBalance,
    LeavePage,
    LeaveStats,
    LeaveStatus,
    LeaveTypeCreate,
    LeaveTypeRecord,
    LeaveTypeUpdate,
    LeaveUpdateRequest,
    inclusive_days,
)
from hrms.repositories.data_store import DataStore
from hrms.repositories.employee_repository import EmployeeRepository
from hrms.repositories.leave_repository import LeaveApplicationRepository, LeaveTypeRepository
from hrms.repositories.tables import LeaveApplication, LeaveType
from hrms.services.audit_service import AuditLogger
from hrms.services.auth_service import AuthService


class LeaveService:
    def __init__(self, store: DataStore, audit_logger: AuditLogger, auth_service: AuthService) -> None:
        self.store = store
        self.audit_logger = audit_logger
        self.auth_service = auth_service

    # ---- leave types -------------------------------------------------

    def list_leave_types(self) -> list[LeaveTypeRecord]:
        with self.store.transaction() as session:
            return [self._to_type_model(t) for t in LeaveTypeRepository(session).list_active()]

    def create_leave_type(self, payload: LeaveTypeCreate, actor: Identity) -> LeaveTypeRecord:
        with self.store.transaction() as session:
            row = LeaveTypeRepository(session).add(
                LeaveType(
                    name=payload.leave_type.strip(),
                    description=payload.description,
                    max_leave_count=payload.max_leave_count,
                )
            )
            record = self._to_type_model(row)

        self._audit(actor, "leave_type_created", {"leave_type_id": record.id})
        return record

    def update_leave_type(self, leave_type_id: int, payload: LeaveTypeUpdate, actor: Identity) -> LeaveTypeRecord:
        with self.store.transaction() as session:
            row = self._require_type(session, leave_type_id)
            if payload.leave_type is not None:
                row.name = payload.leave_type.strip()
            if payload.description is not None:
                row.description = payload.description
            if payload.max_leave_count is not None:
                row.max_leave_count = payload.max_leave_count
            record = self._to_type_model(row)

        self._audit(actor, "leave_type_updated", {"leave_type_id": leave_type_id})
        return record

    def delete_leave_type(self, leave_type_id: int, actor: Identity) -> None:
        with self.store.transaction() as session:
            row = self._require_type(session, leave_type_id)
            row.active = False
            row.soft_delete()

        self._audit(actor, "leave_type_deleted", {"leave_type_id": leave_type_id})

    # ---- balance -----------------------------------------------------

    def get_balance(self, employee_uid: str, year: int) -> list[LeaveBalance]:
        """Per-type entitlement for one calendar year.

        Pending days are reported but not subtracted from ``remaining``.
        """
        start, end = date(year, 1, 1), date(year, 12, 31)
        with self.store.transaction() as session:
            leave_types = LeaveTypeRepository(session).list_active()
            applications = LeaveApplicationRepository(session).list_for_employee_between(employee_uid, start, end)

        balances: list[LeaveBalance] = []
        for leave_type in leave_types:
            of_type = [a for a in applications if a.leave_type_id == leave_type.id]
            used = sum(a.number_of_days for a in of_type if a.status == LeaveStatus.APPROVED)
            pending = sum(a.number_of_days for a in of_type if a.status == LeaveStatus.PENDING)
            balances.append(
                LeaveBalance(
                    leave_type_id=leave_type.id,
                    leave_type_name=leave_type.name,
                    allocated=leave_type.max_leave_count,
                    used=used,
                    pending=pending,
                    remaining=leave_type.max_leave_count - used,
                )
            )
        return balances

    # ---- applications ------------------------------------------------

    def list_leaves(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        status: Optional[LeaveStatus] = None,
        employee_uid: Optional[str] = None,
        leave_type_id: Optional[int] = None,
    ) -> LeavePage:
        page = max(page, 1)
        limit = max(min(limit, 100), 1)
        with self.store.transaction() as session:
            repo = LeaveApplicationRepository(session)
            rows = repo.page(
                offset=(page - 1) * limit,
                limit=limit,
                status=status,
                employee_uid=employee_uid,
                leave_type_id=leave_type_id,
            )
            total = repo.count(status=status, employee_uid=employee_uid, leave_type_id=leave_type_id)
            counts = repo.count_by_status(employee_uid=employee_uid, leave_type_id=leave_type_id)
            items = self._to_records(session, rows)

        return LeavePage(
            items=items,
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=math.ceil(total / limit) if total else 0,
            ),
            stats=LeaveStats(
                total=sum(counts.values()),
                pending=counts.get(LeaveStatus.PENDING, 0),
                approved=counts.get(LeaveStatus.APPROVED, 0),
                rejected=counts.get(LeaveStatus.REJECTED, 0),
            ),
        )

    def get_leave(self, leave_id: int, identity: Identity) -> LeaveApplicationRecord:
        may_view_any = self.auth_service.can(identity, required_permission(Operation.LEAVE_VIEW_ANY))
        with self.store.transaction() as session:
            row = self._require_leave(session, leave_id)
            self._require_owner_or(identity, row, may_view_any)
            return self._to_records(session, [row])[0]

    def update_leave(
        self,
        leave_id: int,
        payload: LeaveUpdateRequest,
        identity: Identity,
    ) -> LeaveApplicationRecord:
        may_decide = self.auth_service.can(identity, required_permission(Operation.LEAVE_DECIDE))
        with self.store.transaction() as session:
            repo = LeaveApplicationRepository(session)
            row = repo.get_for_update(leave_id)
            if row is None:
                raise NotFoundError("Leave not found")
            self._require_owner_or(identity, row, may_decide)
            if row.status != LeaveStatus.PENDING:
                raise ValidationError("Cannot update leave that is not pending")
            EmployeeRepository(session).lock_active(row.employee_uid)

            if payload.leave_type_id is not None:
                self._require_type(session, payload.leave_type_id)
                row.leave_type_id = payload.leave_type_id
            from_date = payload.from_date or row.from_date
            to_date = payload.to_date or row.to_date
            if to_date < from_date:
                raise ValidationError("toDate must be on or after fromDate")
            span = inclusive_days(from_date, to_date)
            if payload.from_date or payload.to_date:
                number_of_days = payload.number_of_days or span
            else:
                number_of_days = payload.number_of_days or row.number_of_days
            if number_of_days > span:
                raise ValidationError(f"numberOfDays cannot exceed the {span} day(s) between fromDate and toDate")

            if repo.find_overlapping(row.employee_uid, from_date, to_date, exclude_id=row.id):
                raise OverlappingLeaveError()

            row.from_date = from_date
            row.to_date = to_date
            row.number_of_days = number_of_days
            if payload.description is not None:
                row.description = payload.description
            if payload.file_upload is not None:
                row.file_upload = payload.file_upload
            session.flush()
            record = self._to_records(session, [row])[0]

        self._audit(identity, "leave_updated", {"leave_id": leave_id})
        return record

    def delete_leave(self, leave_id: int, identity: Identity) -> None:
        may_decide = self.auth_service.can(identity, required_permission(Operation.LEAVE_DECIDE))
        with self.store.transaction() as session:
            row = LeaveApplicationRepository(session).get_for_update(leave_id)
            if row is None:
                raise NotFoundError("Leave not found")
            self._require_owner_or(identity, row, may_decide)
            if row.status != LeaveStatus.PENDING:
                raise ValidationError("Only pending leave applications can be withdrawn")
            row.active = False
            row.soft_delete()

        self._audit(identity, "leave_withdrawn", {"leave_id": leave_id})

    # ---- helpers -----------------------------------------------------

    @staticmethod
    def _require_owner_or(identity: Identity, row: LeaveApplication, permitted: bool) -> None:
        if row.employee_uid != identity.employee_uid and not permitted:
            raise ForbiddenError()

    def _audit(self, actor: Identity, event_type: str, details: dict) -> None:
        self.audit_logger.log_event(
            event_type=event_type,
            actor_id=actor.employee_uid,
            actor_role=actor.role_id,
            details=details,
        )

    @staticmethod
    def _require_type(session: Session, leave_type_id: int) -> LeaveType:
        row = LeaveTypeRepository(session).get(leave_type_id)
        if row is None:
            raise NotFoundError("Leave type not found")
        return row

    @staticmethod
    def _require_leave(session: Session, leave_id: int) -> LeaveApplication:
        row = LeaveApplicationRepository(session).get(leave_id)
        if row is None:
            raise NotFoundError("Leave not found")
        return row

    @staticmethod
    def _to_records(session: Session, rows: list[LeaveApplication]) -> list[LeaveApplicationRecord]:
        employee_names = EmployeeRepository(session).names_for({r.employee_uid for r in rows})
        type_names = LeaveTypeRepository(session).names_for({r.leave_type_id for r in rows})
        return [
            to_leave_record(
                row,
                employee_name=employee_names.get(row.employee_uid, "-"),
                leave_type_name=type_names.get(row.leave_type_id, "-"),
            )
            for row in rows
        ]

    @staticmethod
    def _to_type_model(row: LeaveType) -> LeaveTypeRecord:
        return LeaveTypeRecord(
            id=row.id,
            leave_type=row.name,
            description=row.description,
            max_leave_count=row.max_leave_count,
            status=bool(row.active),
        )


def to_leave_record(
    row: LeaveApplication,
    employee_name: str = "-",
    leave_type_name: str = "-",
) -> LeaveApplicationRecord:
    status = LeaveStatus(row.status)
    return LeaveApplicationRecord(
        id=row.id,
        employee_id=row.employee_uid,
        employee_name=employee_name,
        leave_type_id=row.leave_type_id,
        leave_type=leave_type_name,
        from_date=row.from_date,
        to_date=row.to_date,
        number_of_days=row.number_of_days,
        description=row.description,
        status=status,
        status_id=status.code,
        status_name=status.label,
        reason_of_cancellation=row.reason_of_cancellation,
        file_upload=row.file_upload,
        active=bool(row.active),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )

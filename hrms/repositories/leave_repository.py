from __future__ import annotations

from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select, update

from hrms.models.leave import LIVE_LEAVE_STATUSES, LeaveStatus
from hrms.repositories.base import BaseRepository
from hrms.repositories.data_store import utcnow
from hrms.repositories.tables import LeaveApplication, LeaveType, RecordState


class LeaveTypeRepository(BaseRepository[LeaveType]):
    model = LeaveType

    def list_active(self) -> list[LeaveType]:
        stmt = self.live(LeaveType.active.is_(True)).order_by(LeaveType.name)
        return list(self.session.scalars(stmt).all())

    def names_for(self, ids: set[int]) -> dict[int, str]:
        if not ids:
            return {}
        # deleted types still label historical applications
        rows = self.session.execute(select(LeaveType.id, LeaveType.name).where(LeaveType.id.in_(ids))).all()
        return {row.id: row.name for row in rows}


class LeaveApplicationRepository(BaseRepository[LeaveApplication]):
    model = LeaveApplication

    def get_for_update(self, leave_id: int) -> Optional[LeaveApplication]:
        stmt = self.live(LeaveApplication.id == leave_id).with_for_update()
        return self.session.scalars(stmt).first()

    def find_overlapping(
        self,
        employee_uid: str,
        from_date: date,
        to_date: date,
        exclude_id: Optional[int] = None,
    ) -> Optional[LeaveApplication]:
        criteria: list[Any] = [
            LeaveApplication.employee_uid == employee_uid,
            LeaveApplication.active.is_(True),
            LeaveApplication.status.in_(LIVE_LEAVE_STATUSES),
            LeaveApplication.from_date <= to_date,
            LeaveApplication.to_date >= from_date,
        ]
        if exclude_id is not None:
            criteria.append(LeaveApplication.id != exclude_id)
        return self.session.scalars(self.live(*criteria).order_by(LeaveApplication.from_date)).first()

    def list_for_employee_between(self, employee_uid: str, start: date, end: date) -> list[LeaveApplication]:
        stmt = self.live(
            LeaveApplication.employee_uid == employee_uid,
            LeaveApplication.from_date >= start,
            LeaveApplication.from_date <= end,
        )
        return list(self.session.scalars(stmt).all())

    def transition_status(
        self,
        leave_id: int,
        expected: LeaveStatus,
        new_status: LeaveStatus,
        **values: Any,
    ) -> bool:
        """Compare-on-write status change; False when the row moved on meanwhile."""
        result = self.session.execute(
            update(LeaveApplication)
            .where(
                LeaveApplication.id == leave_id,
                LeaveApplication.status == expected,
                LeaveApplication.record_state == RecordState.ACTIVE,
            )
            .values(status=new_status, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        return (result.rowcount or 0) == 1

    def _filtered(
        self,
        employee_uid: Optional[str] = None,
        leave_type_id: Optional[int] = None,
    ) -> list[Any]:
        criteria: list[Any] = [LeaveApplication.active.is_(True)]
        if employee_uid:
            criteria.append(LeaveApplication.employee_uid == employee_uid)
        if leave_type_id:
            criteria.append(LeaveApplication.leave_type_id == leave_type_id)
        return criteria

    def page(
        self,
        *,
        offset: int,
        limit: int,
        status: Optional[LeaveStatus] = None,
        employee_uid: Optional[str] = None,
        leave_type_id: Optional[int] = None,
    ) -> list[LeaveApplication]:
        criteria = self._filtered(employee_uid, leave_type_id)
        if status is not None:
            criteria.append(LeaveApplication.status == status)
        stmt = (
            self.live(*criteria)
            .order_by(LeaveApplication.created_at.desc(), LeaveApplication.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.scalars(stmt).all())

    def count(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_uid: Optional[str] = None,
        leave_type_id: Optional[int] = None,
    ) -> int:
        criteria = self._filtered(employee_uid, leave_type_id)
        if status is not None:
            criteria.append(LeaveApplication.status == status)
        stmt = select(func.count(LeaveApplication.id)).where(
            LeaveApplication.record_state == RecordState.ACTIVE, *criteria
        )
        return int(self.session.scalar(stmt) or 0)

    def count_by_status(
        self,
        *,
        employee_uid: Optional[str] = None,
        leave_type_id: Optional[int] = None,
    ) -> dict[LeaveStatus, int]:
        criteria = self._filtered(employee_uid, leave_type_id)
        stmt = (
            select(LeaveApplication.status, func.count(LeaveApplication.id))
            .where(LeaveApplication.record_state == RecordState.ACTIVE, *criteria)
            .group_by(LeaveApplication.status)
        )
        return {status: int(count) for status, count in self.session.execute(stmt).all()}

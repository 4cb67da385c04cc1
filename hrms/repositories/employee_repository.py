from __future__ import annotations

from typing import Optional

from hrms.repositories.base import BaseRepository
from hrms.repositories.tables import Employee


class EmployeeRepository(BaseRepository[Employee]):
    model = Employee

    def get_active(self, uid: str) -> Optional[Employee]:
        return self.session.scalars(self.live(Employee.uid == uid, Employee.active.is_(True))).first()

    def lock_active(self, uid: str) -> Optional[Employee]:
        """Row-lock the employee; serializes writes to that employee's leave calendar."""
        stmt = self.live(Employee.uid == uid, Employee.active.is_(True)).with_for_update()
        return self.session.scalars(stmt).first()

    def names_for(self, uids: set[str]) -> dict[str, str]:
        if not uids:
            return {}
        rows = self.session.scalars(self.live(Employee.uid.in_(uids))).all()
        return {row.uid: row.full_name for row in rows}

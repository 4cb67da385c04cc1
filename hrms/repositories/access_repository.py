from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from sqlalchemy import func, select, update

from hrms.repositories.base import BaseRepository
from hrms.repositories.data_store import utcnow
from hrms.repositories.tables import Module, Permission, RecordState, Role, RolePermission


class RoleRepository(BaseRepository[Role]):
    model = Role

    def list_with_permission_counts(self) -> list[tuple[Role, int]]:
        counts = (
            select(RolePermission.role_id, func.count(RolePermission.id).label("cnt"))
            .where(RolePermission.status.is_(True))
            .group_by(RolePermission.role_id)
            .subquery()
        )
        stmt = (
            select(Role, func.coalesce(counts.c.cnt, 0))
            .outerjoin(counts, counts.c.role_id == Role.id)
            .where(Role.record_state == RecordState.ACTIVE)
            .order_by(Role.id)
        )
        return [(role, int(count)) for role, count in self.session.execute(stmt).all()]

    def find_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[Role]:
        criteria = [func.lower(Role.name) == name.strip().lower()]
        if exclude_id is not None:
            criteria.append(Role.id != exclude_id)
        return self.session.scalars(self.live(*criteria)).first()


class PermissionRepository(BaseRepository[Permission]):
    model = Permission

    def list_active(self) -> list[Permission]:
        stmt = self.live(Permission.active.is_(True)).order_by(Permission.module_id, Permission.id)
        return list(self.session.scalars(stmt).all())

    def existing_ids(self, permission_ids: Iterable[int]) -> set[int]:
        ids = set(permission_ids)
        if not ids:
            return set()
        stmt = select(Permission.id).where(
            Permission.id.in_(ids),
            Permission.record_state == RecordState.ACTIVE,
        )
        return set(self.session.scalars(stmt).all())


class ModuleRepository(BaseRepository[Module]):
    model = Module

    def list_active(self) -> list[Module]:
        stmt = self.live(Module.active.is_(True)).order_by(Module.name)
        return list(self.session.scalars(stmt).all())


class RolePermissionRepository(BaseRepository[RolePermission]):
    model = RolePermission

    def active_permission_ids(self, role_id: int) -> set[int]:
        stmt = select(RolePermission.permission_id).where(
            RolePermission.role_id == role_id,
            RolePermission.status.is_(True),
        )
        return set(self.session.scalars(stmt).all())

    def all_for_role(self, role_id: int) -> list[RolePermission]:
        stmt = select(RolePermission).where(RolePermission.role_id == role_id).with_for_update()
        return list(self.session.scalars(stmt).all())

    def active_for_role_in_org(self, role_id: int, organization_id: int) -> list[RolePermission]:
        stmt = (
            select(RolePermission)
            .where(
                RolePermission.role_id == role_id,
                RolePermission.organization_id == organization_id,
                RolePermission.status.is_(True),
            )
            .order_by(RolePermission.id)
        )
        return list(self.session.scalars(stmt).all())

    def deactivate_all(self, role_id: int, actor_uid: str) -> int:
        result = self.session.execute(
            update(RolePermission)
            .where(RolePermission.role_id == role_id, RolePermission.status.is_(True))
            .values(status=False, updated_at=utcnow(), updated_by=actor_uid)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def activate(self, row_ids: Iterable[int], actor_uid: str) -> int:
        ids = list(row_ids)
        if not ids:
            return 0
        result = self.session.execute(
            update(RolePermission)
            .where(RolePermission.id.in_(ids))
            .values(status=True, updated_at=utcnow(), updated_by=actor_uid)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    def grant_exists(self, role_id: int, organization_id: int, permission_code: str) -> bool:
        stmt = (
            select(RolePermission.id)
            .join(Permission, Permission.id == RolePermission.permission_id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(
                RolePermission.role_id == role_id,
                RolePermission.organization_id == organization_id,
                RolePermission.status.is_(True),
                Permission.description == permission_code,
                Permission.active.is_(True),
                Permission.record_state == RecordState.ACTIVE,
                Role.record_state == RecordState.ACTIVE,
            )
            .limit(1)
        )
        return self.session.scalars(stmt).first() is not None

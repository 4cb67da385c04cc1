from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from sqlalchemy.orm import Session

from hrms.core.exceptions import NotFoundError, ProtectedRoleError, ValidationError
from hrms.core.rbac import is_admin_role, is_super_admin_role
from hrms.models.access import (
    ModulePermissions,
    PermissionMatrixEntry,
    PermissionRecord,
    RoleRecord,
)
from hrms.models.auth import Identity
from hrms.repositories.access_repository import (
    ModuleRepository,
    PermissionRepository,
    RolePermissionRepository,
    RoleRepository,
)
from hrms.repositories.data_store import DataStore
from hrms.repositories.tables import Role, RolePermission
from hrms.services.audit_service import AuditLogger

logger = logging.getLogger(__name__)


class PermissionService:
    """Roles and their per-organization permission grants."""

    def __init__(self, store: DataStore, audit_logger: AuditLogger) -> None:
        self.store = store
        self.audit_logger = audit_logger

    def list_permissions_by_module(self) -> dict[str, list[PermissionRecord]]:
        grouped: dict[str, list[PermissionRecord]] = {}
        with self.store.transaction() as session:
            for perm in PermissionRepository(session).list_active():
                module = perm.module if perm.module is not None and not perm.module.is_deleted else None
                module_name = module.name if module else "Other"
                grouped.setdefault(module_name, []).append(
                    PermissionRecord(
                        id=perm.id,
                        name=perm.description,
                        module_id=perm.module_id,
                        module_name=module_name,
                    )
                )
        return grouped

    def list_roles(self) -> list[RoleRecord]:
        with self.store.transaction() as session:
            rows = RoleRepository(session).list_with_permission_counts()
            return [self._to_role_model(role, count) for role, count in rows]

    def get_role_permissions(self, role_id: int) -> set[int]:
        with self.store.transaction() as session:
            self._require_role(session, role_id)
            return RolePermissionRepository(session).active_permission_ids(role_id)

    def get_permission_matrix(self, role_id: int) -> list[ModulePermissions]:
        with self.store.transaction() as session:
            self._require_role(session, role_id)
            granted = RolePermissionRepository(session).active_permission_ids(role_id)
            matrix: list[ModulePermissions] = []
            for module in ModuleRepository(session).list_active():
                entries = [
                    PermissionMatrixEntry(
                        permission_id=perm.id,
                        description=perm.description,
                        checked=perm.id in granted,
                    )
                    for perm in module.permissions
                    if perm.active and not perm.is_deleted
                ]
                matrix.append(ModulePermissions(module=module.name, permissions=entries))
            return matrix

    def role_has_permission(self, role_id: int, organization_id: int, permission_code: str) -> bool:
        with self.store.transaction() as session:
            return RolePermissionRepository(session).grant_exists(role_id, organization_id, permission_code)

    def sync_role_permissions(
        self,
        role_id: int,
        permission_ids: Iterable[int],
        actor: Identity,
    ) -> set[int]:
        wanted = set(permission_ids)
        if is_super_admin_role(role_id):
            raise ProtectedRoleError()

        with self.store.transaction() as session:
            self._require_role(session, role_id)
            self._sync(session, role_id, wanted, actor)

        self.audit_logger.log_event(
            event_type="role_permissions_synced",
            actor_id=actor.employee_uid,
            actor_role=actor.role_id,
            details={"role_id": role_id, "permission_ids": sorted(wanted)},
        )
        logger.info("Role %s permissions synced by %s (%d granted)", role_id, actor.employee_uid, len(wanted))
        return wanted

    def create_role(
        self,
        name: str,
        description: Optional[str],
        permission_ids: Iterable[int],
        actor: Identity,
    ) -> RoleRecord:
        name = name.strip()
        if not name:
            raise ValidationError("Role name is required")
        wanted = set(permission_ids)

        with self.store.transaction() as session:
            roles = RoleRepository(session)
            if roles.find_by_name(name):
                raise ValidationError(f"A role named '{name}' already exists")
            role = roles.add(Role(name=name, description=description))
            self._sync(session, role.id, wanted, actor)
            record = self._to_role_model(role, len(wanted))

        self.audit_logger.log_event(
            event_type="role_created",
            actor_id=actor.employee_uid,
            actor_role=actor.role_id,
            details={"role_id": record.id, "name": name, "permission_ids": sorted(wanted)},
        )
        return record

    def update_role(
        self,
        role_id: int,
        name: str,
        description: Optional[str],
        permission_ids: Optional[Iterable[int]],
        actor: Identity,
    ) -> RoleRecord:
        name = name.strip()
        if not name:
            raise ValidationError("Role name is required")
        wanted = set(permission_ids) if permission_ids is not None else None
        if wanted is not None and is_super_admin_role(role_id):
            raise ProtectedRoleError()

        with self.store.transaction() as session:
            roles = RoleRepository(session)
            role = self._require_role(session, role_id)
            if roles.find_by_name(name, exclude_id=role_id):
                raise ValidationError(f"A role named '{name}' already exists")
            role.name = name
            role.description = description
            if wanted is not None:
                self._sync(session, role_id, wanted, actor)
            session.flush()
            count = len(RolePermissionRepository(session).active_permission_ids(role_id))
            record = self._to_role_model(role, count)

        self.audit_logger.log_event(
            event_type="role_updated",
            actor_id=actor.employee_uid,
            actor_role=actor.role_id,
            details={"role_id": role_id, "name": name, "permissions_synced": wanted is not None},
        )
        return record

    def delete_role(self, role_id: int, actor: Identity) -> None:
        if is_admin_role(role_id):
            raise ProtectedRoleError("Cannot delete a built-in administrator role")

        with self.store.transaction() as session:
            role = self._require_role(session, role_id)
            role.active = False
            role.soft_delete()

        self.audit_logger.log_event(
            event_type="role_deleted",
            actor_id=actor.employee_uid,
            actor_role=actor.role_id,
            details={"role_id": role_id},
        )

    def _sync(self, session: Session, role_id: int, wanted: set[int], actor: Identity) -> None:
        missing = wanted - PermissionRepository(session).existing_ids(wanted)
        if missing:
            raise ValidationError(f"Unknown permission ids: {sorted(missing)}")

        grants = RolePermissionRepository(session)
        existing = {row.permission_id: row for row in grants.all_for_role(role_id)}

        grants.deactivate_all(role_id, actor.employee_uid)
        grants.activate(
            (existing[pid].id for pid in wanted if pid in existing),
            actor.employee_uid,
        )
        for permission_id in sorted(wanted - existing.keys()):
            grants.add(
                RolePermission(
                    role_id=role_id,
                    permission_id=permission_id,
                    organization_id=actor.organization_id,
                    status=True,
                    created_by=actor.employee_uid,
                    updated_by=actor.employee_uid,
                )
            )

    @staticmethod
    def _require_role(session: Session, role_id: int) -> Role:
        role = RoleRepository(session).get(role_id)
        if role is None:
            raise NotFoundError("Role not found")
        return role

    @staticmethod
    def _to_role_model(role: Role, permission_count: int) -> RoleRecord:
        return RoleRecord(
            id=role.id,
            name=role.name,
            description=role.description,
            permission_count=permission_count,
            status=bool(role.active),
        )

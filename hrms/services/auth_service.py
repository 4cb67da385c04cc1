from __future__ import annotations

import logging
from typing import Optional

from hrms.core.exceptions import ForbiddenError, UnauthorizedError
from hrms.core.rbac import Operation, PermissionCode, is_admin_role, required_permission
from hrms.core.security import decode_access_token
from hrms.models.auth import Identity
from hrms.repositories.data_store import DataStore
from hrms.repositories.employee_repository import EmployeeRepository
from hrms.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class AuthService:
    """Identity resolution and the single authorization guard.

    Nothing is cached: every check reads the current grants.
    """

    def __init__(self, store: DataStore, permission_service: PermissionService) -> None:
        self.store = store
        self.permission_service = permission_service

    def resolve_identity(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        try:
            payload = decode_access_token(token)
        except ValueError:
            logger.info("Rejected invalid or expired token")
            return None

        employee_uid = payload.get("sub")
        if not employee_uid:
            return None

        with self.store.transaction() as session:
            employee = EmployeeRepository(session).get_active(str(employee_uid))
            if employee is None:
                return None
            # role and organization come from the live record, not the token
            return Identity(
                employee_uid=employee.uid,
                role_id=employee.role_id,
                organization_id=employee.organization_id,
                full_name=employee.full_name,
            )

    def can(self, identity: Optional[Identity], permission: PermissionCode | str) -> bool:
        if identity is None:
            return False
        if is_admin_role(identity.role_id):
            return True
        code = permission.value if isinstance(permission, PermissionCode) else permission
        return self.permission_service.role_has_permission(identity.role_id, identity.organization_id, code)

    def authorize(self, identity: Optional[Identity], permission: PermissionCode | str) -> Identity:
        if identity is None:
            raise UnauthorizedError()
        if not self.can(identity, permission):
            code = permission.value if isinstance(permission, PermissionCode) else permission
            logger.info("Denied %s to %s (role %s)", code, identity.employee_uid, identity.role_id)
            raise ForbiddenError()
        return identity

    def authorize_operation(self, identity: Optional[Identity], operation: Operation) -> Identity:
        return self.authorize(identity, required_permission(operation))

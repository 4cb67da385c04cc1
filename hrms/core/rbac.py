from enum import Enum, IntEnum

from hrms.core.config import settings


class SystemRole(IntEnum):
    SUPER_ADMIN = 1
    HR = 2
    FINANCE = 3
    SALES = 4
    OPERATIONS = 5
    EMPLOYEE = 6
    CLIENT = 7
    VENDOR = 8


class PermissionCode(str, Enum):
    LEAVE_VIEW = "view_leave"
    LEAVE_APPLY = "apply_leave"
    LEAVE_APPROVE = "approve_leave"
    LEAVE_REJECT = "reject_leave"
    LEAVE_CANCEL = "cancel_leave"

    MASTER_VIEW = "view_master"
    MASTER_CREATE = "create_master"
    MASTER_EDIT = "edit_master"
    MASTER_DELETE = "delete_master"

    ACCESS_CONTROL_VIEW = "view_access_control"
    ACCESS_CONTROL_EDIT = "edit_access_control"

    DASHBOARD_VIEW = "view_dashboard"
    REPORTS_VIEW = "view_reports"


class Operation(str, Enum):
    PERMISSIONS_LIST = "permissions:list"
    ROLES_LIST = "roles:list"
    ROLES_VIEW = "roles:view"
    ROLES_CREATE = "roles:create"
    ROLES_UPDATE = "roles:update"
    ROLES_DELETE = "roles:delete"
    ROLE_PERMISSIONS_VIEW = "roles:permissions:view"
    ROLE_PERMISSIONS_SYNC = "roles:permissions:sync"

    LEAVE_LIST_ALL = "leave:list:all"
    LEAVE_VIEW_ANY = "leave:view:any"
    LEAVE_APPLY = "leave:apply"
    LEAVE_ADMIN_APPLY = "leave:admin-apply"
    LEAVE_DECIDE = "leave:decide"
    LEAVE_BALANCE_ANY = "leave:balance:any"

    LEAVE_TYPES_LIST = "leave-types:list"
    LEAVE_TYPES_CREATE = "leave-types:create"
    LEAVE_TYPES_UPDATE = "leave-types:update"
    LEAVE_TYPES_DELETE = "leave-types:delete"

    AUDIT_VIEW = "audit:view"


# Single source of truth for what each operation requires.
POLICY: dict[Operation, PermissionCode] = {
    Operation.PERMISSIONS_LIST: PermissionCode.ACCESS_CONTROL_VIEW,
    Operation.ROLES_LIST: PermissionCode.ACCESS_CONTROL_VIEW,
    Operation.ROLES_VIEW: PermissionCode.ACCESS_CONTROL_VIEW,
    Operation.ROLES_CREATE: PermissionCode.ACCESS_CONTROL_EDIT,
    Operation.ROLES_UPDATE: PermissionCode.ACCESS_CONTROL_EDIT,
    Operation.ROLES_DELETE: PermissionCode.ACCESS_CONTROL_EDIT,
    Operation.ROLE_PERMISSIONS_VIEW: PermissionCode.ACCESS_CONTROL_VIEW,
    Operation.ROLE_PERMISSIONS_SYNC: PermissionCode.ACCESS_CONTROL_EDIT,
    Operation.LEAVE_LIST_ALL: PermissionCode.LEAVE_VIEW,
    Operation.LEAVE_VIEW_ANY: PermissionCode.LEAVE_VIEW,
    Operation.LEAVE_APPLY: PermissionCode.LEAVE_APPLY,
    Operation.LEAVE_ADMIN_APPLY: PermissionCode.LEAVE_APPROVE,
    Operation.LEAVE_DECIDE: PermissionCode.LEAVE_APPROVE,
    Operation.LEAVE_BALANCE_ANY: PermissionCode.LEAVE_VIEW,
    Operation.LEAVE_TYPES_LIST: PermissionCode.MASTER_VIEW,
    Operation.LEAVE_TYPES_CREATE: PermissionCode.MASTER_CREATE,
    Operation.LEAVE_TYPES_UPDATE: PermissionCode.MASTER_EDIT,
    Operation.LEAVE_TYPES_DELETE: PermissionCode.MASTER_DELETE,
    Operation.AUDIT_VIEW: PermissionCode.REPORTS_VIEW,
}


def required_permission(operation: Operation) -> PermissionCode:
    return POLICY[operation]


def is_admin_role(role_id: int | None) -> bool:
    return role_id is not None and role_id in settings.admin_role_ids


def is_super_admin_role(role_id: int | None) -> bool:
    return role_id == settings.super_admin_role_id

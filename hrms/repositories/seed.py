from __future__ import annotations

import logging

from sqlalchemy import func, select, text
from sqlalchemy.orm import Session

from hrms.core.rbac import PermissionCode, SystemRole
from hrms.repositories.data_store import DataStore
from hrms.repositories.tables import (
    Employee,
    LeaveType,
    Menu,
    Module,
    Permission,
    Role,
    RolePermission,
)

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZATION_ID = 1

ROLES = [
    (SystemRole.SUPER_ADMIN, "Super Admin", "Full access to every module"),
    (SystemRole.HR, "HR", "Human resources administration"),
    (SystemRole.FINANCE, "Finance", "Invoices, expenses and payroll"),
    (SystemRole.SALES, "Sales", "Clients and opportunities"),
    (SystemRole.OPERATIONS, "Operations", "Projects and resourcing"),
    (SystemRole.EMPLOYEE, "Employee", "Self-service access"),
    (SystemRole.CLIENT, "Client", "External client portal"),
    (SystemRole.VENDOR, "Vendor", "External vendor portal"),
]

MODULES = [
    (1, "Leave Management"),
    (2, "Access Control"),
    (3, "Masters"),
    (4, "Dashboard"),
    (5, "Reports"),
]

# (id, name, route, icon, module_id)
MENUS = [
    (1, "My Leave", "/leave/my-leave", "la la-calendar", 1),
    (2, "Leave Requests", "/leave", "la la-calendar-check", 1),
    (3, "Access Control", "/settings/access-control", "la la-lock", 2),
    (4, "Masters", "/settings/masters", "la la-database", 3),
    (5, "Dashboard", "/dashboard", "la la-dashboard", 4),
    (6, "Leave Report", "/reports/leave", "la la-file-text", 5),
    (7, "Audit Trail", "/settings/audit-trail", "la la-history", 5),
]

# (id, code, module_id, menu_id)
PERMISSIONS = [
    (1, PermissionCode.LEAVE_VIEW, 1, 2),
    (2, PermissionCode.LEAVE_APPLY, 1, 1),
    (3, PermissionCode.LEAVE_APPROVE, 1, 2),
    (4, PermissionCode.LEAVE_REJECT, 1, 2),
    (5, PermissionCode.LEAVE_CANCEL, 1, 1),
    (6, PermissionCode.ACCESS_CONTROL_VIEW, 2, 3),
    (7, PermissionCode.ACCESS_CONTROL_EDIT, 2, 3),
    (8, PermissionCode.MASTER_VIEW, 3, 4),
    (9, PermissionCode.MASTER_CREATE, 3, 4),
    (10, PermissionCode.MASTER_EDIT, 3, 4),
    (11, PermissionCode.MASTER_DELETE, 3, 4),
    (12, PermissionCode.DASHBOARD_VIEW, 4, 5),
    (13, PermissionCode.REPORTS_VIEW, 5, 6),
]

# tables seeded with explicit primary keys
EXPLICIT_ID_TABLES = ("roles", "modules", "menus", "permissions")

DEFAULT_GRANTS = {
    SystemRole.EMPLOYEE: [2, 5, 12],
}

LEAVE_TYPES = [
    ("Annual", "Paid annual leave", 20),
    ("Sick", "Sick leave with medical certificate beyond two days", 12),
    ("Casual", "Short notice personal leave", 6),
]

EMPLOYEES = [
    ("EMP-0001", "Morgan", "Lee", "morgan.lee@example.com", SystemRole.SUPER_ADMIN),
    ("EMP-0002", "Riley", "Chen", "riley.chen@example.com", SystemRole.HR),
    ("EMP-0003", "Jordan", "Patel", "jordan.patel@example.com", SystemRole.EMPLOYEE),
]


def seed_reference_data(store: DataStore, with_demo_data: bool = True) -> bool:
    """Install roles, modules, menus and permissions on an empty database.

    Returns False without touching anything when roles already exist.
    """
    with store.transaction() as session:
        if session.scalar(select(func.count(Role.id))):
            return False

        for role_id, name, description in ROLES:
            session.add(Role(id=int(role_id), name=name, description=description))
        for module_id, name in MODULES:
            session.add(Module(id=module_id, name=name))
        session.flush()

        for menu_id, name, route, icon, module_id in MENUS:
            session.add(Menu(id=menu_id, name=name, route_url=route, font_icon=icon, module_id=module_id))
        session.flush()

        for permission_id, code, module_id, menu_id in PERMISSIONS:
            session.add(
                Permission(id=permission_id, description=code.value, module_id=module_id, menu_id=menu_id)
            )
        session.flush()

        for role_id, permission_ids in DEFAULT_GRANTS.items():
            for permission_id in permission_ids:
                session.add(
                    RolePermission(
                        role_id=int(role_id),
                        permission_id=permission_id,
                        organization_id=DEFAULT_ORGANIZATION_ID,
                        created_by="system",
                        updated_by="system",
                    )
                )

        advance_id_sequences(session)

        if with_demo_data:
            for name, description, max_count in LEAVE_TYPES:
                session.add(LeaveType(name=name, description=description, max_leave_count=max_count))
            for uid, first, last, email, role in EMPLOYEES:
                session.add(
                    Employee(
                        uid=uid,
                        first_name=first,
                        last_name=last,
                        email=email,
                        role_id=int(role),
                        organization_id=DEFAULT_ORGANIZATION_ID,
                    )
                )

    logger.info("Seeded reference data (demo data: %s)", with_demo_data)
    return True


def advance_id_sequences(session: Session) -> None:
    """Move PostgreSQL id sequences past explicitly inserted keys.

    Other backends derive the next id from the table itself.
    """
    if session.get_bind().dialect.name != "postgresql":
        return
    session.flush()
    for table in EXPLICIT_ID_TABLES:
        session.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"(SELECT COALESCE(MAX(id), 1) FROM {table}))"
            )
        )

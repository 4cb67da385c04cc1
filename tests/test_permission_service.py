import pytest
from sqlalchemy import func, select

from hrms.core.exceptions import NotFoundError, ProtectedRoleError, ValidationError
from hrms.core.rbac import SystemRole
from hrms.repositories.tables import RolePermission

P1, P3, P5 = 1, 3, 5


def grant_rows(container, role_id: int) -> int:
    with container.store.transaction() as session:
        return session.scalar(select(func.count(RolePermission.id)).where(RolePermission.role_id == role_id))


def test_create_then_sync_replaces_grants(container, super_admin):
    service = container.permission_service
    ops = service.create_role("Ops", "Operations desk", [P1, P3], super_admin)
    assert service.get_role_permissions(ops.id) == {P1, P3}

    service.sync_role_permissions(ops.id, [P3, P5], super_admin)

    assert service.get_role_permissions(ops.id) == {P3, P5}
    # P1 is kept as an inactive row; P3 is not duplicated
    assert grant_rows(container, ops.id) == 3


def test_sync_is_idempotent(container, super_admin):
    service = container.permission_service
    role_id = int(SystemRole.FINANCE)

    service.sync_role_permissions(role_id, [P1, P5, P5], super_admin)
    first = (service.get_role_permissions(role_id), grant_rows(container, role_id))
    service.sync_role_permissions(role_id, [P5, P1], super_admin)

    assert (service.get_role_permissions(role_id), grant_rows(container, role_id)) == first
    assert first[0] == {P1, P5}


def test_sync_to_empty_revokes_everything(container, super_admin):
    service = container.permission_service
    role_id = int(SystemRole.EMPLOYEE)
    assert service.get_role_permissions(role_id)

    service.sync_role_permissions(role_id, [], super_admin)

    assert service.get_role_permissions(role_id) == set()


def test_super_admin_role_is_protected(container, super_admin):
    service = container.permission_service
    with pytest.raises(ProtectedRoleError):
        service.sync_role_permissions(int(SystemRole.SUPER_ADMIN), [P1], super_admin)
    with pytest.raises(ProtectedRoleError):
        service.delete_role(int(SystemRole.SUPER_ADMIN), super_admin)


def test_unknown_role_and_permission_ids(container, super_admin):
    service = container.permission_service
    with pytest.raises(NotFoundError):
        service.sync_role_permissions(999, [P1], super_admin)
    with pytest.raises(ValidationError):
        service.sync_role_permissions(int(SystemRole.SALES), [P1, 999], super_admin)
    assert service.get_role_permissions(int(SystemRole.SALES)) == set()


def test_duplicate_role_name_rolls_back(container, super_admin):
    service = container.permission_service
    with pytest.raises(ValidationError):
        service.create_role("  hr ", None, [P1], super_admin)
    with pytest.raises(ValidationError):
        service.create_role("Auditors", None, [P1, 999], super_admin)
    assert all(role.name != "Auditors" for role in service.list_roles())


def test_deleted_role_is_hidden(container, super_admin):
    service = container.permission_service
    role = service.create_role("Temp", None, [P1], super_admin)

    service.delete_role(role.id, super_admin)

    assert role.id not in {r.id for r in service.list_roles()}
    with pytest.raises(NotFoundError):
        service.get_role_permissions(role.id)


def test_update_role_renames_and_syncs(container, super_admin):
    service = container.permission_service
    role = service.create_role("Desk", None, [P1], super_admin)

    updated = service.update_role(role.id, "Front Desk", "Reception", [P3], super_admin)

    assert updated.name == "Front Desk"
    assert updated.permission_count == 1
    assert service.get_role_permissions(role.id) == {P3}


def test_permission_matrix_and_grouping(container, super_admin):
    service = container.permission_service
    grouped = service.list_permissions_by_module()
    assert [p.name for p in grouped["Leave Management"]][:3] == ["view_leave", "apply_leave", "approve_leave"]

    matrix = {m.module: m for m in service.get_permission_matrix(int(SystemRole.EMPLOYEE))}
    checked = {p.description for p in matrix["Leave Management"].permissions if p.checked}
    assert checked == {"apply_leave", "cancel_leave"}


def test_role_has_permission_is_scoped_by_organization(container):
    service = container.permission_service
    assert service.role_has_permission(int(SystemRole.EMPLOYEE), 1, "apply_leave")
    assert not service.role_has_permission(int(SystemRole.EMPLOYEE), 2, "apply_leave")
    assert not service.role_has_permission(int(SystemRole.EMPLOYEE), 1, "approve_leave")


def test_sync_writes_audit_event(container, super_admin):
    container.permission_service.sync_role_permissions(int(SystemRole.SALES), [P1], super_admin)

    events = container.audit_logger.recent_events(event_type="role_permissions_synced")
    assert events[0]["details"] == {"role_id": int(SystemRole.SALES), "permission_ids": [P1]}


def test_hr_role_cannot_be_deleted(container, super_admin):
    with pytest.raises(ProtectedRoleError):
        container.permission_service.delete_role(int(SystemRole.HR), super_admin)

    assert int(SystemRole.HR) in {r.id for r in container.permission_service.list_roles()}

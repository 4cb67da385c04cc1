from typing import Any

from fastapi import APIRouter, Depends, Path

from hrms.api.deps import get_container, require_permission, write_rate_limit
from hrms.api.responses import envelope
from hrms.core.rbac import Operation
from hrms.models.access import PermissionSyncRequest, RoleCreate, RoleUpdate
from hrms.models.auth import Identity
from hrms.services.container import ServiceContainer


router = APIRouter(tags=["Access Control"])


@router.get("/access-control/permissions")
def list_permissions_by_module(
    current_user: Identity = Depends(require_permission(Operation.PERMISSIONS_LIST)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    _ = current_user
    return envelope(container.permission_service.list_permissions_by_module())


@router.get("/roles")
def list_roles(
    current_user: Identity = Depends(require_permission(Operation.ROLES_LIST)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    _ = current_user
    return envelope(container.permission_service.list_roles())


@router.post("/roles", status_code=201, dependencies=[Depends(write_rate_limit)])
def create_role(
    payload: RoleCreate,
    current_user: Identity = Depends(require_permission(Operation.ROLES_CREATE)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    role = container.permission_service.create_role(
        payload.role_name,
        payload.description,
        payload.permission_ids,
        current_user,
    )
    return envelope(role, code=201, message="Role created successfully")


@router.get("/roles/{role_id}")
def get_role_permission_matrix(
    role_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.ROLES_VIEW)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    _ = current_user
    return envelope(container.permission_service.get_permission_matrix(role_id))


@router.put("/roles/{role_id}", dependencies=[Depends(write_rate_limit)])
def update_role(
    payload: RoleUpdate,
    role_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.ROLES_UPDATE)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    role = container.permission_service.update_role(
        role_id,
        payload.role_name,
        payload.description,
        payload.permission_ids,
        current_user,
    )
    return envelope(role, message="Role updated successfully")


@router.delete("/roles/{role_id}", dependencies=[Depends(write_rate_limit)])
def delete_role(
    role_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.ROLES_DELETE)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    container.permission_service.delete_role(role_id, current_user)
    return envelope(message="Role deleted successfully")


@router.get("/roles/{role_id}/permissions")
def get_role_permissions(
    role_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.ROLE_PERMISSIONS_VIEW)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    _ = current_user
    return envelope(sorted(container.permission_service.get_role_permissions(role_id)))


@router.post("/roles/{role_id}/permissions", dependencies=[Depends(write_rate_limit)])
def sync_role_permissions(
    payload: PermissionSyncRequest,
    role_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.ROLE_PERMISSIONS_SYNC)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    granted = container.permission_service.sync_role_permissions(role_id, payload.permission_ids, current_user)
    return envelope(sorted(granted), message="Permissions updated successfully")

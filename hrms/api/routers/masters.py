from typing import Any

from fastapi import APIRouter, Depends, Path

from hrms.api.deps import get_container, require_permission, write_rate_limit
from hrms.api.responses import envelope
from hrms.core.rbac import Operation
from hrms.models.auth import Identity
from hrms.models.leave import LeaveTypeCreate, LeaveTypeUpdate
from hrms.services.container import ServiceContainer


router = APIRouter(prefix="/masters", tags=["Masters"])


@router.get("/leave-types")
def list_leave_types(
    current_user: Identity = Depends(require_permission(Operation.LEAVE_TYPES_LIST)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    _ = current_user
    return envelope(container.leave_service.list_leave_types())


@router.post("/leave-types", status_code=201, dependencies=[Depends(write_rate_limit)])
def create_leave_type(
    payload: LeaveTypeCreate,
    current_user: Identity = Depends(require_permission(Operation.LEAVE_TYPES_CREATE)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    record = container.leave_service.create_leave_type(payload, current_user)
    return envelope(record, code=201, message="Leave type added successfully")


@router.put("/leave-types/{leave_type_id}", dependencies=[Depends(write_rate_limit)])
def update_leave_type(
    payload: LeaveTypeUpdate,
    leave_type_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.LEAVE_TYPES_UPDATE)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    record = container.leave_service.update_leave_type(leave_type_id, payload, current_user)
    return envelope(record, message="Leave type updated successfully")


@router.delete("/leave-types/{leave_type_id}", dependencies=[Depends(write_rate_limit)])
def delete_leave_type(
    leave_type_id: int = Path(gt=0),
    current_user: Identity = Depends(require_permission(Operation.LEAVE_TYPES_DELETE)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    container.leave_service.delete_leave_type(leave_type_id, current_user)
    return envelope(message="Leave type deleted successfully")

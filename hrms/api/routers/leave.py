from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query

from hrms.api.deps import get_container, get_current_identity, read_rate_limit, write_rate_limit
from hrms.api.responses import envelope
from hrms.core.exceptions import ValidationError
from hrms.core.rbac import Operation
from hrms.models.auth import Identity
from hrms.models.leave import (
    AdminLeaveApplyRequest,
    LeaveApplyRequest,
    LeaveStatus,
    LeaveTransitionRequest,
    LeaveUpdateRequest,
)
from hrms.services.container import ServiceContainer


router = APIRouter(prefix="/leave", tags=["Leave"])


@router.get("", dependencies=[Depends(read_rate_limit)])
def list_leaves(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: Optional[int] = Query(default=None),
    employee_uid: Optional[str] = Query(default=None, alias="employeeUid"),
    leave_type_id: Optional[int] = Query(default=None, alias="leaveTypeId"),
    personal: bool = Query(default=False),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    if personal:
        employee_uid = current_user.employee_uid
    else:
        container.auth_service.authorize_operation(current_user, Operation.LEAVE_LIST_ALL)

    status_filter = None
    if status is not None:
        try:
            status_filter = LeaveStatus.from_code(status)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    result = container.leave_service.list_leaves(
        page=page,
        limit=limit,
        status=status_filter,
        employee_uid=employee_uid,
        leave_type_id=leave_type_id,
    )
    return envelope(result.items, pagination=result.pagination, stats=result.stats)


@router.post("", status_code=201, dependencies=[Depends(write_rate_limit)])
def apply_leave(
    payload: LeaveApplyRequest,
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    record = container.workflow_service.apply_leave(current_user, payload)
    return envelope(record, code=201, message="Leave applied successfully")


@router.post("/admin-apply", status_code=201, dependencies=[Depends(write_rate_limit)])
def admin_apply_leave(
    payload: AdminLeaveApplyRequest,
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    record = container.workflow_service.admin_apply_leave(current_user, payload)
    return envelope(record, code=201, message="Leave added and approved")


@router.get("/balance", dependencies=[Depends(read_rate_limit)])
def get_balance(
    uid: Optional[str] = Query(default=None),
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    employee_uid = uid or current_user.employee_uid
    if employee_uid != current_user.employee_uid:
        container.auth_service.authorize_operation(current_user, Operation.LEAVE_BALANCE_ANY)
    balances = container.leave_service.get_balance(employee_uid, year or date.today().year)
    return envelope(balances)


@router.get("/{leave_id}")
def get_leave(
    leave_id: int = Path(gt=0),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    return envelope(container.leave_service.get_leave(leave_id, current_user))


@router.put("/{leave_id}", dependencies=[Depends(write_rate_limit)])
def update_leave(
    payload: LeaveUpdateRequest,
    leave_id: int = Path(gt=0),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    record = container.leave_service.update_leave(leave_id, payload, current_user)
    return envelope(record, message="Leave updated successfully")


@router.delete("/{leave_id}", dependencies=[Depends(write_rate_limit)])
def delete_leave(
    leave_id: int = Path(gt=0),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    container.leave_service.delete_leave(leave_id, current_user)
    return envelope(message="Leave withdrawn successfully")


@router.post("/{leave_id}/approve", dependencies=[Depends(write_rate_limit)])
def decide_leave(
    payload: LeaveTransitionRequest,
    leave_id: int = Path(gt=0),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    workflow = container.workflow_service
    record = workflow.transition(leave_id, payload.action, current_user, payload.reason)
    return envelope(record, message=workflow.message_for(payload.action))

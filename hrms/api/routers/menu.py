from typing import Any

from fastapi import APIRouter, Depends, Path

from hrms.api.deps import get_container, get_current_identity
from hrms.api.responses import envelope
from hrms.core.rbac import Operation
from hrms.models.auth import Identity
from hrms.services.container import ServiceContainer


router = APIRouter(prefix="/menu", tags=["Menu"])


@router.get("")
def read_my_menu(
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    return envelope(container.menu_service.build_menu(current_user.role_id, current_user.organization_id))


@router.get("/{role_id}/{organisation_id}")
def read_role_menu(
    role_id: int = Path(gt=0),
    organisation_id: int = Path(gt=0),
    current_user: Identity = Depends(get_current_identity),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    if (role_id, organisation_id) != (current_user.role_id, current_user.organization_id):
        container.auth_service.authorize_operation(current_user, Operation.ROLES_VIEW)
    return envelope(container.menu_service.build_menu(role_id, organisation_id))

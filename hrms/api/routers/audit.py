from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from hrms.api.deps import get_container, require_permission
from hrms.api.responses import envelope
from hrms.core.rbac import Operation
from hrms.models.auth import Identity
from hrms.services.container import ServiceContainer


router = APIRouter(prefix="/audit-trail", tags=["Audit"])


@router.get("")
def get_recent_events(
    limit: int = Query(default=100, ge=1, le=1000),
    event_type: Optional[str] = Query(default=None, alias="eventType"),
    actor_id: Optional[str] = Query(default=None, alias="actorId"),
    current_user: Identity = Depends(require_permission(Operation.AUDIT_VIEW)),
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    _ = current_user
    return envelope(container.audit_logger.recent_events(limit, event_type=event_type, actor_id=actor_id))

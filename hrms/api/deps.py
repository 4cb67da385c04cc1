from collections.abc import Callable
from typing import Optional

from fastapi import Depends, Request

from hrms.core.exceptions import UnauthorizedError
from hrms.core.rbac import Operation
from hrms.models.auth import Identity
from hrms.services.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def extract_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get("token")


def get_optional_identity(
    request: Request,
    container: ServiceContainer = Depends(get_container),
) -> Optional[Identity]:
    return container.auth_service.resolve_identity(extract_token(request))


def get_current_identity(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise UnauthorizedError()
    return identity


def require_permission(operation: Operation) -> Callable[..., Identity]:
    def dependency(
        identity: Optional[Identity] = Depends(get_optional_identity),
        container: ServiceContainer = Depends(get_container),
    ) -> Identity:
        return container.auth_service.authorize_operation(identity, operation)

    return dependency


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


def route_key(request: Request) -> str:
    # one bucket per route template, not per concrete id
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def write_rate_limit(request: Request, container: ServiceContainer = Depends(get_container)) -> None:
    container.rate_limiter.hit(f"write:{route_key(request)}", client_key(request), container.write_limit)


def read_rate_limit(request: Request, container: ServiceContainer = Depends(get_container)) -> None:
    container.rate_limiter.hit(f"read:{route_key(request)}", client_key(request), container.read_limit)

from typing import Optional

from fastapi import FastAPI

from hrms.api.responses import register_exception_handlers
from hrms.api.routers.access_control import router as access_control_router
from hrms.api.routers.audit import router as audit_router
from hrms.api.routers.leave import router as leave_router
from hrms.api.routers.masters import router as masters_router
from hrms.api.routers.menu import router as menu_router
from hrms.core.config import settings
from hrms.core.logging import configure_logging
from hrms.services.container import ServiceContainer, build_container

configure_logging()


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.api_version,
        description=(
            "HR service exposing role, permission and menu administration together with "
            "leave balances and the leave approval workflow."
        ),
    )
    app.state.container = container or build_container()
    register_exception_handlers(app)

    @app.get("/")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    app.include_router(access_control_router)
    app.include_router(menu_router)
    app.include_router(leave_router)
    app.include_router(masters_router)
    app.include_router(audit_router)
    return app


app = create_app()

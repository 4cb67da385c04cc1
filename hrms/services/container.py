from __future__ import annotations

from pathlib import Path
from typing import Optional

from hrms.core.config import Settings, settings as default_settings
from hrms.core.rate_limit import RateLimiter, RateLimitRule
from hrms.repositories.data_store import DataStore
from hrms.repositories.seed import seed_reference_data
from hrms.services.audit_service import AuditLogger
from hrms.services.auth_service import AuthService
from hrms.services.leave_service import LeaveService
from hrms.services.menu_service import MenuService
from hrms.services.permission_service import PermissionService
from hrms.services.workflow_service import WorkflowService


class ServiceContainer:
    """Owns one store plus every service bound to it; one per application."""

    def __init__(
        self,
        settings: Settings,
        store: DataStore,
        audit_logger: AuditLogger,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.audit_logger = audit_logger
        self.rate_limiter = rate_limiter or RateLimiter()
        self.write_limit = RateLimitRule(settings.rate_limit_write, settings.rate_limit_window_seconds)
        self.read_limit = RateLimitRule(settings.rate_limit_read, settings.rate_limit_window_seconds)

        self.permission_service = PermissionService(store=store, audit_logger=audit_logger)
        self.menu_service = MenuService(store=store)
        self.auth_service = AuthService(store=store, permission_service=self.permission_service)
        self.leave_service = LeaveService(
            store=store,
            audit_logger=audit_logger,
            auth_service=self.auth_service,
        )
        self.workflow_service = WorkflowService(
            store=store,
            audit_logger=audit_logger,
            auth_service=self.auth_service,
        )

    def close(self) -> None:
        self.store.dispose()


def build_container(
    settings: Settings = default_settings,
    database_url: Optional[str] = None,
    audit_log_path: Optional[Path] = None,
    seed: bool = True,
    demo_data: bool = True,
) -> ServiceContainer:
    store = DataStore(database_url or settings.database_url, echo=settings.database_echo)
    store.create_schema()
    if seed:
        seed_reference_data(store, with_demo_data=demo_data)
    audit_logger = AuditLogger(audit_log_path or settings.audit_log_path)
    return ServiceContainer(settings=settings, store=store, audit_logger=audit_logger)

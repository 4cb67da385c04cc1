import os
import tempfile

os.environ.setdefault("HRMS_DATABASE_URL", "sqlite://")
os.environ.setdefault("HRMS_DATA_DIR", tempfile.mkdtemp(prefix="hrms-test-"))

from datetime import date

import pytest
from fastapi.testclient import TestClient

from hrms.core.rbac import SystemRole
from hrms.core.security import create_access_token
from hrms.main import create_app
from hrms.models.auth import Identity
from hrms.models.leave import LeaveApplyRequest
from hrms.services.container import build_container

ANNUAL, SICK, CASUAL = 1, 2, 3


@pytest.fixture()
def container(tmp_path):
    container = build_container(database_url="sqlite://", audit_log_path=tmp_path / "audit.jsonl")
    yield container
    container.close()


@pytest.fixture()
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture()
def super_admin() -> Identity:
    return Identity(employee_uid="EMP-0001", role_id=int(SystemRole.SUPER_ADMIN), organization_id=1)


@pytest.fixture()
def hr() -> Identity:
    return Identity(employee_uid="EMP-0002", role_id=int(SystemRole.HR), organization_id=1)


@pytest.fixture()
def employee() -> Identity:
    return Identity(employee_uid="EMP-0003", role_id=int(SystemRole.EMPLOYEE), organization_id=1)


def auth_headers(identity: Identity) -> dict[str, str]:
    token, _ = create_access_token(identity.employee_uid, identity.role_id, identity.organization_id)
    return {"Authorization": f"Bearer {token}"}


def leave_request(from_date: date, to_date: date, leave_type_id: int = ANNUAL, **extra) -> LeaveApplyRequest:
    return LeaveApplyRequest(leave_type_id=leave_type_id, from_date=from_date, to_date=to_date, **extra)

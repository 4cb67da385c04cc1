from typing import Any, Optional

from pydantic import Field, field_validator

from hrms.models.common import CamelModel


def _require_list(value: Any) -> Any:
    if not isinstance(value, list):
        raise ValueError("permissionIds must be an array")
    return value


class PermissionRecord(CamelModel):
    id: int
    name: str
    module_id: Optional[int] = None
    module_name: str


class RoleRecord(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    permission_count: int = 0
    status: bool = True


class RoleCreate(CamelModel):
    role_name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    permission_ids: list[int] = Field(default_factory=list)

    @field_validator("permission_ids", mode="before")
    @classmethod
    def check_permission_ids(cls, value: Any) -> Any:
        return _require_list(value)


class RoleUpdate(CamelModel):
    role_name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    permission_ids: Optional[list[int]] = None

    @field_validator("permission_ids", mode="before")
    @classmethod
    def check_permission_ids(cls, value: Any) -> Any:
        if value is None:
            return value
        return _require_list(value)


class PermissionSyncRequest(CamelModel):
    permission_ids: list[int]

    @field_validator("permission_ids", mode="before")
    @classmethod
    def check_permission_ids(cls, value: Any) -> Any:
        return _require_list(value)


class PermissionMatrixEntry(CamelModel):
    permission_id: int
    description: str
    checked: bool


class ModulePermissions(CamelModel):
    module: str
    permissions: list[PermissionMatrixEntry]


class MenuItem(CamelModel):
    id: int
    name: str
    font_icon: str = "la la-file"
    route_url: str = ""
    type: str = "menu"


class MenuModule(CamelModel):
    id: int
    name: str
    font_icon: str = "la la-folder"
    route_url: str = ""
    type: str = "module"
    sub_menu: list[MenuItem] = Field(default_factory=list, alias="sub_menu")

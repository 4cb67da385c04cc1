from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from hrms.models.leave import LeaveStatus
from hrms.repositories.data_store import Base, utcnow


class RecordState(str, enum.Enum):
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class SoftDeleteMixin:
    record_state = Column(
        SAEnum(RecordState, native_enum=False, length=16),
        nullable=False,
        default=RecordState.ACTIVE,
        index=True,
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    def soft_delete(self) -> None:
        self.record_state = RecordState.DELETED
        self.deleted_at = utcnow()

    @property
    def is_deleted(self) -> bool:
        return self.record_state == RecordState.DELETED


class Employee(SoftDeleteMixin, Base):
    __tablename__ = "employees"

    uid = Column(String(64), primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    organization_id = Column(Integer, nullable=False, default=1)
    active = Column(Boolean, nullable=False, default=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Role(SoftDeleteMixin, Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Module(SoftDeleteMixin, Base):
    __tablename__ = "modules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    permissions = relationship("Permission", back_populates="module", order_by="Permission.id")


class Menu(Base):
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    route_url = Column(String(255), nullable=False, default="")
    font_icon = Column(String(64), nullable=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=False)

    module = relationship("Module")


class Permission(SoftDeleteMixin, Base):
    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String(100), nullable=False, index=True)
    module_id = Column(Integer, ForeignKey("modules.id"), nullable=True)
    menu_id = Column(Integer, ForeignKey("menus.id"), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    module = relationship("Module", back_populates="permissions")
    menu = relationship("Menu")


class RolePermission(Base):
    __tablename__ = "role_permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    permission_id = Column(Integer, ForeignKey("permissions.id"), nullable=False)
    organization_id = Column(Integer, nullable=False)
    status = Column(Boolean, nullable=False, default=True)
    created_by = Column(String(64), nullable=True)
    updated_by = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    permission = relationship("Permission")

    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),
        Index("ix_role_permissions_role_org", "role_id", "organization_id"),
    )


class LeaveType(SoftDeleteMixin, Base):
    __tablename__ = "leave_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    max_leave_count = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)


class LeaveApplication(SoftDeleteMixin, Base):
    __tablename__ = "leave_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_uid = Column(String(64), nullable=False, index=True)
    leave_type_id = Column(Integer, ForeignKey("leave_types.id"), nullable=False)
    from_date = Column(Date, nullable=False)
    to_date = Column(Date, nullable=False)
    number_of_days = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    file_upload = Column(String(500), nullable=True)
    status = Column(
        SAEnum(LeaveStatus, native_enum=False, length=32),
        nullable=False,
        default=LeaveStatus.PENDING,
    )
    reason_of_cancellation = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    leave_type = relationship("LeaveType")

    __table_args__ = (
        Index("ix_leave_applications_employee_dates", "employee_uid", "from_date", "to_date"),
    )

from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Optional

from pydantic import Field, field_validator, model_validator

from hrms.models.common import CamelModel, Pagination


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    REQUEST_CANCELLATION = "REQUEST_CANCELLATION"
    CANCELLED = "CANCELLED"

    @property
    def code(self) -> int:
        return LEAVE_STATUS_CODES[self][0]

    @property
    def label(self) -> str:
        return LEAVE_STATUS_CODES[self][1]

    @classmethod
    def from_code(cls, code: int) -> "LeaveStatus":
        for status, (status_code, _) in LEAVE_STATUS_CODES.items():
            if status_code == code:
                return status
        raise ValueError(f"Unknown leave status code: {code}")


# Wire codes and display names shared by every encode/decode path.
LEAVE_STATUS_CODES: dict[LeaveStatus, tuple[int, str]] = {
    LeaveStatus.PENDING: (1, "Pending"),
    LeaveStatus.APPROVED: (2, "Approved"),
    LeaveStatus.REJECTED: (4, "Rejected"),
    LeaveStatus.REQUEST_CANCELLATION: (26, "Request For Cancellation"),
    LeaveStatus.CANCELLED: (27, "Cancelled"),
}

# Statuses that still claim their date range.
LIVE_LEAVE_STATUSES = frozenset(
    {LeaveStatus.PENDING, LeaveStatus.APPROVED, LeaveStatus.REQUEST_CANCELLATION}
)

TERMINAL_LEAVE_STATUSES = frozenset({LeaveStatus.REJECTED, LeaveStatus.CANCELLED})


class LeaveAction(IntEnum):
    REJECT = 0
    APPROVE = 1
    REQUEST_CANCELLATION = 3
    APPROVE_CANCELLATION = 4


def inclusive_days(from_date: date, to_date: date) -> int:
    return (to_date - from_date).days + 1


class LeaveTypeCreate(CamelModel):
    leave_type: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    max_leave_count: int = Field(default=0, ge=0, le=366)


class LeaveTypeUpdate(CamelModel):
    leave_type: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    max_leave_count: Optional[int] = Field(default=None, ge=0, le=366)


class LeaveTypeRecord(CamelModel):
    id: int
    leave_type: str
    description: Optional[str] = None
    max_leave_count: int
    status: bool


class LeaveApplyRequest(CamelModel):
    leave_type_id: int = Field(gt=0)
    from_date: date
    to_date: date
    number_of_days: Optional[int] = Field(default=None, ge=1)
    reason: Optional[str] = Field(default=None, max_length=1000)
    file_upload: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def validate_date_range(self) -> "LeaveApplyRequest":
        if self.to_date < self.from_date:
            raise ValueError("toDate must be on or after fromDate")
        span = inclusive_days(self.from_date, self.to_date)
        if self.number_of_days is None:
            self.number_of_days = span
        elif self.number_of_days > span:
            raise ValueError(f"numberOfDays cannot exceed the {span} day(s) between fromDate and toDate")
        return self


class AdminLeaveApplyRequest(LeaveApplyRequest):
    employee_uid: str = Field(min_length=1, max_length=64)
    reason: str = Field(min_length=1, max_length=1000)


class LeaveUpdateRequest(CamelModel):
    leave_type_id: Optional[int] = Field(default=None, gt=0)
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    number_of_days: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    file_upload: Optional[str] = Field(default=None, max_length=500)


class LeaveTransitionRequest(CamelModel):
    action: LeaveAction = Field(alias="type")
    reason: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class LeaveApplicationRecord(CamelModel):
    id: int
    employee_id: str
    employee_name: str = "-"
    leave_type_id: int
    leave_type: str = "-"
    from_date: date
    to_date: date
    number_of_days: int
    description: Optional[str] = None
    status: LeaveStatus
    status_id: int
    status_name: str
    reason_of_cancellation: Optional[str] = None
    file_upload: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: datetime


class LeaveBalance(CamelModel):
    leave_type_id: int
    leave_type_name: str
    allocated: int
    used: int
    pending: int
    remaining: int


class LeaveStats(CamelModel):
    total: int
    pending: int
    approved: int
    rejected: int


class LeavePage(CamelModel):
    items: list[LeaveApplicationRecord]
    pagination: Pagination
    stats: LeaveStats

"""Common module — shared utilities for the vacation service."""

from vacation_backend.common.audit import AuditTrail, create_audit_entry
from vacation_backend.common.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    WEEKEND_DAYS,
    HolidaySource,
    VacationStatus,
)
from vacation_backend.common.exceptions import (
    AppException,
    DuplicateHolidayError,
    ForbiddenException,
    InsufficientBalanceError,
    InvalidRangeError,
    NoWorkingDaysError,
    NotFoundException,
    NotPendingError,
    PastDateError,
    RoleCapacityExceededError,
    register_exception_handlers,
)
from vacation_backend.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "HolidaySource",
    "VacationStatus",
    "WEEKEND_DAYS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "DuplicateHolidayError",
    "ForbiddenException",
    "InsufficientBalanceError",
    "InvalidRangeError",
    "NoWorkingDaysError",
    "NotFoundException",
    "NotPendingError",
    "PastDateError",
    "RoleCapacityExceededError",
    "register_exception_handlers",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]

"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class StaffMemberNilException(BusinessException):
    def __init__(self):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message="Staff member is nil",
            error_type="StaffMemberNil",
            field="staff_member",
        )


class StaffMemberIdEmptyException(BusinessException):
    def __init__(self):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message="Staff member ID is empty",
            error_type="StaffMemberIdEmpty",
            field="staff_id",
        )


class StaffMemberNotFoundException(BusinessException):
    def __init__(self, staff_id: Optional[str] = None):
        details = {"staff_id": staff_id} if staff_id else None
        super().__init__(
            code=BusinessCode.STAFF_MEMBER_NOT_FOUND,
            message="Staff member not found",
            error_type="StaffMemberNotFound",
            details=details,
        )


class StaffMemberAlreadyExistsException(BusinessException):
    """Uniqueness violation on staff_id, email or phone_number."""

    def __init__(self, field: Optional[str] = None, value: Optional[str] = None):
        details = {field: value} if field else None
        if field:
            message = f"Staff member with {field} {value} already exists"
        else:
            message = "Staff member already exists"
        super().__init__(
            code=BusinessCode.STAFF_MEMBER_ALREADY_EXISTS,
            message=message,
            error_type="StaffMemberAlreadyExists",
            details=details,
            field=field,
        )


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class StoreBackendException(BusinessException):
    """Any backend/driver failure that is not a classified business error.

    The original exception is chained; the message surfaced to callers stays opaque.
    """

    def __init__(self, operation: str):
        super().__init__(
            code=BusinessCode.DATABASE_ERROR,
            message=f"Failed to {operation} staff member",
            error_type="StoreBackendError",
            details={"operation": operation},
        )

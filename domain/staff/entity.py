"""
教职员工领域实体 - 包含核心业务规则
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from domain.common.exceptions import DomainValidationException


# Fields a caller may set; staff_id is the key and timestamps belong to the backend.
MUTABLE_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "email",
    "phone_number",
    "title",
    "office",
)
REQUIRED_FIELDS: tuple[str, ...] = ("first_name", "last_name", "email", "phone_number")


@dataclass
class StaffMember:
    """教职员工实体 - 领域核心"""

    staff_id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone_number: str = ""
    title: str = ""
    office: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def validate_required(self) -> None:
        """业务规则：必填字段不能为空"""
        missing = [name for name in REQUIRED_FIELDS if not getattr(self, name)]
        if missing:
            raise DomainValidationException(
                f"Required staff member fields are empty: {', '.join(missing)}",
                field=missing[0],
                details={"missing": missing},
            )

    def apply_update(self, patch: "StaffMember", update_mask: Optional[Iterable[str]] = None) -> None:
        """业务规则：部分更新合并

        Without a mask, every non-empty string field of ``patch`` overwrites the
        current value and empty strings mean "leave unchanged". With a mask,
        exactly the named fields are copied, empty values included.
        created_at and updated_at are never taken from the patch.
        """
        if update_mask:
            paths = list(dict.fromkeys(update_mask))
            unknown = [p for p in paths if p not in MUTABLE_FIELDS]
            if unknown:
                raise DomainValidationException(
                    f"Fields cannot be updated: {', '.join(unknown)}",
                    field=unknown[0],
                    details={"update_mask": paths},
                )
            for name in paths:
                setattr(self, name, getattr(patch, name))
            self.validate_required()
            return

        for name in MUTABLE_FIELDS:
            value = getattr(patch, name)
            if value:
                setattr(self, name, value)

"""
教职员工仓储实现 - 使用SQLAlchemy实现数据访问
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.staff.entity import StaffMember
from domain.staff.repository import StaffMemberRepository
from infrastructure.models.staff_member import StaffMemberModel
from core.logging_config import get_logger
from domain.common.exceptions import (
    StaffMemberAlreadyExistsException,
    StaffMemberNotFoundException,
    StoreBackendException,
)


logger = get_logger(__name__)

# Checked in order: constraint/column names as they appear in driver messages
_CONFLICT_MARKERS = (
    ("phone_number", "phone_number"),
    ("email", "email"),
    ("staff_id", "staff_id"),
    ("pk_staff_member", "staff_id"),
)


def _conflict_field(exc: IntegrityError) -> Optional[str]:
    """Return the field behind a uniqueness violation, or None if it is another integrity error."""
    msg = str(exc.orig if exc.orig is not None else exc).lower()
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate != "23505" and "unique" not in msg and "duplicate key" not in msg:
        return None
    for marker, field in _CONFLICT_MARKERS:
        if marker in msg:
            return field
    return ""


@contextmanager
def _backend_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("staff_member_backend_error", operation=operation, error=str(exc))
        raise StoreBackendException(operation) from exc


class SQLAlchemyStaffMemberRepository(StaffMemberRepository):
    """教职员工仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: StaffMemberModel) -> StaffMember:
        """将数据库模型转换为领域实体"""
        return StaffMember(
            staff_id=model.staff_id,
            first_name=model.first_name,
            last_name=model.last_name,
            email=model.email,
            phone_number=model.phone_number,
            title=model.title or "",
            office=model.office or "",
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: StaffMember) -> StaffMemberModel:
        """将领域实体转换为数据库模型（时间戳交给数据库默认值）"""
        return StaffMemberModel(
            staff_id=entity.staff_id,
            first_name=entity.first_name,
            last_name=entity.last_name,
            email=entity.email,
            phone_number=entity.phone_number,
            title=entity.title,
            office=entity.office,
        )

    def _raise_conflict(self, exc: IntegrityError, entity: StaffMember, operation: str) -> None:
        field = _conflict_field(exc)
        if field is None:
            raise StoreBackendException(operation) from exc
        logger.warning(f"{operation}_staff_member_conflict", field=field or None, staff_id=entity.staff_id)
        value = getattr(entity, field) if field else None
        raise StaffMemberAlreadyExistsException(field or None, value) from exc

    async def create(self, staff_member: StaffMember) -> StaffMember:
        """创建教职员工"""
        db_obj = self._to_model(staff_member)
        with _backend_errors("add"):
            try:
                self.session.add(db_obj)
                await self.session.flush()
            except IntegrityError as e:
                self._raise_conflict(e, staff_member, "add")
            # 读取数据库生成的时间戳
            await self.session.refresh(db_obj)
            return self._to_entity(db_obj)

    async def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        """根据ID获取教职员工"""
        with _backend_errors("get"):
            result = await self.session.execute(
                select(StaffMemberModel).where(StaffMemberModel.staff_id == staff_id)
            )
            db_obj = result.scalar_one_or_none()
            return self._to_entity(db_obj) if db_obj else None

    async def update(self, staff_member: StaffMember) -> StaffMember:
        """更新教职员工（created_at 不变，updated_at 取数据库时钟）"""
        with _backend_errors("update"):
            result = await self.session.execute(
                select(StaffMemberModel).where(StaffMemberModel.staff_id == staff_member.staff_id)
            )
            db_obj = result.scalar_one_or_none()

            if not db_obj:
                raise StaffMemberNotFoundException(staff_member.staff_id)

            db_obj.first_name = staff_member.first_name
            db_obj.last_name = staff_member.last_name
            db_obj.email = staff_member.email
            db_obj.phone_number = staff_member.phone_number
            db_obj.title = staff_member.title
            db_obj.office = staff_member.office
            # 即使字段未变化也刷新更新时间
            db_obj.updated_at = func.now()

            try:
                await self.session.flush()
            except IntegrityError as e:
                self._raise_conflict(e, staff_member, "update")
            await self.session.refresh(db_obj)
            return self._to_entity(db_obj)

    async def delete(self, staff_id: str) -> bool:
        """删除教职员工"""
        with _backend_errors("delete"):
            result = await self.session.execute(
                delete(StaffMemberModel).where(StaffMemberModel.staff_id == staff_id)
            )
            return (result.rowcount or 0) > 0

"""
教职员工应用服务（application/services）- 存储网关：参数校验、部分更新合并与事务边界
"""
from typing import Callable, Iterable, Optional

from domain.staff.entity import StaffMember
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.common.exceptions import (
    StaffMemberIdEmptyException,
    StaffMemberNilException,
    StaffMemberNotFoundException,
)
from core.logging_config import get_logger


logger = get_logger(__name__)


class StaffApplicationService:
    """教职员工应用服务 - 所有持久化读写的唯一入口

    每个操作在一个工作单元（单个事务）内完成，失败时回滚，不做本地重试。
    """

    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork]):
        self._uow_factory = uow_factory

    @staticmethod
    def _require_id(staff_id: Optional[str]) -> str:
        if not staff_id:
            raise StaffMemberIdEmptyException()
        return staff_id

    async def add_staff_member(self, staff_member: Optional[StaffMember]) -> StaffMember:
        """新增教职员工，返回包含数据库时间戳的记录"""
        if staff_member is None:
            raise StaffMemberNilException()
        self._require_id(staff_member.staff_id)
        staff_member.validate_required()

        async with self._uow_factory() as uow:
            stored = await uow.staff_member_repository.create(staff_member)
        logger.info("staff_member_created", staff_id=stored.staff_id)
        return stored

    async def get_staff_member(self, staff_id: Optional[str]) -> StaffMember:
        """根据ID获取教职员工"""
        self._require_id(staff_id)
        async with self._uow_factory(readonly=True) as uow:
            staff_member = await uow.staff_member_repository.get_by_id(staff_id)
            if not staff_member:
                raise StaffMemberNotFoundException(staff_id)
            return staff_member

    async def update_staff_member(
        self,
        staff_member: Optional[StaffMember],
        update_mask: Optional[Iterable[str]] = None,
    ) -> StaffMember:
        """部分更新：先读取现有记录，再按合并规则覆盖字段后写回"""
        if staff_member is None:
            raise StaffMemberNilException()
        self._require_id(staff_member.staff_id)

        async with self._uow_factory() as uow:
            existing = await uow.staff_member_repository.get_by_id(staff_member.staff_id)
            if not existing:
                raise StaffMemberNotFoundException(staff_member.staff_id)
            existing.apply_update(staff_member, update_mask)
            updated = await uow.staff_member_repository.update(existing)
        logger.info("staff_member_updated", staff_id=updated.staff_id)
        return updated

    async def delete_staff_member(self, staff_id: Optional[str]) -> None:
        """删除教职员工，未命中任何记录时抛出 NotFound"""
        self._require_id(staff_id)
        async with self._uow_factory() as uow:
            deleted = await uow.staff_member_repository.delete(staff_id)
            if not deleted:
                raise StaffMemberNotFoundException(staff_id)
        logger.info("staff_member_deleted", staff_id=staff_id)

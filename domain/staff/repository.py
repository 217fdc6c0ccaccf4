"""
教职员工仓储接口 - 定义数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import Optional
from .entity import StaffMember


class StaffMemberRepository(ABC):
    """教职员工仓储抽象接口 - 只定义能做什么，不管怎么做"""

    @abstractmethod
    async def create(self, staff_member: StaffMember) -> StaffMember:
        """创建教职员工，返回包含数据库时间戳的记录"""
        pass

    @abstractmethod
    async def get_by_id(self, staff_id: str) -> Optional[StaffMember]:
        """根据ID获取教职员工"""
        pass

    @abstractmethod
    async def update(self, staff_member: StaffMember) -> StaffMember:
        """写回合并后的记录并刷新 updated_at"""
        pass

    @abstractmethod
    async def delete(self, staff_id: str) -> bool:
        """删除教职员工，未命中任何行时返回 False"""
        pass

"""
教职员工数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Column, String, DateTime, func

from .base import Base


class StaffMemberModel(Base):
    """
    staff_member 表映射

    时间戳由数据库时钟生成（current_timestamp），应用层不写入本地时间
    """
    __tablename__ = "staff_member"

    # 主键：由调用方提供的外部ID
    staff_id = Column(String, primary_key=True, comment="教职员工ID")

    # 基本信息
    first_name = Column(String, nullable=False, comment="名")
    last_name = Column(String, nullable=False, comment="姓")
    email = Column(String, unique=True, nullable=False, comment="邮箱")
    phone_number = Column(String, unique=True, nullable=False, comment="电话")
    title = Column(String, nullable=True, server_default="", comment="职称")
    office = Column(String, nullable=True, server_default="", comment="办公室")

    # 时间信息
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="创建时间"
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="更新时间"
    )

    def __repr__(self):
        return f"<StaffMemberModel(staff_id='{self.staff_id}', email='{self.email}')>"

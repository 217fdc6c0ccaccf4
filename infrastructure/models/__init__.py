"""Infrastructure models package exports."""
from .base import Base, metadata
from .staff_member import StaffMemberModel

__all__ = [
    "Base",
    "metadata",
    "StaffMemberModel",
]

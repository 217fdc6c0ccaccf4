from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from google.protobuf import timestamp_pb2

from domain.staff.entity import StaffMember
from grpc_app.generated.staff.v1 import staff_pb2


def _to_timestamp(dt: Optional[datetime]) -> Optional[timestamp_pb2.Timestamp]:
    if not dt:
        return None
    if dt.tzinfo is None:
        # SQLite returns naive values; the backend clock is UTC
        dt = dt.replace(tzinfo=timezone.utc)
    ts = timestamp_pb2.Timestamp()
    ts.FromDatetime(dt)
    return ts


def staff_member_to_proto(entity: StaffMember) -> staff_pb2.StaffMember:
    msg = staff_pb2.StaffMember(
        staff_id=entity.staff_id,
        first_name=entity.first_name,
        last_name=entity.last_name,
        email=entity.email,
        phone_number=entity.phone_number,
        title=entity.title or "",
        office=entity.office or "",
    )
    created_at = _to_timestamp(entity.created_at)
    if created_at:
        msg.created_at.CopyFrom(created_at)
    updated_at = _to_timestamp(entity.updated_at)
    if updated_at:
        msg.updated_at.CopyFrom(updated_at)
    return msg


def staff_member_from_proto(msg: Optional[staff_pb2.StaffMember]) -> Optional[StaffMember]:
    """Wire record to entity; timestamps on the wire are ignored, the backend owns them."""
    if msg is None:
        return None
    return StaffMember(
        staff_id=msg.staff_id,
        first_name=msg.first_name,
        last_name=msg.last_name,
        email=msg.email,
        phone_number=msg.phone_number,
        title=msg.title,
        office=msg.office,
    )


def request_staff_member(request) -> Optional[StaffMember]:
    """The request's staff_member, or None when the field was not set at all."""
    if not request.HasField("staff_member"):
        return None
    return staff_member_from_proto(request.staff_member)

from __future__ import annotations

import grpc

from application.services.staff_service import StaffApplicationService
from core.logging_config import get_logger
from grpc_app.generated.staff.v1 import staff_pb2, staff_pb2_grpc
from grpc_app.mappers.staff import request_staff_member, staff_member_to_proto


logger = get_logger(__name__)


class StaffService(staff_pb2_grpc.StaffServiceServicer):
    """Thin adapter from staff.v1.StaffService RPCs to the staff application service.

    Token checks happen in AuthInterceptor and business exceptions are mapped to
    status codes by ExceptionMappingInterceptor; handlers only translate messages.
    """

    def __init__(self, svc: StaffApplicationService) -> None:
        self._svc = svc

    async def GetStaffMember(self, request: staff_pb2.GetStaffMemberRequest, context: grpc.aio.ServicerContext) -> staff_pb2.GetStaffMemberResponse:  # type: ignore[override]
        logger.debug("get_staff_member_request", staff_id=request.staff_id)
        staff_member = await self._svc.get_staff_member(request.staff_id)
        return staff_pb2.GetStaffMemberResponse(staff_member=staff_member_to_proto(staff_member))

    async def CreateStaffMember(self, request: staff_pb2.CreateStaffMemberRequest, context: grpc.aio.ServicerContext) -> staff_pb2.CreateStaffMemberResponse:  # type: ignore[override]
        logger.debug(
            "create_staff_member_request",
            staff_id=request.staff_member.staff_id,
            first_name=request.staff_member.first_name,
            last_name=request.staff_member.last_name,
        )
        staff_member = await self._svc.add_staff_member(request_staff_member(request))
        return staff_pb2.CreateStaffMemberResponse(staff_member=staff_member_to_proto(staff_member))

    async def UpdateStaffMember(self, request: staff_pb2.UpdateStaffMemberRequest, context: grpc.aio.ServicerContext) -> staff_pb2.UpdateStaffMemberResponse:  # type: ignore[override]
        update_mask = list(request.update_mask.paths) if request.HasField("update_mask") else None
        logger.debug(
            "update_staff_member_request",
            staff_id=request.staff_member.staff_id,
            update_mask=update_mask,
        )
        staff_member = await self._svc.update_staff_member(request_staff_member(request), update_mask)
        return staff_pb2.UpdateStaffMemberResponse(staff_member=staff_member_to_proto(staff_member))

    async def DeleteStaffMember(self, request: staff_pb2.DeleteStaffMemberRequest, context: grpc.aio.ServicerContext) -> staff_pb2.DeleteStaffMemberResponse:  # type: ignore[override]
        logger.debug("delete_staff_member_request", staff_id=request.staff_id)
        await self._svc.delete_staff_member(request.staff_id)
        return staff_pb2.DeleteStaffMemberResponse()

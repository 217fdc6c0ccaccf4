import grpc
import pytest

from domain.common.exceptions import (
    DomainValidationException,
    StaffMemberNotFoundException,
    StoreBackendException,
)
from grpc_app.generated.staff.v1 import staff_pb2, staff_pb2_grpc
from grpc_app.interceptors.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    ExceptionMappingInterceptor,
    business_code_to_grpc_status,
)
from shared.codes import BusinessCode


pytestmark = pytest.mark.asyncio


class RaisingStaffService(staff_pb2_grpc.StaffServiceServicer):
    """Each RPC raises a different kind of error."""

    async def GetStaffMember(self, request, context):  # type: ignore[override]
        raise StaffMemberNotFoundException(request.staff_id)

    async def CreateStaffMember(self, request, context):  # type: ignore[override]
        raise DomainValidationException("参数验证失败", field="email")

    async def UpdateStaffMember(self, request, context):  # type: ignore[override]
        try:
            raise ConnectionResetError("connection to server at 10.0.0.5 lost")
        except ConnectionResetError as exc:
            raise StoreBackendException("update") from exc

    async def DeleteStaffMember(self, request, context):  # type: ignore[override]
        raise RuntimeError("boom: secret internals")


@pytest.fixture
async def raising_stub():
    server = grpc.aio.server(interceptors=[ExceptionMappingInterceptor()])
    staff_pb2_grpc.add_StaffServiceServicer_to_server(RaisingStaffService(), server)
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    try:
        async with grpc.aio.insecure_channel(f"127.0.0.1:{port}") as channel:
            yield staff_pb2_grpc.StaffServiceStub(channel)
    finally:
        await server.stop(grace=None)


async def test_not_found_mapping(raising_stub):
    with pytest.raises(grpc.aio.AioRpcError) as ei:
        await raising_stub.GetStaffMember(staff_pb2.GetStaffMemberRequest(staff_id="x"))
    assert ei.value.code() == grpc.StatusCode.NOT_FOUND
    assert ei.value.details() == "Staff member not found"
    trailing = dict(ei.value.trailing_metadata() or ())
    assert trailing.get("x-biz-code") == str(BusinessCode.STAFF_MEMBER_NOT_FOUND.value)


async def test_validation_mapping(raising_stub):
    with pytest.raises(grpc.aio.AioRpcError) as ei:
        await raising_stub.CreateStaffMember(staff_pb2.CreateStaffMemberRequest())
    assert ei.value.code() == grpc.StatusCode.INVALID_ARGUMENT
    assert dict(ei.value.trailing_metadata() or ()).get("x-error-type") == "DomainValidationError"


async def test_backend_error_is_opaque(raising_stub):
    with pytest.raises(grpc.aio.AioRpcError) as ei:
        await raising_stub.UpdateStaffMember(staff_pb2.UpdateStaffMemberRequest())
    assert ei.value.code() == grpc.StatusCode.INTERNAL
    assert ei.value.details() == INTERNAL_ERROR_MESSAGE
    assert "10.0.0.5" not in ei.value.details()


async def test_unexpected_error_is_internal(raising_stub):
    with pytest.raises(grpc.aio.AioRpcError) as ei:
        await raising_stub.DeleteStaffMember(staff_pb2.DeleteStaffMemberRequest(staff_id="x"))
    assert ei.value.code() == grpc.StatusCode.INTERNAL
    assert ei.value.details() == INTERNAL_ERROR_MESSAGE
    assert dict(ei.value.trailing_metadata() or ()).get("x-error-type") == "SystemError"


@pytest.mark.parametrize(
    "code,status",
    [
        (BusinessCode.PARAM_MISSING, grpc.StatusCode.INVALID_ARGUMENT),
        (BusinessCode.PARAM_VALIDATION_ERROR, grpc.StatusCode.INVALID_ARGUMENT),
        (BusinessCode.STAFF_MEMBER_NOT_FOUND, grpc.StatusCode.NOT_FOUND),
        (BusinessCode.STAFF_MEMBER_ALREADY_EXISTS, grpc.StatusCode.ALREADY_EXISTS),
        (BusinessCode.UNAUTHORIZED, grpc.StatusCode.UNAUTHENTICATED),
        (BusinessCode.TOKEN_EXPIRED, grpc.StatusCode.UNAUTHENTICATED),
        (BusinessCode.DATABASE_ERROR, grpc.StatusCode.INTERNAL),
        (999999, grpc.StatusCode.FAILED_PRECONDITION),
    ],
)
async def test_business_code_to_grpc_status(code, status):
    assert business_code_to_grpc_status(code) == status


async def test_every_business_code_has_a_status():
    for code in BusinessCode:
        assert business_code_to_grpc_status(code) != grpc.StatusCode.FAILED_PRECONDITION, code

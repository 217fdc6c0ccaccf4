"""Pytest bootstrap configuration.

Generates the gRPC stubs before any test module imports them, and provides a
SQLite-backed staff store plus an in-process gRPC server on an ephemeral port.
"""
import grpc
import pytest

from grpc_app.codegen import generate

# Stubs are build artifacts; make sure they exist before test collection
generate()

from application.services.staff_service import StaffApplicationService  # noqa: E402
from application.services.token_service import AllowAllVerifier  # noqa: E402
from core.config import Settings  # noqa: E402
from grpc_app.generated.staff.v1 import staff_pb2_grpc  # noqa: E402
from grpc_app.server import create_server  # noqa: E402
from infrastructure.bootstrap import bootstrap  # noqa: E402
from infrastructure.database import create_engine, create_session_factory  # noqa: E402
from infrastructure.unit_of_work import make_uow_factory  # noqa: E402


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        DSN=f"sqlite:///{tmp_path / 'staff.db'}",
        DP_NAME="staff_test",
    )


@pytest.fixture
async def engine(test_settings):
    engine = create_engine(test_settings)
    await bootstrap(test_settings, engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def uow_factory(engine):
    return make_uow_factory(create_session_factory(engine))


@pytest.fixture
def staff_service(uow_factory) -> StaffApplicationService:
    return StaffApplicationService(uow_factory)


@pytest.fixture
def verifier():
    """Override in a test module to exercise a different auth gate."""
    return AllowAllVerifier()


@pytest.fixture
async def staff_server(test_settings, staff_service, verifier):
    server, port = await create_server(test_settings, staff_service, verifier, address="127.0.0.1:0")
    await server.start()
    try:
        yield f"127.0.0.1:{port}"
    finally:
        await server.stop(grace=None)


@pytest.fixture
async def channel(staff_server):
    async with grpc.aio.insecure_channel(staff_server) as channel:
        yield channel


@pytest.fixture
def stub(channel) -> staff_pb2_grpc.StaffServiceStub:
    return staff_pb2_grpc.StaffServiceStub(channel)

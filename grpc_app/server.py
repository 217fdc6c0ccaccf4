from __future__ import annotations

from typing import Sequence
import grpc
from grpc_health.v1 import health, health_pb2_grpc, health_pb2

from application.services.staff_service import StaffApplicationService
from application.services.token_service import TokenVerifier
from core.config import Settings
from core.logging_config import get_logger
from grpc_app.interceptors.request_id import RequestIdInterceptor
from grpc_app.interceptors.logging import LoggingInterceptor
from grpc_app.interceptors.exceptions import ExceptionMappingInterceptor
from grpc_app.interceptors.auth import AuthInterceptor
from grpc_app.generated.staff.v1 import staff_pb2, staff_pb2_grpc
from grpc_app.services.staff_service import StaffService


logger = get_logger(__name__)

STAFF_SERVICE_NAME = staff_pb2.DESCRIPTOR.services_by_name["StaffService"].full_name


def _server_credentials(settings: Settings) -> grpc.ServerCredentials:
    tls = settings.grpc.tls
    if not (tls.cert and tls.key):
        raise RuntimeError("GRPC TLS enabled but cert/key not provided")
    with open(tls.cert, "rb") as f:
        cert_chain = f.read()
    with open(tls.key, "rb") as f:
        private_key = f.read()
    root_certificates = None
    if tls.ca:
        with open(tls.ca, "rb") as f:
            root_certificates = f.read()
    return grpc.ssl_server_credentials(
        [(private_key, cert_chain)],
        root_certificates=root_certificates,
        require_client_auth=bool(root_certificates),
    )


async def create_server(
    settings: Settings,
    staff_service: StaffApplicationService,
    verifier: TokenVerifier,
    address: str | None = None,
) -> tuple[grpc.aio.Server, int]:
    """Build the gRPC server with all handlers registered and bind it.

    Returns the server (not yet started) and the bound port, which differs from
    the configured one when binding to port 0.
    """
    interceptors: Sequence[grpc.aio.ServerInterceptor] = (
        RequestIdInterceptor(),
        LoggingInterceptor(),
        ExceptionMappingInterceptor(),  # maps business exceptions
        AuthInterceptor(verifier),       # rejects missing/invalid tokens
    )

    options = [
        ("grpc.max_concurrent_streams", max(1, settings.grpc.max_concurrent_streams)),
    ]
    server = grpc.aio.server(interceptors=interceptors, options=options)

    # Register services
    staff_pb2_grpc.add_StaffServiceServicer_to_server(StaffService(staff_service), server)

    # Health service
    health_svc = health.aio.HealthServicer()
    health_pb2_grpc.add_HealthServicer_to_server(health_svc, server)
    await health_svc.set("", health_pb2.HealthCheckResponse.SERVING)
    await health_svc.set(STAFF_SERVICE_NAME, health_pb2.HealthCheckResponse.SERVING)

    # Bind address
    address = address or settings.grpc_address

    if settings.grpc.tls.enabled:
        port = server.add_secure_port(address, _server_credentials(settings))
    else:
        port = server.add_insecure_port(address)

    logger.debug("grpc_server_created", address=address, port=port, tls=settings.grpc.tls.enabled)
    return server, port

import asyncio
import signal
import sys
from typing import Optional

import click

from core.config import settings
from core.logging_config import configure_logging, get_logger
from application.services.staff_service import StaffApplicationService
from application.services.token_service import TokenVerifier, create_token_verifier
from grpc_app.server import create_server
from infrastructure.bootstrap import BootstrapError, bootstrap, build_engine
from infrastructure.database import create_session_factory
from infrastructure.unit_of_work import make_uow_factory


logger = get_logger(__name__)


async def serve(verifier: TokenVerifier, address: Optional[str] = None) -> None:
    engine = build_engine(settings)
    try:
        await bootstrap(settings, engine)
        staff_service = StaffApplicationService(make_uow_factory(create_session_factory(engine)))
        server, port = await create_server(settings, staff_service, verifier, address=address)

        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop.set)

        logger.info("grpc_starting", address=address or settings.grpc_address, port=port)
        await server.start()
        logger.info("grpc_started", port=port, database=settings.DP_NAME)

        await stop.wait()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        # Stop accepting new RPCs and let in-flight ones drain
        logger.info("grpc_stopping", grace=settings.grpc.shutdown_grace)
        await server.stop(grace=settings.grpc.shutdown_grace)
        logger.info("grpc_stopped")
    finally:
        await engine.dispose()


@click.command()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--address", default=None, help="Listen address, overrides STAFF_PORT/GRPC_PORT.")
def main(verbose: bool, address: Optional[str]) -> None:
    """Run the staff gRPC service."""
    if verbose:
        configure_logging("DEBUG")
    try:
        verifier = create_token_verifier(settings.auth)
    except ValueError as exc:
        logger.critical("invalid_auth_configuration", error=str(exc))
        sys.exit(2)
    try:
        asyncio.run(serve(verifier, address))
    except BootstrapError as exc:
        logger.critical("bootstrap_failed", error=str(exc))
        sys.exit(1)


if __name__ == "__main__":
    main()

from __future__ import annotations

from typing import Any, Callable, Awaitable, Iterable, Optional

import grpc

from application.services.token_service import TokenVerifier
from core.exceptions import UnauthorizedException
from core.logging_config import get_logger


logger = get_logger(__name__)

# Methods that never carry a token
DEFAULT_ANONYMOUS_METHODS = frozenset({
    "/grpc.health.v1.Health/Check",
    "/grpc.health.v1.Health/Watch",
})


def extract_token(request: Any, metadata: dict[str, str]) -> Optional[str]:
    """Token from the request's `token` field, else `authorization: Bearer <token>` metadata."""
    token = getattr(request, "token", None)
    if token:
        return token
    auth = metadata.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None


class AuthInterceptor(grpc.aio.ServerInterceptor):
    """Bearer token gate applied before every non-anonymous RPC.

    Verification failures are raised as business exceptions and mapped to
    UNAUTHENTICATED by ExceptionMappingInterceptor, so it must run inside it.
    The handler never runs for a rejected token.
    """

    def __init__(self, verifier: TokenVerifier, anonymous_methods: Iterable[str] = DEFAULT_ANONYMOUS_METHODS) -> None:
        self._verifier = verifier
        self._anonymous_methods = frozenset(anonymous_methods)

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        # 获取下游原始处理器
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        method = handler_call_details.method
        if method in self._anonymous_methods:
            return handler

        md = {k.lower(): v for k, v in (handler_call_details.invocation_metadata or [])}

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            token = extract_token(request, md)
            if not token:
                logger.warning("grpc_missing_token", method=method)
                raise UnauthorizedException("Missing bearer token")

            await self._verifier.verify(token)
            return await handler.unary_unary(request, context)

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                _unary_unary,
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler

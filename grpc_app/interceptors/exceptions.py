from __future__ import annotations

from typing import Callable, Awaitable
import contextvars

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import REQUEST_ID_META_KEY, get_request_id
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode


logger = get_logger(__name__)

# Mark that the current request has been mapped to a gRPC status
_mapped_error: contextvars.ContextVar[bool] = contextvars.ContextVar("grpc_mapped_error", default=False)

# Message returned for anything that is not a classified business error
INTERNAL_ERROR_MESSAGE = "internal error"


def set_mapped_error() -> None:
    _mapped_error.set(True)


def is_mapped_error() -> bool:
    return bool(_mapped_error.get())


def business_code_to_grpc_status(code: int) -> grpc.StatusCode:
    try:
        bc = BusinessCode(code)
    except ValueError:
        return grpc.StatusCode.FAILED_PRECONDITION

    mapping = {
        BusinessCode.PARAM_VALIDATION_ERROR: grpc.StatusCode.INVALID_ARGUMENT,
        BusinessCode.PARAM_MISSING: grpc.StatusCode.INVALID_ARGUMENT,

        BusinessCode.STAFF_MEMBER_NOT_FOUND: grpc.StatusCode.NOT_FOUND,
        BusinessCode.STAFF_MEMBER_ALREADY_EXISTS: grpc.StatusCode.ALREADY_EXISTS,
        BusinessCode.TOKEN_EXPIRED: grpc.StatusCode.UNAUTHENTICATED,

        BusinessCode.UNAUTHORIZED: grpc.StatusCode.UNAUTHENTICATED,

        BusinessCode.SYSTEM_ERROR: grpc.StatusCode.INTERNAL,
        BusinessCode.DATABASE_ERROR: grpc.StatusCode.INTERNAL,
    }

    return mapping.get(bc, grpc.StatusCode.FAILED_PRECONDITION)


def _trailing_metadata(code: int, error_type: str) -> tuple[tuple[str, str], ...]:
    md = [("x-biz-code", str(code)), ("x-error-type", error_type)]
    request_id = get_request_id()
    if request_id:
        md.append((REQUEST_ID_META_KEY, request_id))
    return tuple(md)


class ExceptionMappingInterceptor(grpc.aio.ServerInterceptor):
    """Translate exceptions raised below this interceptor into gRPC status codes, once."""

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        method = handler_call_details.method

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            try:
                return await handler.unary_unary(request, context)
            except grpc.aio.AbortError:
                # context.abort() already set the status
                raise
            except BusinessException as exc:
                status = business_code_to_grpc_status(exc.code)
                context.set_trailing_metadata(
                    _trailing_metadata(exc.code, exc.error_type or "BusinessError")
                )
                set_mapped_error()
                # Internal errors keep their message out of the response
                message = INTERNAL_ERROR_MESSAGE if status == grpc.StatusCode.INTERNAL else exc.message
                # Concise business error log (no stack)
                logger.error(
                    "grpc_mapped_error",
                    method=method,
                    code=str(exc.code),
                    status=str(status),
                    message=exc.message,
                    cause=repr(exc.__cause__) if exc.__cause__ else None,
                )
                await context.abort(status, message)
            except Exception as exc:
                context.set_trailing_metadata(
                    _trailing_metadata(BusinessCode.SYSTEM_ERROR.value, "SystemError")
                )
                set_mapped_error()
                logger.error(
                    "grpc_mapped_error",
                    method=method,
                    code=str(BusinessCode.SYSTEM_ERROR.value),
                    status=str(grpc.StatusCode.INTERNAL),
                    message=str(exc),
                    exc_info=True,
                )
                await context.abort(grpc.StatusCode.INTERNAL, INTERNAL_ERROR_MESSAGE)

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                _unary_unary,
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler

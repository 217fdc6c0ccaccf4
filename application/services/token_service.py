"""
令牌校验服务 - 校验调用方提供的 Bearer JWT

只关心校验是否成功，不检查任何角色/权限声明。
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

import jwt

from core.config import AuthSettings
from core.exceptions import UnauthorizedException, TokenExpiredException
from core.logging_config import get_logger


logger = get_logger(__name__)


class TokenVerifier(ABC):
    """Bearer token verifier used by the auth gate."""

    @abstractmethod
    async def verify(self, token: str) -> dict[str, Any]:
        """Return the verified claims.

        Raises:
            TokenExpiredException: the token signature is valid but expired
            UnauthorizedException: missing, malformed or otherwise invalid token
        """


class AllowAllVerifier(TokenVerifier):
    """Accepts every token. Testing hook only; never wired by the entry point."""

    async def verify(self, token: str) -> dict[str, Any]:
        return {}


class JWTTokenVerifier(TokenVerifier):
    """Verify JWTs with a shared secret (HS*) or a JWKS endpoint (RS*/ES*)."""

    def __init__(self, auth: AuthSettings):
        if not auth.secret_key and not auth.jwks_url:
            raise ValueError("AUTH__SECRET_KEY 或 AUTH__JWKS_URL 至少需要配置一个")
        self._auth = auth
        self._jwks_client: Optional[jwt.PyJWKClient] = None
        if auth.jwks_url:
            self._jwks_client = jwt.PyJWKClient(
                auth.jwks_url,
                cache_jwk_set=True,
                lifespan=auth.jwks_cache_seconds,
            )
            self._algorithms = auth.algorithms or ["RS256"]
        else:
            self._algorithms = auth.algorithms or ["HS256"]

    async def _signing_key(self, token: str) -> Any:
        if self._jwks_client is None:
            return self._auth.secret_key
        # PyJWKClient 使用阻塞 IO 拉取 JWKS，放到线程中执行
        signing_key = await asyncio.to_thread(self._jwks_client.get_signing_key_from_jwt, token)
        return signing_key.key

    async def verify(self, token: str) -> dict[str, Any]:
        if not token:
            raise UnauthorizedException("Missing bearer token")
        try:
            key = await self._signing_key(token)
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                audience=self._auth.audience,
                issuer=self._auth.issuer,
                leeway=self._auth.leeway_seconds,
                options={"verify_aud": self._auth.audience is not None},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredException()
        except jwt.PyJWTError as e:
            logger.warning("invalid_access_token", error=str(e))
            raise UnauthorizedException("Invalid bearer token")
        return claims


def create_token_verifier(auth: AuthSettings) -> TokenVerifier:
    return JWTTokenVerifier(auth)

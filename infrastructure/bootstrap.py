"""
启动引导：确保目标数据库与 staff_member 表存在（幂等）

任何失败都会抛出 BootstrapError，调用方不得在此之后开始服务。
"""
from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from core.config import Settings
from core.logging_config import get_logger
from infrastructure.database import create_engine, is_sqlite, server_url
from infrastructure.models import Base


logger = get_logger(__name__)

_DATABASE_EXISTS_SQL = text("SELECT 1 FROM pg_database WHERE datname = :name")

# DSN 解析失败（不支持的驱动、格式错误）以 ValueError 或 ArgumentError 抛出
_BOOTSTRAP_ERRORS = (SQLAlchemyError, OSError, ValueError)


class BootstrapError(RuntimeError):
    """Database or schema could not be ensured."""


async def ensure_database(url: URL, db_name: str) -> bool:
    """Create ``db_name`` on the server behind ``url`` if the catalog has no such database.

    Returns True when the database was created. Only a missing catalog row triggers
    creation; catalog query errors propagate.
    """
    # CREATE DATABASE 不能在事务中执行
    engine = create_async_engine(url, isolation_level="AUTOCOMMIT", poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(_DATABASE_EXISTS_SQL, {"name": db_name})
            if result.scalar() is not None:
                logger.debug("database_exists", database=db_name)
                return False

            quoted = conn.dialect.identifier_preparer.quote(db_name)
            await conn.execute(text(f"CREATE DATABASE {quoted}"))
            logger.info("database_created", database=db_name)
            return True
    finally:
        await engine.dispose()


async def create_schema(engine: AsyncEngine) -> None:
    """创建所有表（已存在的表会被跳过）"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    logger.debug("database_schema_initialized", tables=sorted(Base.metadata.tables))


async def bootstrap(settings: Settings, engine: AsyncEngine) -> None:
    """Ensure the configured database and schema exist before serving.

    ``engine`` must already point at the target database; it is only used after
    the database has been ensured, so connecting lazily is safe.
    """
    try:
        url = server_url(settings)
        if is_sqlite(url):
            logger.debug("database_check_skipped", backend=url.get_backend_name())
        else:
            await ensure_database(url, settings.DP_NAME)
        await create_schema(engine)
    except _BOOTSTRAP_ERRORS as exc:
        logger.error("bootstrap_failed", database=settings.DP_NAME, error=str(exc))
        raise BootstrapError(f"failed to bootstrap database {settings.DP_NAME}: {exc}") from exc


def build_engine(settings: Settings) -> AsyncEngine:
    """创建指向目标库的引擎；DSN 无法使用时同样视为启动失败"""
    try:
        return create_engine(settings)
    except _BOOTSTRAP_ERRORS as exc:
        logger.error("bootstrap_failed", database=settings.DP_NAME, error=str(exc))
        raise BootstrapError(f"invalid DSN for database {settings.DP_NAME}: {exc}") from exc

"""
数据库配置和连接管理

引擎与会话工厂在进程启动时创建一次，并显式传递给服务层；
本模块不持有全局引擎。
"""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.engine import URL, make_url

from core.config import Settings


def _build_async_url(database_url: str) -> URL:
    """确保数据库URL使用异步驱动"""
    url = make_url(database_url)
    drivername = url.drivername

    if "+" not in drivername:
        driver_map = {
            "postgresql": "postgresql+asyncpg",
            "postgres": "postgresql+asyncpg",
            "sqlite": "sqlite+aiosqlite",
        }
        if drivername not in driver_map:
            raise ValueError(f"不支持的数据库驱动: {drivername}. 请使用 async 驱动或更新DSN")
        url = url.set(drivername=driver_map[drivername])

    # libpq 风格的 sslmode 参数在 asyncpg 中名为 ssl
    if url.drivername == "postgresql+asyncpg" and "sslmode" in url.query:
        sslmode = url.query["sslmode"]
        url = url.difference_update_query(["sslmode"]).update_query_dict({"ssl": sslmode})
    return url


def is_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite"


def server_url(settings: Settings) -> URL:
    """连接数据库服务器本身（用于检查/创建目标库）"""
    url = _build_async_url(settings.DSN)
    if not is_sqlite(url) and not url.database:
        url = url.set(database="postgres")
    return url


def target_url(settings: Settings) -> URL:
    """连接 DP_NAME 指定的目标库；SQLite 的库即文件本身"""
    url = _build_async_url(settings.DSN)
    if is_sqlite(url):
        return url
    return url.set(database=settings.DP_NAME)


def create_engine(settings: Settings) -> AsyncEngine:
    """创建进程内唯一的连接池"""
    url = target_url(settings)
    kwargs = {
        "echo": settings.db.echo,
        "future": True,
        "pool_pre_ping": settings.db.pool_pre_ping,
    }
    if not is_sqlite(url):
        kwargs["pool_size"] = settings.db.pool_size
        kwargs["max_overflow"] = settings.db.max_overflow
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
    )

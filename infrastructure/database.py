"""
数据库配置和连接管理

聊天记录、屏蔽/举报记录与用户资料共用一个异步引擎；
实时转发只在屏蔽校验时以只读会话访问数据库。
"""
from typing import Any, Dict

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings
from core.logging_config import get_logger
from infrastructure.models import Base


logger = get_logger(__name__)

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "postgres": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def _build_async_url(database_url: str) -> URL:
    """确保数据库URL使用异步驱动"""
    url = make_url(database_url)
    if "+" in url.drivername:
        return url
    if url.drivername not in _ASYNC_DRIVERS:
        raise ValueError(f"不支持的数据库驱动: {url.drivername}. 请使用 postgresql 或 sqlite")
    return url.set(drivername=_ASYNC_DRIVERS[url.drivername])


def _engine_options(url: URL) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.DEBUG, "future": True}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        # 内存库只存在于单个连接上
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    else:
        options["pool_pre_ping"] = True
    return options


_url = _build_async_url(settings.database.url)
engine = create_async_engine(_url, **_engine_options(_url))

# 创建异步会话工厂
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)


async def create_tables() -> None:
    """开发环境建表：users / messages / blocked_users / reports"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_tables_created", tables=sorted(Base.metadata.tables))


async def dispose_engine() -> None:
    """关闭连接池（应用退出时调用）"""
    await engine.dispose()

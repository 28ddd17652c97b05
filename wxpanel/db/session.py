"""
File: wxpanel/db/session.py
Description: 数据库句柄管理 (Async SQLAlchemy + aiosqlite)

本模块负责：
1. Database: 持有 AsyncEngine 与 AsyncSession 工厂，由应用 lifespan 创建一次，
   挂载在 app.state 上，通过依赖注入传递给各个请求 (不使用模块级全局引擎)
2. SQLite 连接开启外键约束 (PRAGMA foreign_keys=ON)
3. init_schema: 按固定顺序逐表建表，遇到第一个错误立即失败
4. dispose: 应用关闭时释放连接池

Created: 2025-11-24
Updated: 2026-03-02 (Explicit handle, ordered schema steps)
"""

from typing import Any

from loguru import logger
from sqlalchemy import event
from sqlalchemy.engine.interfaces import DBAPIConnection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import ConnectionPoolEntry

from wxpanel.db.models import Base

# 建表顺序：被引用的表在前
SCHEMA_STEPS: tuple[str, ...] = (
    "users",
    "auth_keys",
    "wechat_accounts",
    "devices",
)


def _enable_sqlite_foreign_keys(
    dbapi_connection: DBAPIConnection, connection_record: ConnectionPoolEntry
) -> None:
    """SQLite 默认不校验外键，每个新连接都需要显式开启。"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    数据库句柄。

    用法:
        database = Database(settings.SQLALCHEMY_DATABASE_URI)
        await database.init_schema()
        async with database.session_factory() as session: ...
        await database.dispose()
    """

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url, echo=echo, **engine_kwargs
        )

        if self.engine.dialect.name == "sqlite":
            event.listen(
                self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys
            )

        # expire_on_commit=False: 避免 commit 后访问属性触发隐式 IO
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    async def init_schema(self) -> None:
        """
        按 SCHEMA_STEPS 顺序建表 (已存在则跳过)。
        任一步骤失败即抛出异常，阻止应用继续启动。
        """
        async with self.engine.begin() as conn:
            for table_name in SCHEMA_STEPS:
                table = Base.metadata.tables[table_name]
                try:
                    await conn.run_sync(table.create, checkfirst=True)
                except Exception:
                    logger.bind(table=table_name).error("Schema step failed")
                    raise
                logger.bind(table=table_name).debug("Schema step applied")

        logger.bind(steps=len(SCHEMA_STEPS)).info("Database schema ready")

    async def drop_schema(self) -> None:
        """按建表的逆序删表 (测试用)。"""
        async with self.engine.begin() as conn:
            for table_name in reversed(SCHEMA_STEPS):
                await conn.run_sync(
                    Base.metadata.tables[table_name].drop, checkfirst=True
                )

    async def dispose(self) -> None:
        """关闭数据库引擎，释放连接池资源。"""
        await self.engine.dispose()

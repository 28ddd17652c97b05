"""
File: alembic/env.py
Description: Alembic 迁移环境 (同步 sqlite3 驱动)

- 运行时使用 aiosqlite；迁移时把 URL 换成同步的 sqlite 驱动，避免事件循环问题
- SQLite 不支持大部分 ALTER TABLE，迁移统一开启 render_as_batch
- batch 模式会重建表，迁移期间关闭外键检查，结束后恢复

Created: 2025-11-26
Updated: 2026-03-02 (SQLite batch mode)
"""

import sys
from logging.config import fileConfig
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, pool, text

from alembic import context  # type: ignore

# 项目根目录加入 sys.path，以便导入 wxpanel
sys.path.insert(0, str(Path(__file__).parent.parent.resolve()))

from wxpanel.core.config import settings  # noqa: E402
from wxpanel.db.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# configparser 会把 % 当作插值符号
SYNC_URL = settings.SQLALCHEMY_DATABASE_URI.replace("+aiosqlite", "")
config.set_main_option("sqlalchemy.url", SYNC_URL.replace("%", "%%"))

target_metadata = Base.metadata


def _context_options() -> dict[str, Any]:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": True,
    }


def run_migrations_offline() -> None:
    """离线模式：只生成 SQL 脚本"""
    context.configure(
        url=SYNC_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_context_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """在线模式：连接数据库执行迁移"""
    engine = create_engine(SYNC_URL, poolclass=pool.NullPool)

    with engine.connect() as connection:
        is_sqlite = connection.dialect.name == "sqlite"
        if is_sqlite:
            connection.execute(text("PRAGMA foreign_keys=OFF"))

        context.configure(connection=connection, **_context_options())
        with context.begin_transaction():
            context.run_migrations()

        if is_sqlite:
            connection.execute(text("PRAGMA foreign_keys=ON"))

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()

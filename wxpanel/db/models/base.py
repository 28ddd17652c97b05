"""
File: wxpanel/db/models/base.py
Description: ORM 模型基类与组件化定义

采用"组件化组合" (Mixin) 模式：
1. UTCDateTime: [类型] 以 naive UTC 落库、读出时恢复 tz-aware (SQLite 不保存时区)
2. IntIdBase: [基础] 自增整数主键 + update 工具方法
3. CreatedAtMixin / TimestampMixin: [组件] 创建/更新时间 (UTC)
4. IntModel: [标准] IntIdBase + TimestampMixin

Created: 2025-11-25
Updated: 2026-03-02 (Integer keys + UTCDateTime for SQLite)
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import DateTime, Integer, MetaData, func
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

# 约束命名约定 (Alembic 迁移依赖稳定的约束名)
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    """当前 UTC 时间 (tz-aware)"""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator[datetime]):
    """
    UTC 时间类型。

    写入: tz-aware 时间统一换算为 UTC 后去掉 tzinfo
    读出: 补回 UTC tzinfo，业务层始终拿到 tz-aware 时间
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value

    def process_result_value(
        self, value: datetime | None, dialect: Dialect
    ) -> datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    """SQLAlchemy 声明式元类"""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ==============================================================================
# 1. 功能组件 (Mixins)
# ==============================================================================


class CreatedAtMixin:
    """[组件] 仅创建时间 (只增不改的表，如授权码、设备)"""

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        comment="创建时间 (UTC)",
    )


class TimestampMixin(CreatedAtMixin):
    """
    [组件] 时间戳混入类

    提供 created_at 和 updated_at 字段，统一以 UTC 存储。
    """

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
        comment="更新时间 (UTC)",
    )


# ==============================================================================
# 2. 基础模型 (Base Models)
# ==============================================================================


class IntIdBase(Base):
    """
    [纯净版] 仅包含自增 ID 和基础工具方法。
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True, comment="主键"
    )

    def update(self, **kwargs: Any) -> None:
        """
        [工具方法] 动态更新模型属性

        用法:
        account.update(**schema.model_dump(exclude_unset=True))
        """
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)


class IntModel(IntIdBase, TimestampMixin):
    """
    [标准版] 通用业务模型基类：自增 ID + 创建/更新时间。
    """

    __abstract__ = True
